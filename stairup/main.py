import uvicorn
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse
from stairup.exceptions.handlers import (
    application_exception_handler,
    http_exception_handler,
    generic_exception_handler
)
from stairup.exceptions.errors import ApplicationException
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from stairup import __version__
from stairup.api.v1.routes import user_router, training_router, history_router
from stairup.core.config import settings
from stairup.core.logger import get_logger
from stairup.gateways import RemoteDataGateway, DatabaseGateway, build_gateway
from stairup.middlewares.token_auth import TokenAuthMiddleware, whitelisted_routes
from stairup.services.auth_service import AuthService
from stairup.services.lap_ledger_service import LapLedger
from stairup.services.session_lifecycle_service import SessionLifecycleManager
from stairup.services.token_store import TokenStore, build_token_store
from stairup.utils.cooldown import LapCooldown

logger = get_logger("stairup")

# Enhanced Swagger configuration for development
swagger_ui_parameters = {
    "deepLinking": True,
    "displayRequestDuration": True,
    "tryItOutEnabled": True,
    "filter": True,
}

if settings.IS_DEVELOPMENT:
    swagger_ui_parameters["persistAuthorization"] = True

# CORS configuration
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]


def create_app(
    gateway: Optional[RemoteDataGateway] = None,
    token_store: Optional[TokenStore] = None,
    cooldown: Optional[LapCooldown] = None
) -> FastAPI:
    """
    Build the application.

    Anything not passed in is built from settings when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 StairUp is starting...")
        try:
            store = token_store or build_token_store(settings.TOKEN_FILE)
            data_gateway = gateway or build_gateway(settings)

            if isinstance(data_gateway, DatabaseGateway) and settings.IS_DEVELOPMENT:
                await data_gateway.create_schema()
                logger.info("Application database tables ensured.")

            app.state.token_store = store
            app.state.gateway = data_gateway
            app.state.auth_service = AuthService(data_gateway, store)
            app.state.lifecycle_manager = SessionLifecycleManager(data_gateway, store)
            app.state.lap_ledger = LapLedger(data_gateway, store)
            app.state.lap_cooldown = cooldown or LapCooldown(settings.LAP_COOLDOWN_SECONDS)
        except Exception as e:
            logger.error(f"Failed to initialize application: {e}")
            raise e

        yield

        logger.info("🛑 StairUp is shutting down...")
        await app.state.gateway.aclose()

    app = FastAPI(
        title="StairUp",
        version=__version__,
        lifespan=lifespan,
        description="""
        Stair-climbing training tracker.

        ## Authentication

        Log in with `POST /api/v1/auth/login`. The session token is kept by
        this client; every other route answers 401 until a user is logged in.
        """,
        swagger_ui_parameters=swagger_ui_parameters,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        TokenAuthMiddleware,
        whitelisted_routes=whitelisted_routes
    )

    app.include_router(user_router, prefix="/api/v1")
    app.include_router(training_router, prefix="/api/v1")
    app.include_router(history_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "StairUp API",
            "docs": "/docs",
            "authenticated": app.state.token_store.is_authenticated(),
            "version": __version__
        }

    # 404 middleware, only for paths no route matched
    @app.middleware("http")
    async def catch_all_404_middleware(request: Request, call_next):
        response = await call_next(request)
        if response.status_code == 404 and "endpoint" not in request.scope:
            return JSONResponse(
                status_code=404,
                content={"error": "Route not found", "path": str(request.url.path)}
            )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")

        errors = []
        for error in exc.errors():
            errors.append({
                "type": error.get("type"),
                "loc": error.get("loc"),
                "msg": error.get("msg"),
                "input": str(error.get("input")) if error.get("input") is not None else None
            })

        return JSONResponse(
            status_code=422,
            content={"error": "Invalid request", "detail": errors}
        )

    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "stairup.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.IS_DEVELOPMENT,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30
    )
