from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from stairup.exceptions.errors import ApplicationException
from stairup.core.logger import get_logger

logger = get_logger("exception_handlers")

async def application_exception_handler(request: Request, exc: ApplicationException):
    logger.warning(f"Application error on {request.url.path}: {type(exc).__name__}: {exc.message}")
    return exc.to_response()

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail}
    )

async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {repr(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred"}
    )
