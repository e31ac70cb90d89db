from typing import List
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from stairup.core.logger import get_logger

logger = get_logger("token_auth_middleware")

whitelisted_routes = [
    "/docs", "/openapi.json", "/redoc", "/favicon.ico",
    "/api/v1/auth/login", "/api/v1/auth/register", "/api/v1/auth/logout",
]

# Matched exactly rather than by prefix
public_paths = {"/"}


class TokenAuthMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests to protected routes while no user is logged in.

    The token itself is only validated by the remote data service; a rejected
    token surfaces later as an AuthError and clears the store.
    """

    def __init__(self, app, whitelisted_routes: List[str] = None):
        super().__init__(app)
        self.whitelisted_routes = whitelisted_routes or []

    def _is_whitelisted(self, path: str) -> bool:
        if path in public_paths:
            return True
        for route in self.whitelisted_routes:
            if path.startswith(route):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        if self._is_whitelisted(request.url.path):
            return await call_next(request)

        # Skip authentication for OPTIONS requests (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        token_store = request.app.state.token_store
        if not token_store.is_authenticated():
            logger.warning(f"Unauthenticated request to {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Not authenticated, please log in"}
            )

        return await call_next(request)
