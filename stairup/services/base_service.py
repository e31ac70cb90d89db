from typing import Any, Awaitable, Callable

from stairup.exceptions import AuthError
from stairup.gateways.base import RemoteDataGateway
from stairup.services.token_store import TokenStore


class AuthenticatedService:
    """
    Base for services that call the remote data service on behalf of the
    logged-in user. The token is read from the store on every call; a rejected
    token is invalidated before the AuthError reaches the caller.
    """

    def __init__(self, gateway: RemoteDataGateway, token_store: TokenStore):
        self.gateway = gateway
        self.token_store = token_store

    def _require_token(self) -> str:
        token = self.token_store.get()
        if not token:
            raise AuthError("Not authenticated")
        return token

    async def _call(self, operation: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        token = self._require_token()
        try:
            return await operation(token, *args, **kwargs)
        except AuthError:
            self.token_store.invalidate(token)
            raise
