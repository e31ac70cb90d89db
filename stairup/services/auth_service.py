from typing import List, Optional

from stairup.core.logger import get_logger
from stairup.enums import RankingMetric
from stairup.schemas.user_schemas import User, UserStats, RankingUser
from stairup.services.base_service import AuthenticatedService

logger = get_logger("auth_service")


class AuthService(AuthenticatedService):
    """Login, registration and profile operations for the current user."""

    async def login(self, identifier: str, password: str) -> User:
        result = await self.gateway.authenticate(identifier, password)
        self.token_store.set(result.token)
        logger.info(f"Logged in as {result.user.username or result.user.id}")
        return result.user

    async def register(self, username: str, email: str, password: str) -> User:
        result = await self.gateway.register(username, email, password)
        self.token_store.set(result.token)
        logger.info(f"Registered and logged in as {result.user.username}")
        return result.user

    def logout(self) -> None:
        self.token_store.clear()
        logger.info("Logged out")

    def is_authenticated(self) -> bool:
        return self.token_store.is_authenticated()

    async def get_current_user(self) -> User:
        return await self._call(self.gateway.get_current_user)

    async def update_profile(
        self,
        username: Optional[str] = None,
        nickname: Optional[str] = None,
        phone: Optional[str] = None
    ) -> User:
        metadata = {}
        if nickname is not None:
            metadata["nickname"] = nickname
        if phone is not None:
            metadata["phone"] = phone
        return await self._call(
            self.gateway.update_current_user,
            username=username,
            metadata=metadata or None
        )

    async def get_user_stats(self) -> UserStats:
        return await self._call(self.gateway.get_user_stats)

    async def get_rankings(
        self,
        limit: int = 10,
        by: RankingMetric = RankingMetric.TOTAL_FLOORS
    ) -> List[RankingUser]:
        return await self._call(self.gateway.get_rankings, limit=limit, by=by)
