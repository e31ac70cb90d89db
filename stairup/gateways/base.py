"""
Remote Data Gateway contract.

The remote data service is the only system of record for users, sessions and
laps. Every binding raises the errors from ``stairup.exceptions``:

- ``AuthError`` when the token is missing, expired or rejected
- ``NotFoundError`` when a session does not exist or belongs to someone else
- ``ConflictError`` from ``create_session`` when an active session already exists
- ``StateError`` from ``record_lap``/``finish_session``/``cancel_session`` on a
  session that is not active
- ``NetworkError`` when no response was received
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from stairup.enums import RankingMetric
from stairup.schemas.session_schemas import TrainingSession, LapEvent
from stairup.schemas.user_schemas import AuthResult, User, UserStats, RankingUser


class RemoteDataGateway(ABC):

    # Users
    @abstractmethod
    async def authenticate(self, identifier: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    async def register(self, username: str, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    async def get_current_user(self, token: str) -> User:
        ...

    @abstractmethod
    async def update_current_user(
        self,
        token: str,
        username: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> User:
        ...

    @abstractmethod
    async def get_user_stats(self, token: str) -> UserStats:
        ...

    @abstractmethod
    async def get_rankings(
        self,
        token: str,
        limit: int = 10,
        by: RankingMetric = RankingMetric.TOTAL_FLOORS
    ) -> List[RankingUser]:
        ...

    # Sessions
    @abstractmethod
    async def get_active_session(self, token: str) -> Optional[TrainingSession]:
        ...

    @abstractmethod
    async def create_session(self, token: str, floors_per_lap: int, target_floors: int) -> TrainingSession:
        ...

    @abstractmethod
    async def finish_session(self, token: str, session_id: str) -> TrainingSession:
        ...

    @abstractmethod
    async def cancel_session(self, token: str, session_id: str) -> TrainingSession:
        ...

    @abstractmethod
    async def list_finished_sessions(self, token: str) -> List[TrainingSession]:
        ...

    @abstractmethod
    async def get_session(self, token: str, session_id: str) -> TrainingSession:
        ...

    # Laps
    @abstractmethod
    async def record_lap(self, token: str, session_id: str) -> LapEvent:
        ...

    @abstractmethod
    async def get_laps(self, token: str, session_id: str) -> List[LapEvent]:
        """Lap events of a session ordered by lap number."""
        ...

    async def aclose(self) -> None:
        """Release network clients or database engines."""
        return None
