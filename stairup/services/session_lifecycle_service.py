"""
Session Lifecycle Manager

Mediates every state change of the user's training sessions:

    nonexistent --create--> active --finish--> finished
                              |
                              +--cancel--> abandoned

finished and abandoned are terminal. At most one session per user is active.
"""

import math
from numbers import Real
from typing import List, Optional, Tuple

from stairup.core.logger import get_logger
from stairup.enums import SessionStatus
from stairup.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from stairup.schemas.session_schemas import TrainingSession
from stairup.services.base_service import AuthenticatedService

logger = get_logger("session_lifecycle_service")

# Statuses listed in the training history. Abandoned sessions are discarded
# training and stay out of it.
HISTORY_STATUSES = (SessionStatus.FINISHED,)


def validate_session_parameters(floors_per_lap, target_floors) -> Tuple[int, int]:
    """Check both values are finite positive whole numbers and return them as ints."""
    validated = []
    for name, value in (("floors_per_lap", floors_per_lap), ("target_floors", target_floors)):
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ValidationError(f"{name} must be a number")
        if not math.isfinite(value) or value != int(value):
            raise ValidationError(f"{name} must be a whole number")
        if value <= 0:
            raise ValidationError(f"{name} must be greater than 0")
        validated.append(int(value))
    return validated[0], validated[1]


class SessionLifecycleManager(AuthenticatedService):

    async def create_session(self, floors_per_lap, target_floors) -> TrainingSession:
        """
        Start a new active session.

        If the user already has an active session, that session is returned
        instead of creating a second one.
        """
        floors_per_lap, target_floors = validate_session_parameters(floors_per_lap, target_floors)

        try:
            session = await self._call(self.gateway.create_session, floors_per_lap, target_floors)
        except ConflictError:
            existing = await self._call(self.gateway.get_active_session)
            if existing is None:
                raise
            logger.warning(f"Active session {existing.id} already exists, returning it instead of creating a new one")
            return existing

        logger.info(
            f"Started session {session.id}: {floors_per_lap} floors/lap, target {target_floors} floors"
        )
        return session

    async def get_active_session(self) -> Optional[TrainingSession]:
        return await self._call(self.gateway.get_active_session)

    async def get_session_by_id(self, session_id: str) -> TrainingSession:
        return await self._call(self.gateway.get_session, session_id)

    async def _require_active(self, session_id: str) -> TrainingSession:
        try:
            session = await self.get_session_by_id(session_id)
        except NotFoundError as e:
            raise StateError(f"Session {session_id} is not an active session of the current user") from e
        if not session.is_active:
            raise StateError(f"Session {session_id} is already {session.status.value}")
        return session

    async def finish_session(self, session_id: str) -> TrainingSession:
        await self._require_active(session_id)
        session = await self._call(self.gateway.finish_session, session_id)
        logger.info(f"Finished session {session.id}")
        return session

    async def cancel_session(self, session_id: str) -> TrainingSession:
        """Abandon the session. Callers must have the user's explicit confirmation."""
        await self._require_active(session_id)
        session = await self._call(self.gateway.cancel_session, session_id)
        logger.info(f"Abandoned session {session.id}")
        return session

    async def get_finished_sessions(self) -> List[TrainingSession]:
        """Finished sessions of the user, newest first."""
        sessions = await self._call(self.gateway.list_finished_sessions)
        history = [s for s in sessions if s.status in HISTORY_STATUSES]
        return sorted(history, key=lambda s: s.created_at, reverse=True)
