"""
Training Controller
"""
from typing import Dict

from stairup.exceptions import ValidationError
from stairup.schemas.session_schemas import (
    CreateSessionRequest, SessionActionRequest, CancelSessionRequest
)
from stairup.services.lap_ledger_service import LapLedger
from stairup.services.session_lifecycle_service import SessionLifecycleManager
from stairup.services.statistics_service import SessionStatisticsAggregator
from stairup.utils.cooldown import LapCooldown
from stairup.utils.time_utils import format_duration
from stairup.core.logger import get_logger

logger = get_logger("training_controller")


class TrainingController:
    """Controller for the training page: the active session and its laps."""

    @staticmethod
    async def _session_view(
        ledger: LapLedger,
        cooldown: LapCooldown,
        session_id: str
    ) -> Dict:
        session, laps = await ledger.load(session_id)
        statistics = SessionStatisticsAggregator.compute(session, laps)
        elapsed = SessionStatisticsAggregator.live_elapsed_seconds(session)
        return {
            "session": session,
            "laps": laps,
            "statistics": statistics,
            "elapsed_seconds": elapsed,
            "elapsed_display": format_duration(elapsed),
            "can_operate": session.is_active,
            "cooldown_remaining": cooldown.remaining(session.id) if session.is_active else 0,
        }

    @staticmethod
    async def get_training_view(
        lifecycle_manager: SessionLifecycleManager,
        ledger: LapLedger,
        cooldown: LapCooldown
    ) -> Dict:
        session = await lifecycle_manager.get_active_session()
        if session is not None:
            return await TrainingController._session_view(ledger, cooldown, session.id)

        history = await lifecycle_manager.get_finished_sessions()
        return {
            "session": None,
            "laps": [],
            "statistics": None,
            "elapsed_seconds": 0,
            "elapsed_display": format_duration(0),
            "can_operate": False,
            "cooldown_remaining": 0,
            "suggestions": SessionStatisticsAggregator.suggest_session_parameters(history[:50]),
        }

    @staticmethod
    async def create_session(
        lifecycle_manager: SessionLifecycleManager,
        ledger: LapLedger,
        cooldown: LapCooldown,
        payload: CreateSessionRequest
    ) -> Dict:
        session = await lifecycle_manager.create_session(payload.floors_per_lap, payload.target_floors)
        return await TrainingController._session_view(ledger, cooldown, session.id)

    @staticmethod
    async def record_lap(
        ledger: LapLedger,
        cooldown: LapCooldown,
        payload: SessionActionRequest
    ) -> Dict:
        cooldown.check(payload.session_id)
        lap = await ledger.record_lap(payload.session_id)
        cooldown.mark(payload.session_id)

        view = await TrainingController._session_view(ledger, cooldown, payload.session_id)
        view["lap"] = lap
        return view

    @staticmethod
    async def finish_session(
        lifecycle_manager: SessionLifecycleManager,
        ledger: LapLedger,
        cooldown: LapCooldown,
        payload: SessionActionRequest
    ) -> Dict:
        session = await lifecycle_manager.finish_session(payload.session_id)
        cooldown.forget(session.id)
        view = await TrainingController._session_view(ledger, cooldown, session.id)
        view["redirect_to"] = f"/history/{session.id}"
        return view

    @staticmethod
    async def cancel_session(
        lifecycle_manager: SessionLifecycleManager,
        cooldown: LapCooldown,
        payload: CancelSessionRequest
    ) -> Dict:
        if not payload.confirm:
            logger.info(f"Cancel of session {payload.session_id} rejected: not confirmed")
            raise ValidationError("Cancelling a training session requires confirmation")

        session = await lifecycle_manager.cancel_session(payload.session_id)
        cooldown.forget(session.id)
        return {"session": session, "redirect_to": "/"}
