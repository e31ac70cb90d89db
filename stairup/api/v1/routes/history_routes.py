from fastapi import APIRouter, Depends

from stairup.api.deps import get_lifecycle_manager, get_lap_ledger
from stairup.api.v1.controllers.history_controller import HistoryController
from stairup.services.lap_ledger_service import LapLedger
from stairup.services.session_lifecycle_service import SessionLifecycleManager

router = APIRouter(prefix="/history", tags=["History"])


@router.get("", summary="Finished sessions")
async def list_history(
    lifecycle_manager: SessionLifecycleManager = Depends(get_lifecycle_manager)
):
    """Finished sessions, newest first. Abandoned sessions are not listed."""
    return await HistoryController.list_sessions(lifecycle_manager)


@router.get("/{session_id}", summary="Session detail")
async def get_history_detail(
    session_id: str,
    ledger: LapLedger = Depends(get_lap_ledger)
):
    return await HistoryController.get_session_detail(ledger, session_id)
