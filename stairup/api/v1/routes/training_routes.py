"""
Training Routes
"""
from fastapi import APIRouter, Depends

from stairup.api.deps import get_lifecycle_manager, get_lap_ledger, get_lap_cooldown
from stairup.api.v1.controllers.training_controller import TrainingController
from stairup.schemas.session_schemas import (
    CreateSessionRequest, SessionActionRequest, CancelSessionRequest
)
from stairup.services.lap_ledger_service import LapLedger
from stairup.services.session_lifecycle_service import SessionLifecycleManager
from stairup.utils.cooldown import LapCooldown

router = APIRouter(prefix="/training", tags=["Training"])


@router.get("", summary="Training page")
async def get_training(
    lifecycle_manager: SessionLifecycleManager = Depends(get_lifecycle_manager),
    ledger: LapLedger = Depends(get_lap_ledger),
    cooldown: LapCooldown = Depends(get_lap_cooldown)
):
    """
    Current training state.

    With an active session: the session, its laps, live statistics and the
    running timer. Without one: input suggestions from past sessions.
    """
    return await TrainingController.get_training_view(lifecycle_manager, ledger, cooldown)


@router.post("/sessions", summary="Start a session")
async def create_session(
    payload: CreateSessionRequest,
    lifecycle_manager: SessionLifecycleManager = Depends(get_lifecycle_manager),
    ledger: LapLedger = Depends(get_lap_ledger),
    cooldown: LapCooldown = Depends(get_lap_cooldown)
):
    """Start training; returns the already active session if there is one."""
    return await TrainingController.create_session(lifecycle_manager, ledger, cooldown, payload)


@router.post("/laps", summary="Record a lap")
async def record_lap(
    payload: SessionActionRequest,
    ledger: LapLedger = Depends(get_lap_ledger),
    cooldown: LapCooldown = Depends(get_lap_cooldown)
):
    return await TrainingController.record_lap(ledger, cooldown, payload)


@router.post("/finish", summary="Finish the session")
async def finish_session(
    payload: SessionActionRequest,
    lifecycle_manager: SessionLifecycleManager = Depends(get_lifecycle_manager),
    ledger: LapLedger = Depends(get_lap_ledger),
    cooldown: LapCooldown = Depends(get_lap_cooldown)
):
    return await TrainingController.finish_session(lifecycle_manager, ledger, cooldown, payload)


@router.post("/cancel", summary="Abandon the session")
async def cancel_session(
    payload: CancelSessionRequest,
    lifecycle_manager: SessionLifecycleManager = Depends(get_lifecycle_manager),
    cooldown: LapCooldown = Depends(get_lap_cooldown)
):
    """Discards the current training. Requires `confirm: true`."""
    return await TrainingController.cancel_session(lifecycle_manager, cooldown, payload)
