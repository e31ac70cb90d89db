"""
FastAPI dependencies exposing the services assembled at startup.
"""

from fastapi import Request

from stairup.services.auth_service import AuthService
from stairup.services.lap_ledger_service import LapLedger
from stairup.services.session_lifecycle_service import SessionLifecycleManager
from stairup.utils.cooldown import LapCooldown


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_lifecycle_manager(request: Request) -> SessionLifecycleManager:
    return request.app.state.lifecycle_manager


def get_lap_ledger(request: Request) -> LapLedger:
    return request.app.state.lap_ledger


def get_lap_cooldown(request: Request) -> LapCooldown:
    return request.app.state.lap_cooldown
