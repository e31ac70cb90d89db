"""
User Controller
"""
from typing import Dict

from stairup.enums import RankingMetric
from stairup.schemas.user_schemas import LoginRequest, RegisterRequest, UserUpdateRequest
from stairup.services.auth_service import AuthService
from stairup.services.session_lifecycle_service import SessionLifecycleManager
from stairup.core.logger import get_logger

logger = get_logger("user_controller")


class UserController:
    """Controller for authentication, profile and home page data."""

    @staticmethod
    async def login(auth_service: AuthService, payload: LoginRequest) -> Dict:
        user = await auth_service.login(payload.email, payload.password)
        return {"user": user, "redirect_to": "/"}

    @staticmethod
    async def register(auth_service: AuthService, payload: RegisterRequest) -> Dict:
        user = await auth_service.register(payload.username, payload.email, payload.password)
        return {"user": user, "redirect_to": "/"}

    @staticmethod
    def logout(auth_service: AuthService) -> Dict:
        auth_service.logout()
        return {"success": True, "redirect_to": "/login"}

    @staticmethod
    async def update_profile(auth_service: AuthService, payload: UserUpdateRequest) -> Dict:
        user = await auth_service.update_profile(
            username=payload.username,
            nickname=payload.nickname,
            phone=payload.phone
        )
        return {"user": user, "display_name": user.display_name}

    @staticmethod
    async def get_home(
        auth_service: AuthService,
        lifecycle_manager: SessionLifecycleManager
    ) -> Dict:
        """
        Home page state. A user with an active session is sent straight back
        to training instead of seeing the dashboard.
        """
        user = await auth_service.get_current_user()
        active = await lifecycle_manager.get_active_session()
        if active is not None:
            logger.info(f"Active session {active.id} found, redirecting to training")
            return {
                "user": user,
                "active_session_id": active.id,
                "redirect_to": "/training",
                "stats": None
            }

        stats = await auth_service.get_user_stats()
        return {
            "user": user,
            "active_session_id": None,
            "redirect_to": None,
            "stats": stats
        }

    @staticmethod
    async def get_rankings(auth_service: AuthService, limit: int, by: RankingMetric) -> Dict:
        rankings = await auth_service.get_rankings(limit=limit, by=by)
        return {"by": by.value, "rankings": rankings}
