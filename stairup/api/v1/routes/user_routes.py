from fastapi import APIRouter, Depends, Query

from stairup.api.deps import get_auth_service, get_lifecycle_manager
from stairup.api.v1.controllers.user_controller import UserController
from stairup.enums import RankingMetric
from stairup.schemas.user_schemas import LoginRequest, RegisterRequest, UserUpdateRequest
from stairup.services.auth_service import AuthService
from stairup.services.session_lifecycle_service import SessionLifecycleManager

router = APIRouter(tags=["User"])


@router.post("/auth/login", summary="Log in")
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Authenticate with email (or username) and password; the token is kept by the client."""
    return await UserController.login(auth_service, payload)


@router.post("/auth/register", summary="Register")
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    return await UserController.register(auth_service, payload)


@router.post("/auth/logout", summary="Log out")
async def logout(auth_service: AuthService = Depends(get_auth_service)):
    return UserController.logout(auth_service)


@router.get("/me", summary="Current user")
async def get_me(auth_service: AuthService = Depends(get_auth_service)):
    return await auth_service.get_current_user()


@router.put("/me", summary="Update profile")
async def update_me(
    payload: UserUpdateRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Update the display name and phone number shown in settings."""
    return await UserController.update_profile(auth_service, payload)


@router.get("/me/stats", summary="Training totals")
async def get_my_stats(auth_service: AuthService = Depends(get_auth_service)):
    return await auth_service.get_user_stats()


@router.get("/home", summary="Home page")
async def get_home(
    auth_service: AuthService = Depends(get_auth_service),
    lifecycle_manager: SessionLifecycleManager = Depends(get_lifecycle_manager)
):
    """
    Home page data:
    - current user
    - training totals (sessions, minutes, this week)
    - redirect_to "/training" when a session is still active
    """
    return await UserController.get_home(auth_service, lifecycle_manager)


@router.get("/rankings", summary="Leaderboard")
async def get_rankings(
    limit: int = Query(10, ge=1, le=100, description="Number of users to return"),
    by: RankingMetric = Query(RankingMetric.TOTAL_FLOORS, description="Ranking metric"),
    auth_service: AuthService = Depends(get_auth_service)
):
    return await UserController.get_rankings(auth_service, limit, by)
