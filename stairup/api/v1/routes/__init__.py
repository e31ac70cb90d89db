"""
API v1 routes package.
Routers for the training client.
"""

from .user_routes import router as user_router
from .training_routes import router as training_router
from .history_routes import router as history_router

__all__ = [
    "user_router",
    "training_router",
    "history_router",
]
