"""
Models package for the hosted backend binding.
"""

from .user import User
from .auth_token import AuthToken
from .training_session import TrainingSession
from .lap_record import LapRecord

__all__ = [
    "User",
    "AuthToken",
    "TrainingSession",
    "LapRecord",
]
