"""
Error taxonomy for the application.
"""

from .errors import (
    ApplicationException,
    ValidationError,
    ConflictError,
    StateError,
    NotFoundError,
    AuthError,
    NetworkError,
    CooldownActiveError,
)

__all__ = [
    "ApplicationException",
    "ValidationError",
    "ConflictError",
    "StateError",
    "NotFoundError",
    "AuthError",
    "NetworkError",
    "CooldownActiveError",
]
