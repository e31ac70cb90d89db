"""
Database package for the hosted backend binding.
"""

from .base import Base
from .connection import create_engine_for, build_sessionmaker, session_scope

__all__ = [
    "Base",
    "create_engine_for",
    "build_sessionmaker",
    "session_scope",
]
