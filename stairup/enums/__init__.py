"""
Shared enums for the application.
"""

from .session_enums import SessionStatus, RankingMetric, GatewayBackend

__all__ = [
    "SessionStatus",
    "RankingMetric",
    "GatewayBackend",
]
