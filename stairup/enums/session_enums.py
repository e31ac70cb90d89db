"""
Training session enums.
"""

from enum import Enum


class SessionStatus(str, Enum):
    ACTIVE = "active"
    FINISHED = "finished"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.ACTIVE


class RankingMetric(str, Enum):
    TOTAL_SESSIONS = "total_sessions"
    TOTAL_FLOORS = "total_floors"
    TOTAL_TIME = "total_time"


class GatewayBackend(str, Enum):
    REST = "rest"
    DATABASE = "database"
