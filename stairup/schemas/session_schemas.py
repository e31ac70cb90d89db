"""
Training Session Schemas
"""
from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime

from stairup.enums import SessionStatus
from stairup.utils.time_utils import ensure_utc


class TrainingSession(BaseModel):
    """One stair-climbing training attempt as returned by the remote data service."""
    id: str
    user_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    floors_per_lap: int
    target_floors: int
    status: SessionStatus
    created_at: datetime

    @validator("id", "user_id", pre=True)
    def coerce_identifier(cls, v):
        return str(v) if v is not None else v

    @validator("start_time", "end_time", "created_at")
    def normalize_instant(cls, v):
        return ensure_utc(v) if v is not None else v

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE


class LapEvent(BaseModel):
    """Raw lap completion event as stored by the remote data service."""
    session_id: str
    lap_number: int
    lap_finish_time: datetime
    id: Optional[str] = None

    @validator("id", "session_id", pre=True)
    def coerce_identifier(cls, v):
        return str(v) if v is not None else v

    @validator("lap_finish_time")
    def normalize_instant(cls, v):
        return ensure_utc(v)


class LapRecord(LapEvent):
    """Lap event with its derived duration."""
    lap_time_seconds: int = Field(..., ge=0)


class SessionStatistics(BaseModel):
    """Summary metrics derived from a session and its laps; never persisted."""
    session_id: str
    total_laps: int
    total_floors_climbed: int
    target_floors: int
    completion_rate: int  # percentage, may exceed 100
    total_time_seconds: int
    average_time_per_lap: Optional[float] = None
    fastest_lap_time: Optional[int] = None
    slowest_lap_time: Optional[int] = None


class SessionParameterSuggestions(BaseModel):
    floors_per_lap: List[int] = []
    target_floors: List[int] = []


# Request schemas
class CreateSessionRequest(BaseModel):
    floors_per_lap: int = Field(..., gt=0, description="Floors climbed per lap")
    target_floors: int = Field(..., gt=0, description="Total floors targeted for the session")


class SessionActionRequest(BaseModel):
    session_id: str


class CancelSessionRequest(SessionActionRequest):
    confirm: bool = Field(
        False,
        description="Must be true: cancelling discards the current training"
    )
