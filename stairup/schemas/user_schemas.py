"""
User and Authentication Schemas
"""
from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any
from datetime import datetime

from stairup.utils.time_utils import ensure_utc


class User(BaseModel):
    id: str
    username: str = ""
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = {}

    @validator("id", pre=True)
    def coerce_identifier(cls, v):
        return str(v) if v is not None else v

    @validator("metadata", pre=True)
    def default_metadata(cls, v):
        return v or {}

    @validator("created_at")
    def normalize_instant(cls, v):
        return ensure_utc(v) if v is not None else v

    @property
    def display_name(self) -> str:
        return self.metadata.get("nickname") or self.username


class AuthResult(BaseModel):
    token: str
    user: User


class LastSessionSummary(BaseModel):
    id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    floors_achieved: int = 0

    @validator("id", pre=True)
    def coerce_identifier(cls, v):
        return str(v) if v is not None else v


class UserStats(BaseModel):
    """Aggregates shown on the home page."""
    total_sessions: int = 0
    total_time: int = 0  # seconds
    total_minutes: int = 0
    total_floors: int = 0
    this_week_sessions: int = 0
    this_week_minutes: int = 0
    last_session: Optional[LastSessionSummary] = None


class RankingUser(BaseModel):
    user_id: str
    username: str
    rank: int
    total_sessions: Optional[int] = None
    total_floors: Optional[int] = None
    total_time: Optional[int] = None

    @validator("user_id", pre=True)
    def coerce_identifier(cls, v):
        return str(v) if v is not None else v


# Request schemas
class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, description="Email or username")
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)


class UserUpdateRequest(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    nickname: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=40)

