from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.orm import relationship
from stairup.database.base import Base
from stairup.utils.time_utils import utcnow
import cuid


class User(Base):
    """Account of a stair-climbing user."""

    __tablename__ = "users"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    # Free-form profile data (nickname, phone)
    profile_metadata = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    training_sessions = relationship("TrainingSession", back_populates="user", cascade="all, delete-orphan")
    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")
