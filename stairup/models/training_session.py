from sqlalchemy import Column, String, ForeignKey, DateTime, Integer, Index, CheckConstraint, text
from sqlalchemy.orm import relationship
from stairup.database.base import Base
from stairup.utils.time_utils import utcnow
import cuid


class TrainingSession(Base):
    """
    One stair-climbing training attempt.
    Status moves from active to finished or abandoned and never back.
    """
    __tablename__ = "training_sessions"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)  # UTC
    end_time = Column(DateTime(timezone=True), nullable=True)  # UTC, set on finish/abandon
    floors_per_lap = Column(Integer, nullable=False)
    target_floors = Column(Integer, nullable=False)

    # Using String to avoid enum migration issues
    status = Column(String(20), default="active", nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="training_sessions")
    laps = relationship("LapRecord", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("floors_per_lap > 0", name="ck_training_session_floors_per_lap"),
        CheckConstraint("target_floors > 0", name="ck_training_session_target_floors"),
        CheckConstraint("status IN ('active', 'finished', 'abandoned')", name="ck_training_session_status"),
        CheckConstraint(
            "(status = 'active' AND end_time IS NULL) OR (status <> 'active' AND end_time IS NOT NULL)",
            name="ck_training_session_end_time"
        ),
        # At most one active session per user
        Index(
            "uq_training_session_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("ix_training_session_user_created", "user_id", "created_at"),
    )
