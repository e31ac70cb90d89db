from sqlalchemy import Column, String, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship
from stairup.database.base import Base
from stairup.utils.time_utils import utcnow
import cuid


class LapRecord(Base):
    """
    Lap completion event. Lap numbers are not stored: they are the event's
    position in arrival order within its session.
    """
    __tablename__ = "lap_records"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    session_id = Column(String(25), ForeignKey("training_sessions.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    session = relationship("TrainingSession", back_populates="laps")

    __table_args__ = (
        Index("ix_lap_record_session_created", "session_id", "created_at"),
    )
