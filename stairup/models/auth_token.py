from sqlalchemy import Column, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from stairup.database.base import Base
from stairup.utils.time_utils import utcnow


class AuthToken(Base):
    """Opaque bearer token issued at login or registration."""
    __tablename__ = "auth_tokens"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="auth_tokens")
