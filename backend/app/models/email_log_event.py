"""EmailLogEvent model"""
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.core.config import EMAIL_STATUSES
from app.models.base import Base
from app.utils.ids import new_id


class EmailLogEvent(Base):
    """Append-only delivery lifecycle event for an email log"""
    __tablename__ = "email_log_events"

    id = Column(String(32), primary_key=True, default=new_id)
    email_log_id = Column(String(32), ForeignKey("email_logs.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False)  # Recipient
    type = Column(Enum(*EMAIL_STATUSES, name="email_event_type", native_enum=False), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    # Relationships
    email_log = relationship("EmailLog", back_populates="events")
