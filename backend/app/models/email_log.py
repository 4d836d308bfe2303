"""EmailLog model"""
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.core.config import EMAIL_STATUSES
from app.models.base import Base
from app.utils.ids import new_id


class EmailLog(Base):
    """One row per send attempt made through the public API"""
    __tablename__ = "email_logs"

    id = Column(String(32), primary_key=True, default=new_id)
    message_id = Column(String(255), nullable=True, index=True)  # Provider message id
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    api_key_id = Column(String(32), ForeignKey("api_keys.id", ondelete="SET NULL"), nullable=True, index=True)
    from_email = Column(String(255), nullable=False)
    to_email = Column(String(255), nullable=False, index=True)
    reply_to = Column(String(255), nullable=True)
    subject = Column(String(998), nullable=False)
    text = Column(Text, nullable=True)
    html = Column(Text, nullable=True)
    status = Column(Enum(*EMAIL_STATUSES, name="email_status", native_enum=False), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    project = relationship("Project", back_populates="email_logs")
    events = relationship(
        "EmailLogEvent",
        back_populates="email_log",
        cascade="all, delete-orphan",
        order_by="EmailLogEvent.timestamp"
    )
