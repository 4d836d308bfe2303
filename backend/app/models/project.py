"""Project model"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.models.base import Base
from app.utils.ids import new_id


class Project(Base):
    """A sending project holding the provider credentials used on its behalf"""
    __tablename__ = "projects"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    access_key_id = Column(String(255), nullable=True)
    secret_access_key = Column(String(255), nullable=True)
    region = Column(String(50), nullable=True)  # Falls back to DEFAULT_SES_REGION
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    identities = relationship("ProjectIdentity", back_populates="project", cascade="all, delete-orphan")
    api_keys = relationship("ApiKey", back_populates="project", cascade="all, delete-orphan")
    email_logs = relationship("EmailLog", back_populates="project", cascade="all, delete-orphan")
