"""User model"""
from sqlalchemy import Column, String, DateTime, Boolean, Enum
from datetime import datetime, timezone
from app.core.config import ALLOWED_AUTH_PROVIDERS
from app.models.base import Base
from app.utils.ids import new_id


class User(Base):
    """User accounts"""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    is_enabled = Column(Boolean, default=True, nullable=False)
    auth_provider = Column(Enum(*ALLOWED_AUTH_PROVIDERS, name="auth_provider", native_enum=False), nullable=False)
    verification_code = Column(String(255), unique=True, nullable=True)
    verification_code_at = Column(DateTime(timezone=True), nullable=True)
    reset_password_code = Column(String(255), unique=True, nullable=True)
    reset_password_code_at = Column(DateTime(timezone=True), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )
