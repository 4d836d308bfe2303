"""Authentication service - business logic for user authentication"""
import bcrypt
import logging
from datetime import datetime, timezone
from typing import Dict, Optional
from sqlalchemy.orm import Session

from app.core.errors import HttpError
from app.core.metrics import login_attempts_counter
from app.core.security import create_token
from app.models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    if not password_hash or not password:
        return False
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def create_user(
    email: str,
    password: str,
    db: Session,
    name: str = "",
    auth_provider: str = "email",
    verified: bool = False
) -> User:
    """Create a new user.

    Args:
        email: User email (must be unique).
        password: Raw password for the user.
        db: Database session.
        name: Display name, defaults to the local part of the email.
        auth_provider: One of github, google, email.
        verified: Mark the email address as verified.
    """
    email = email.strip().lower()
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise ValueError("Email already registered")

    user = User(
        email=email,
        name=name or email.split("@")[0],
        password=hash_password(password),
        auth_provider=auth_provider,
        verified_at=datetime.now(timezone.utc) if verified else None
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(email: str, password: str, db: Session) -> Optional[User]:
    """Authenticate a user by email and password"""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        return None
    if not verify_password(password, user.password):
        return None
    return user


def login_user(email: str, password: str, db: Session) -> Dict:
    """Check credentials and issue a session token

    Returns:
        dict with "token" and "user"

    Raises:
        HttpError: unauthorized for bad credentials, forbidden for disabled
            or unverified accounts
    """
    user = authenticate_user(email, password, db)
    if not user:
        login_attempts_counter.labels(status="failure").inc()
        raise HttpError("unauthorized", "Invalid email or password")

    if not user.is_enabled:
        login_attempts_counter.labels(status="failure").inc()
        raise HttpError("forbidden", "Account is disabled")

    if not user.verified_at:
        login_attempts_counter.labels(status="failure").inc()
        raise HttpError("forbidden", "Email address not verified")

    login_attempts_counter.labels(status="success").inc()
    logger.info(f"User {user.id} logged in")
    return {
        "token": create_token(user.id),
        "user": {"id": user.id, "email": user.email, "name": user.name}
    }
