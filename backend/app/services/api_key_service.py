"""API key service - authentication and management of project API keys"""
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import HttpError
from app.core.logging import security_logger
from app.core.metrics import api_key_auth_failures_counter
from app.models.api_key import ApiKey

logger = logging.getLogger(__name__)


def generate_api_key() -> str:
    """Generate a new API key value, e.g. mly_2dca2972bc6945d6b7cdffab0b58562a"""
    return f"{settings.API_KEY_PREFIX}{secrets.token_hex(16)}"


def create_api_key(project_id: str, db: Session, name: str = "default") -> ApiKey:
    """Create and persist a new API key for a project"""
    api_key = ApiKey(project_id=project_id, name=name, key=generate_api_key())
    db.add(api_key)
    db.commit()
    db.refresh(api_key)
    logger.info(f"Created API key {api_key.id} for project {project_id}")
    return api_key


def revoke_api_key(api_key_id: str, db: Session) -> Optional[ApiKey]:
    """Revoke an API key. Returns None if it does not exist."""
    api_key = db.query(ApiKey).filter(ApiKey.id == api_key_id).first()
    if not api_key:
        return None
    if api_key.revoked_at is None:
        api_key.revoked_at = datetime.now(timezone.utc)
        db.commit()
        logger.info(f"Revoked API key {api_key.id} for project {api_key.project_id}")
    return api_key


def authenticate_api_key(api_key_value: Optional[str], db: Session) -> ApiKey:
    """Resolve the caller's API key

    Args:
        api_key_value: Raw value of the API key header
        db: Database session

    Returns:
        The active ApiKey, bound to exactly one project

    Raises:
        HttpError: unauthorized if the key is missing, unknown or revoked
    """
    api_key_value = (api_key_value or "").strip()
    if not api_key_value:
        api_key_auth_failures_counter.inc()
        security_logger.warning("API key authentication failed - missing key")
        raise HttpError("unauthorized", f"Missing {settings.API_KEY_HEADER} header")

    api_key = db.query(ApiKey).filter(ApiKey.key == api_key_value).first()
    if not api_key or api_key.is_revoked:
        api_key_auth_failures_counter.inc()
        security_logger.warning(
            f"API key authentication failed - Key: {api_key_value[:8]}..., "
            f"Reason: {'revoked' if api_key else 'unknown'}"
        )
        raise HttpError("unauthorized", "Invalid API key")

    api_key.last_used_at = datetime.now(timezone.utc)
    db.commit()
    return api_key
