"""Session service - resolves the session cookie into the current user"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, load_only

from app.core.logging import security_logger
from app.core.metrics import session_resolution_counter
from app.core.security import InvalidTokenError, decode_token
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Minimal user record exposed to request handlers"""
    id: str
    email: str
    name: str


@dataclass(frozen=True)
class ResolvedSession:
    """Outcome of resolving a session cookie"""
    user: Optional[CurrentUser] = None
    clear_cookie: bool = False

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None


ANONYMOUS = ResolvedSession()


class SessionResolver:
    """Turns a session token into a CurrentUser

    Never raises: every failure resolves to an unauthenticated session.
    In development a datastore failure is logged and the cookie is kept so
    the problem can be debugged; elsewhere the cookie is cleared silently.
    """

    def __init__(self, session_factory: Callable[[], Session], development: bool = False):
        self.session_factory = session_factory
        self.development = development

    def resolve(self, token: Optional[str]) -> ResolvedSession:
        if not token:
            return ANONYMOUS

        try:
            user_id = decode_token(token)["id"]
        except InvalidTokenError as e:
            session_resolution_counter.labels(outcome="invalid_token").inc()
            security_logger.warning(f"Invalid session token, clearing cookie: {e}")
            return ResolvedSession(clear_cookie=True)

        try:
            user = self._load_user(user_id)
        except SQLAlchemyError as e:
            session_resolution_counter.labels(outcome="datastore_error").inc()
            if not self.development:
                return ResolvedSession(clear_cookie=True)
            logger.error(f"Failed to resolve session user {user_id}: {e}", exc_info=True)
            return ANONYMOUS

        if not user:
            session_resolution_counter.labels(outcome="unknown_user").inc()
            return ResolvedSession(clear_cookie=True)

        session_resolution_counter.labels(outcome="authenticated").inc()
        logger.debug(f"Current user: {user}")
        return ResolvedSession(user=user)

    def _load_user(self, user_id: str) -> Optional[CurrentUser]:
        db = self.session_factory()
        try:
            user = (
                db.query(User)
                .options(load_only(User.id, User.email, User.name))
                .filter(User.id == user_id)
                .first()
            )
            if not user:
                return None
            return CurrentUser(id=user.id, email=user.email, name=user.name)
        finally:
            db.close()
