"""Session cookie resolution tests"""
import logging
from datetime import timedelta
from unittest.mock import Mock, patch

import pytest
from fastapi.concurrency import run_in_threadpool
from jose import jwt
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.core.security import create_token
from app.services.session_service import SessionResolver, CurrentUser

COOKIE = "mly_token"


def _failing_session_factory():
    """Session factory whose queries fail like an unreachable database"""
    session = Mock()
    session.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
    return Mock(return_value=session)


@pytest.mark.critical
class TestSessionResolver:
    """SessionResolver.resolve() outcomes"""

    def test_no_token_skips_datastore(self):
        """Test a request without a cookie never touches the datastore"""
        session_factory = Mock()
        resolver = SessionResolver(session_factory, development=False)

        result = resolver.resolve(None)

        assert result.user is None
        assert result.clear_cookie is False
        session_factory.assert_not_called()

    def test_valid_token_resolves_user(self, session_factory, test_user):
        resolver = SessionResolver(session_factory, development=False)

        result = resolver.resolve(create_token(test_user.id))

        assert result.user == CurrentUser(id=test_user.id, email=test_user.email, name=test_user.name)
        assert result.user_id == test_user.id
        assert result.clear_cookie is False

    def test_unknown_user_clears_cookie(self, session_factory):
        resolver = SessionResolver(session_factory, development=False)

        result = resolver.resolve(create_token("0" * 32))

        assert result.user is None
        assert result.clear_cookie is True

    def test_tampered_token_clears_cookie(self, test_user):
        session_factory = Mock()
        resolver = SessionResolver(session_factory, development=False)

        result = resolver.resolve(create_token(test_user.id) + "tampered")

        assert result.user is None
        assert result.clear_cookie is True
        session_factory.assert_not_called()

    def test_expired_token_clears_cookie(self, test_user):
        resolver = SessionResolver(Mock(), development=False)

        result = resolver.resolve(create_token(test_user.id, expires_delta=timedelta(seconds=-5)))

        assert result.user is None
        assert result.clear_cookie is True

    def test_missing_secret_rejects_tokens_signed_with_empty_key(self, test_user):
        """Test an unconfigured JWT_SECRET fails closed instead of trusting empty-key tokens"""
        session_factory = Mock()
        resolver = SessionResolver(session_factory, development=False)
        forged = jwt.encode({"id": test_user.id}, "", algorithm="HS256")

        with patch.object(settings, "JWT_SECRET", ""):
            result = resolver.resolve(forged)

        assert result.user is None
        assert result.clear_cookie is True
        session_factory.assert_not_called()

    def test_datastore_error_in_production_clears_cookie_silently(self, caplog):
        resolver = SessionResolver(_failing_session_factory(), development=False)

        with caplog.at_level(logging.ERROR, logger="app.services.session_service"):
            result = resolver.resolve(create_token("user-1"))

        assert result.user is None
        assert result.clear_cookie is True
        assert not [r for r in caplog.records if r.name == "app.services.session_service"]

    def test_datastore_error_in_development_is_logged_and_cookie_kept(self, caplog):
        resolver = SessionResolver(_failing_session_factory(), development=True)

        with caplog.at_level(logging.ERROR, logger="app.services.session_service"):
            result = resolver.resolve(create_token("user-1"))

        assert result.user is None
        assert result.clear_cookie is False
        assert any("Failed to resolve session user" in r.getMessage() for r in caplog.records)

    def test_session_is_closed_after_lookup(self):
        session = Mock()
        session.query.return_value.options.return_value.filter.return_value.first.return_value = None
        resolver = SessionResolver(Mock(return_value=session), development=False)

        resolver.resolve(create_token("user-1"))

        session.close.assert_called_once()


@pytest.mark.critical
class TestSessionMiddleware:
    """Session middleware wiring through the API"""

    def test_no_cookie_is_unauthenticated(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 200
        assert response.json() == {"user": None}
        assert "set-cookie" not in response.headers

    def test_valid_cookie_populates_current_user(self, client, test_user):
        client.cookies.set(COOKIE, create_token(test_user.id))

        response = client.get("/api/v1/auth/me")

        assert response.json() == {
            "user": {"id": test_user.id, "email": "hello@mly.fyi", "name": "Mly Tester"}
        }
        assert "set-cookie" not in response.headers

    def test_resolution_runs_in_threadpool(self, client, test_user):
        """Test the blocking user lookup is kept off the event loop"""
        token = create_token(test_user.id)
        client.cookies.set(COOKIE, token)

        with patch("app.core.middleware.run_in_threadpool", wraps=run_in_threadpool) as spy:
            response = client.get("/api/v1/auth/me")

        assert response.json()["user"]["id"] == test_user.id
        spy.assert_called_once_with(client.app.state.session_resolver.resolve, token)

    def test_stale_cookie_is_deleted(self, client, db_session):
        client.cookies.set(COOKIE, create_token("missing-user"))

        response = client.get("/api/v1/auth/me")

        assert response.status_code == 200
        assert response.json() == {"user": None}
        set_cookie = response.headers.get("set-cookie", "")
        assert f"{COOKIE}=" in set_cookie
        assert "Max-Age=0" in set_cookie

    def test_garbage_cookie_does_not_block_request(self, client):
        client.cookies.set(COOKIE, "not-a-jwt")

        response = client.get("/health")

        assert response.status_code == 200
        assert "Max-Age=0" in response.headers.get("set-cookie", "")

    def test_session_cookie_not_required_for_api_key_routes(
        self, client, identity, api_headers, mock_ses
    ):
        client.cookies.set(COOKIE, "not-a-jwt")
        response = client.post(
            "/api/v1/emails/send",
            json={"from": "hello@mly.fyi", "to": "a@b.com", "subject": "Hi", "text": "Hi"},
            headers=api_headers
        )
        assert response.status_code == 200
