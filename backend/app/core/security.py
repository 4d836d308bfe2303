"""Session tokens, auth cookies and API access logging"""
import json
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Request, Response
from jose import JWTError, jwt

from app.core.config import settings
from app.core.logging import api_access_logger


class InvalidTokenError(Exception):
    """Raised when a session token is malformed, expired or tampered with"""


def create_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed session token whose subject is the user id

    Args:
        user_id: ID of the user the token authenticates
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRE_DAYS)

    to_encode = {"id": user_id, "sub": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and verify a session token

    Returns:
        Token payload, always containing a non-empty "id"

    Raises:
        InvalidTokenError: If the token cannot be verified or has no subject,
            or no signing secret is configured
    """
    # An empty key would verify tokens anyone can sign
    if not settings.JWT_SECRET:
        raise InvalidTokenError("JWT_SECRET is not configured")

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise InvalidTokenError("Token has no subject")
    payload["id"] = str(user_id)
    return payload


def _cookie_domain(request: Request) -> Optional[str]:
    """Parent domain for cross-subdomain cookies, None for localhost"""
    host = request.headers.get("host", settings.DOMAIN)
    if ":" in host:
        host = host.split(":")[0]

    domain_parts = host.split(".")
    if len(domain_parts) >= 2:
        return "." + ".".join(domain_parts[-2:])
    return None


def set_auth_cookie(response: Response, token: str, request: Request) -> None:
    """Set the session token cookie

    Args:
        response: FastAPI Response object
        token: Signed session token
        request: FastAPI Request object (used to extract domain)
    """
    response.set_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        value=token,
        domain=_cookie_domain(request),
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        max_age=60 * 60 * 24 * settings.JWT_EXPIRE_DAYS,
        path="/"
    )


def clear_auth_cookie(response: Response, request: Request) -> None:
    """Delete the session token cookie"""
    response.delete_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        domain=_cookie_domain(request),
        path="/"
    )


def get_client_ip(request: Request) -> str:
    client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip:
        client_ip = request.client.host if request.client else "unknown"
    return client_ip


def log_api_access(
    request: Request,
    status_code: int = 200,
    error: Optional[str] = None
):
    """Log detailed API access information"""
    user_id = getattr(request.state, "current_user_id", None)

    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "method": request.method,
        "path": request.url.path,
        "query": str(request.url.query) if request.url.query else None,
        "user_id": user_id,
        "client_ip": get_client_ip(request),
        "user_agent": request.headers.get("User-Agent", "unknown"),
        "status_code": status_code,
        "error": error
    }

    if error or status_code >= 400:
        api_access_logger.warning(f"API Access: {json.dumps(log_data)}")
    else:
        api_access_logger.info(f"API Access: {json.dumps(log_data)}")
