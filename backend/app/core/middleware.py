"""Middleware and exception handlers for FastAPI application"""
import logging
from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import HttpError
from app.core.logging import security_logger
from app.core.security import clear_auth_cookie, log_api_access

logger = logging.getLogger(__name__)


def get_allowed_origins():
    """Get list of allowed CORS origins"""
    allowed_origins = [settings.FRONTEND_URL]
    if settings.ENVIRONMENT == "development":
        allowed_origins.extend([
            "http://localhost:3000",
            "http://localhost:8000",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:8000"
        ])
    return allowed_origins


def setup_cors_middleware(app):
    """Setup CORS middleware for FastAPI app"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


async def session_middleware(request: Request, call_next):
    """Resolve the session cookie into request.state.current_user

    Uses the resolver installed on app.state; a stale or unusable cookie is
    deleted on the way out and the request continues unauthenticated.
    """
    status_code = 500
    error = None

    try:
        resolver = request.app.state.session_resolver
        token = request.cookies.get(settings.TOKEN_COOKIE_NAME)
        session = await run_in_threadpool(resolver.resolve, token)

        request.state.current_user = session.user
        request.state.current_user_id = session.user_id

        response = await call_next(request)
        status_code = response.status_code

        if session.clear_cookie:
            clear_auth_cookie(response, request)

        return response

    except Exception as e:
        error = str(e)
        security_logger.error(f"Session middleware error: {error}", exc_info=True)
        raise
    finally:
        log_api_access(request, status_code, error)


async def http_error_handler(request: Request, exc: HttpError):
    """Render application errors as {"error": {"kind", "message"}}"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Translate request body validation failures into validation_error responses"""
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        details.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})

    message = "; ".join(
        f"{d['field']}: {d['message']}" if d["field"] else d["message"]
        for d in details
    ) or "Invalid request body"

    error = HttpError("validation_error", message, details=details)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    error = HttpError("internal_error", "Internal server error")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def setup_exception_handlers(app):
    """Register the response-formatting boundary for every error type"""
    app.add_exception_handler(HttpError, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
