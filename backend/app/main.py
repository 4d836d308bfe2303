"""FastAPI application entry point"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings, IS_DEVELOPMENT
from app.core.logging import setup_logging
from app.core.middleware import session_middleware, setup_cors_middleware, setup_exception_handlers
from app.core import otel
from app.db.session import SessionLocal, engine, init_db
from app.services.session_service import SessionResolver

# Import routers
from app.api import auth, emails, monitoring

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    # Startup
    if otel.initialize_otel():
        otel.instrument_sqlalchemy(engine)
        otel.instrument_botocore()
        logger.info(f"OpenTelemetry initialized, exporting to {settings.OTEL_EXPORTER_OTLP_ENDPOINT}")
    else:
        logger.info("OpenTelemetry not configured - running without distributed tracing")

    logger.info("Initializing database...")
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    logger.info(f"Mly backend started (environment: {settings.ENVIRONMENT})")

    yield

    # Shutdown
    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Mly Backend",
    description="Transactional email sending API",
    version="1.0.0",
    lifespan=lifespan
)

# The datastore handle is injected here, once, for the session resolver
app.state.session_resolver = SessionResolver(SessionLocal, development=IS_DEVELOPMENT)

if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
    otel.instrument_fastapi(app)

setup_cors_middleware(app)
app.middleware("http")(session_middleware)
setup_exception_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(emails.router)
app.include_router(monitoring.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=IS_DEVELOPMENT,
        log_level=settings.LOG_LEVEL.lower(),
    )
