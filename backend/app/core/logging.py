"""Logging configuration for the application"""
import logging

from app.core.config import settings


def setup_logging():
    """Configure logging for the application"""
    LOG_LEVEL = settings.LOG_LEVEL.upper()
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        force=True
    )

    # Silence noisy third-party libraries
    for name in ("botocore", "boto3", "urllib3", "urllib3.connectionpool", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)

    # Access lines for successful requests are only useful while developing
    if settings.ENVIRONMENT == "production":
        api_access_logger.setLevel(logging.WARNING)


# Shared loggers for auth events and request access lines
security_logger = logging.getLogger("security")
api_access_logger = logging.getLogger("api_access")
