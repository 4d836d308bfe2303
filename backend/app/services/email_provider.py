"""Email provider adapter - Amazon SES (v2 API) via boto3"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)

CHARSET = "UTF-8"


class ProviderError(Exception):
    """Raised when the email provider rejects or fails a send"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


@dataclass(frozen=True)
class SesConfig:
    """Credentials used to call SES on behalf of a project"""
    access_key_id: str
    secret_access_key: str
    region: str = settings.DEFAULT_SES_REGION


@dataclass
class SendEmailPayload:
    """Provider-agnostic email body"""
    from_email: str
    to: str
    subject: str
    text: Optional[str] = None
    html: Optional[str] = None
    reply_to: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


def get_ses_client(config: SesConfig):
    """Create an SES v2 client for the given project credentials

    Timeouts and retries are owned by botocore's client config.
    """
    return boto3.client(
        "sesv2",
        region_name=config.region,
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        config=Config(
            connect_timeout=settings.SES_CONNECT_TIMEOUT,
            read_timeout=settings.SES_READ_TIMEOUT,
            retries={"max_attempts": settings.SES_MAX_ATTEMPTS, "mode": "standard"},
        ),
    )


def build_send_request(payload: SendEmailPayload) -> dict:
    """Translate a payload into SendEmail API parameters"""
    body = {}
    if payload.text is not None:
        body["Text"] = {"Data": payload.text, "Charset": CHARSET}
    if payload.html is not None:
        body["Html"] = {"Data": payload.html, "Charset": CHARSET}

    simple = {
        "Subject": {"Data": payload.subject, "Charset": CHARSET},
        "Body": body,
    }
    if payload.headers:
        simple["Headers"] = [
            {"Name": name, "Value": value}
            for name, value in payload.headers.items()
        ]

    request = {
        "FromEmailAddress": payload.from_email,
        "Destination": {"ToAddresses": [payload.to]},
        "Content": {"Simple": simple},
    }
    if payload.reply_to:
        request["ReplyToAddresses"] = [payload.reply_to]
    return request


def send_email(config: SesConfig, payload: SendEmailPayload) -> str:
    """
    Send a single email through SES.

    Args:
        config: Project credentials and region
        payload: Email body

    Returns:
        str: Provider message id

    Raises:
        ProviderError: If SES rejects the request or cannot be reached
    """
    client = get_ses_client(config)

    try:
        response = client.send_email(**build_send_request(payload))
    except ClientError as e:
        error = e.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message") or str(e)
        logger.warning(f"SES rejected email to {payload.to} ({code}): {message}")
        raise ProviderError(message, code=code) from e
    except BotoCoreError as e:
        logger.error(f"SES request failed for email to {payload.to}: {e}", exc_info=True)
        raise ProviderError(str(e)) from e

    message_id = response.get("MessageId")
    if not message_id:
        logger.error(f"SES send returned invalid response: {response}")
        raise ProviderError("Email provider returned no message id")

    logger.info(f"Email sent via SES to {payload.to} (message id: {message_id})")
    return message_id
