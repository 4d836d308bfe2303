"""Email service - send pipeline and delivery logging"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from app.core.config import DEFAULT_SES_REGION, SES_CONFIGURATION_SET_HEADER
from app.core.errors import HttpError
from app.core.metrics import emails_sent_counter, email_send_rejections_counter
from app.models.api_key import ApiKey
from app.models.email_log import EmailLog
from app.models.email_log_event import EmailLogEvent
from app.models.project import Project
from app.models.project_identity import ProjectIdentity
from app.schemas.email import SendEmailRequest
from app.services import email_provider
from app.services.api_key_service import authenticate_api_key
from app.services.email_provider import ProviderError, SendEmailPayload, SesConfig

logger = logging.getLogger(__name__)


def _reject(kind: str, message: str) -> HttpError:
    email_send_rejections_counter.labels(kind=kind).inc()
    return HttpError(kind, message)


def get_from_domain(from_email: str) -> str:
    """Domain part of a from-address: the text between the first and second '@'

    No further validation is done, so "Name <hello@mly.fyi>" yields "mly.fyi>"
    and an address without '@' yields an empty domain.
    """
    parts = from_email.split("@")
    return parts[1] if len(parts) > 1 else ""


def get_project(project_id: str, db: Session) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise _reject("not_found", "Project not found")
    return project


def get_sending_identity(project: Project, from_domain: str, db: Session) -> ProjectIdentity:
    """Resolve a verified, tracking-enabled identity for the from-domain

    Raises:
        HttpError: not_found if the project has no identity for the domain,
            bad_request if it is unverified or has no configuration set
    """
    identity = db.query(ProjectIdentity).filter(
        ProjectIdentity.project_id == project.id,
        ProjectIdentity.domain == from_domain
    ).first()
    if not identity:
        raise _reject("not_found", f"You are not allowed to send email from {from_domain} domain.")

    if not identity.is_verified:
        raise _reject("bad_request", f"Identity {from_domain} is not verified.")

    if not identity.configuration_set_name:
        raise _reject("bad_request", f"Configuration set is not configured for {from_domain} domain.")

    return identity


def build_headers(headers: Dict[str, str], identity: ProjectIdentity) -> Dict[str, str]:
    """Caller headers plus the identity's configuration set header

    Header names are case-insensitive, so any caller variant of the
    configuration set header is dropped.
    """
    reserved = SES_CONFIGURATION_SET_HEADER.lower()
    merged = {name: value for name, value in headers.items() if name.lower() != reserved}
    merged[SES_CONFIGURATION_SET_HEADER] = identity.configuration_set_name
    return merged


def get_provider_config(project: Project) -> SesConfig:
    if not project.access_key_id or not project.secret_access_key:
        raise _reject("bad_request", "Invalid project credentials")
    return SesConfig(
        access_key_id=project.access_key_id,
        secret_access_key=project.secret_access_key,
        region=project.region or DEFAULT_SES_REGION
    )


def log_email(
    request: SendEmailRequest,
    project: Project,
    api_key: ApiKey,
    status: str,
    db: Session,
    message_id: Optional[str] = None
) -> EmailLog:
    """Write the email log row, then its first lifecycle event

    The two rows are committed separately; a crash in between leaves a log
    without an event.
    """
    now = datetime.now(timezone.utc)
    email_log = EmailLog(
        message_id=message_id,
        project_id=project.id,
        api_key_id=api_key.id,
        from_email=request.from_email,
        to_email=request.to,
        reply_to=request.reply_to,
        subject=request.subject,
        text=request.text,
        html=request.html,
        status=status,
        created_at=now,
        updated_at=now
    )
    db.add(email_log)
    db.commit()

    event = EmailLogEvent(
        email_log_id=email_log.id,
        email=request.to,
        type=status,
        timestamp=datetime.now(timezone.utc)
    )
    db.add(event)
    db.commit()

    emails_sent_counter.labels(status=status).inc()
    return email_log


def send_email(request: SendEmailRequest, api_key_value: Optional[str], db: Session) -> str:
    """
    Validate, authorize, dispatch and log a single outbound email.

    Args:
        request: Validated request body
        api_key_value: Raw value of the API key header
        db: Database session

    Returns:
        str: ID of the created email log

    Raises:
        HttpError: On authentication failure, business-rule violation, or
            provider failure (after the failure has been logged)
    """
    api_key = authenticate_api_key(api_key_value, db)
    project = get_project(api_key.project_id, db)

    if request.has_multiple_recipients:
        raise _reject("bad_request", "Multiple recipients are not supported.")

    from_domain = get_from_domain(request.from_email)
    identity = get_sending_identity(project, from_domain, db)
    config = get_provider_config(project)

    payload = SendEmailPayload(
        from_email=request.from_email,
        to=request.to,
        reply_to=request.reply_to,
        subject=request.subject,
        text=request.text,
        html=request.html,
        headers=build_headers(request.headers, identity)
    )

    try:
        message_id = email_provider.send_email(config, payload)
    except ProviderError as e:
        email_log = log_email(request, project, api_key, "error", db)
        logger.warning(
            f"Send failed for project {project.id}, email log {email_log.id}: {e.message}"
        )
        raise HttpError("bad_request", e.message)

    email_log = log_email(request, project, api_key, "sending", db, message_id=message_id)
    logger.info(f"Email {email_log.id} accepted by provider for project {project.id} (message id: {message_id})")
    return email_log.id


def get_email_log(email_log_id: str, api_key_value: Optional[str], db: Session) -> Dict[str, Any]:
    """Return an email log with its events, scoped to the API key's project"""
    api_key = authenticate_api_key(api_key_value, db)

    email_log = db.query(EmailLog).filter(
        EmailLog.id == email_log_id,
        EmailLog.project_id == api_key.project_id
    ).first()
    if not email_log:
        raise HttpError("not_found", "Email not found")

    return {
        "id": email_log.id,
        "messageId": email_log.message_id,
        "from": email_log.from_email,
        "to": email_log.to_email,
        "replyTo": email_log.reply_to,
        "subject": email_log.subject,
        "status": email_log.status,
        "createdAt": email_log.created_at.isoformat(),
        "updatedAt": email_log.updated_at.isoformat(),
        "events": [
            {
                "id": event.id,
                "email": event.email,
                "type": event.type,
                "timestamp": event.timestamp.isoformat()
            }
            for event in email_log.events
        ]
    }
