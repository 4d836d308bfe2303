"""Public email API routes (API key authenticated)"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from app.core.config import API_KEY_HEADER
from app.db.session import get_db
from app.schemas.email import SendEmailRequest, SendEmailResponse
from app.services.email_service import send_email, get_email_log

router = APIRouter(prefix="/api/v1/emails", tags=["emails"])
logger = logging.getLogger(__name__)


@router.post("/send", response_model=SendEmailResponse)
def send(
    request_data: SendEmailRequest,
    api_key: Optional[str] = Header(None, alias=API_KEY_HEADER),
    db: Session = Depends(get_db)
):
    """Send a single transactional email from a verified project identity"""
    email_log_id = send_email(request_data, api_key, db)
    return {"id": email_log_id}


@router.get("/{email_id}")
def get_email(
    email_id: str,
    api_key: Optional[str] = Header(None, alias=API_KEY_HEADER),
    db: Session = Depends(get_db)
):
    """Get an email log and its delivery events"""
    return get_email_log(email_id, api_key, db)
