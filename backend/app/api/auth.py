"""Auth API routes (session cookie)"""
import logging
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.core.security import set_auth_cookie, clear_auth_cookie
from app.db.session import get_db
from app.schemas.auth import LoginRequest, CurrentUserResponse
from app.services.auth_service import login_user

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login")
def login(request_data: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    """Login user and set the session cookie"""
    result = login_user(request_data.email, request_data.password, db)
    set_auth_cookie(response, result["token"], request)
    return {"user": result["user"]}


@router.post("/logout")
def logout(request: Request, response: Response):
    """Logout user"""
    clear_auth_cookie(response, request)
    return {"status": "ok"}


@router.get("/me", response_model=CurrentUserResponse)
def get_current_user(request: Request):
    """Get current logged-in user, resolved from the session cookie"""
    user = getattr(request.state, "current_user", None)
    if not user:
        return {"user": None}
    return {"user": {"id": user.id, "email": user.email, "name": user.name}}
