"""SQLAlchemy models package - imports all models so they register with Base.metadata"""
from app.models.base import Base
from app.models.user import User
from app.models.project import Project
from app.models.project_identity import ProjectIdentity
from app.models.api_key import ApiKey
from app.models.email_log import EmailLog
from app.models.email_log_event import EmailLogEvent

# Export all for convenience
__all__ = [
    "Base", "User", "Project", "ProjectIdentity",
    "ApiKey", "EmailLog", "EmailLogEvent"
]
