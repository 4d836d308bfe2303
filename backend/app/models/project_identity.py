"""ProjectIdentity model"""
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.core.config import IDENTITY_STATUSES
from app.models.base import Base
from app.utils.ids import new_id


class ProjectIdentity(Base):
    """A sending domain verified with the email provider, scoped to a project"""
    __tablename__ = "project_identities"
    __table_args__ = (
        UniqueConstraint("project_id", "domain", name="uq_project_identities_project_domain"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    project_id = Column(String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    domain = Column(String(255), nullable=False, index=True)
    status = Column(
        Enum(*IDENTITY_STATUSES, name="identity_status", native_enum=False),
        default="pending",
        nullable=False
    )
    configuration_set_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    project = relationship("Project", back_populates="identities")

    @property
    def is_verified(self) -> bool:
        return self.status == "success"
