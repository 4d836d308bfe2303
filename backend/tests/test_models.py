"""Database integrity tests"""
import pytest
from datetime import datetime, timezone, timedelta
from sqlalchemy.exc import IntegrityError

from app.models.api_key import ApiKey
from app.models.email_log import EmailLog
from app.models.email_log_event import EmailLogEvent
from app.models.project import Project
from app.models.project_identity import ProjectIdentity
from app.models.user import User
from app.services.auth_service import create_user


def _email_log(project, api_key=None, status="sending"):
    return EmailLog(
        project_id=project.id,
        api_key_id=api_key.id if api_key else None,
        from_email="hello@mly.fyi",
        to_email="a@b.com",
        subject="Hello",
        text="Hello World",
        status=status
    )


@pytest.mark.medium
class TestModelRelationships:
    """Test model relationships"""

    def test_project_identities_relationship(self, project, identity, db_session):
        """Test Project.identities relationship"""
        db_session.refresh(project)
        assert len(project.identities) == 1
        assert project.identities[0].domain == "mly.fyi"
        assert identity.project.id == project.id

    def test_project_api_keys_relationship(self, project, api_key, db_session):
        """Test Project.api_keys relationship"""
        db_session.refresh(project)
        assert [k.id for k in project.api_keys] == [api_key.id]
        assert api_key.project.name == "Mly"

    def test_email_log_events_ordered_by_timestamp(self, project, api_key, db_session):
        """Test EmailLog.events are returned oldest first"""
        email_log = _email_log(project, api_key)
        db_session.add(email_log)
        db_session.commit()

        now = datetime.now(timezone.utc)
        db_session.add_all([
            EmailLogEvent(email_log_id=email_log.id, email="a@b.com", type="delivered",
                          timestamp=now + timedelta(seconds=5)),
            EmailLogEvent(email_log_id=email_log.id, email="a@b.com", type="sending",
                          timestamp=now),
        ])
        db_session.commit()
        db_session.expire(email_log)

        assert [e.type for e in email_log.events] == ["sending", "delivered"]
        assert all(e.email_log.id == email_log.id for e in email_log.events)

    def test_deleting_project_cascades_to_children(self, project, identity, api_key, db_session):
        """Test ORM delete of a project removes its identities, keys and logs"""
        db_session.add(_email_log(project, api_key))
        db_session.commit()

        db_session.delete(project)
        db_session.commit()

        assert db_session.query(ProjectIdentity).count() == 0
        assert db_session.query(ApiKey).count() == 0
        assert db_session.query(EmailLog).count() == 0


@pytest.mark.medium
class TestModelDefaults:
    """Test column defaults and derived properties"""

    def test_ids_are_opaque_hex(self, project, api_key):
        for value in (project.id, api_key.id):
            assert len(value) == 32
            int(value, 16)
        assert project.id != api_key.id

    def test_identity_defaults_to_pending(self, project, db_session):
        identity = ProjectIdentity(project_id=project.id, domain="acme.org")
        db_session.add(identity)
        db_session.commit()

        assert identity.status == "pending"
        assert identity.is_verified is False

    def test_api_key_is_revoked(self, api_key, db_session):
        assert api_key.is_revoked is False
        api_key.revoked_at = datetime.now(timezone.utc)
        db_session.commit()
        assert api_key.is_revoked is True

    def test_email_log_timestamps_set(self, project, db_session):
        email_log = _email_log(project)
        db_session.add(email_log)
        db_session.commit()

        assert email_log.created_at is not None
        assert email_log.updated_at is not None
        assert email_log.api_key_id is None

    def test_user_name_defaults_to_email_local_part(self, db_session):
        user = create_user(email="Someone@Acme.org", password="secret", db=db_session)
        assert user.email == "someone@acme.org"
        assert user.name == "someone"
        assert user.is_enabled is True
        assert user.verified_at is None
        assert user.password != "secret"


@pytest.mark.high
class TestModelConstraints:
    """Test unique constraints and enums"""

    def test_identity_domain_unique_per_project(self, project, identity, db_session):
        """Test a project cannot hold the same domain twice"""
        db_session.add(ProjectIdentity(project_id=project.id, domain="mly.fyi", status="pending"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_same_domain_allowed_in_other_project(self, identity, db_session):
        other = Project(name="Other")
        db_session.add(other)
        db_session.commit()

        db_session.add(ProjectIdentity(project_id=other.id, domain="mly.fyi", status="success"))
        db_session.commit()

        assert db_session.query(ProjectIdentity).filter(ProjectIdentity.domain == "mly.fyi").count() == 2

    def test_api_key_value_unique(self, project, api_key, db_session):
        db_session.add(ApiKey(project_id=project.id, key=api_key.key))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_duplicate_email_rejected(self, test_user, db_session):
        with pytest.raises(ValueError, match="Email already registered"):
            create_user(email="HELLO@mly.fyi", password="other", db=db_session)
        assert db_session.query(User).count() == 1
