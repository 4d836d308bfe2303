#!/usr/bin/env python3
"""
Provision a project, a sending identity and an API key.

Usage:
    # New project with SES credentials and a verified identity
    python create_api_key.py --project "Mly" --domain mly.fyi \
        --access-key-id AKIA... --secret-access-key ... \
        --configuration-set mly-tracking --verified

    # Another key for an existing project
    python create_api_key.py --project-id 3f1c... --name ci

    # Revoke a key
    python create_api_key.py --revoke 9a2b...
"""

import argparse
import sys
import os

# Add parent directory to path to import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import SessionLocal, init_db
from app.models import Project, ProjectIdentity
from app.services.api_key_service import create_api_key, revoke_api_key


def provision(args) -> bool:
    """Create (or reuse) a project, optionally add an identity, and issue a key"""
    db = SessionLocal()
    try:
        if args.project_id:
            project = db.query(Project).filter(Project.id == args.project_id).first()
            if not project:
                print(f"❌ Project not found: {args.project_id}")
                return False
        else:
            project = Project(
                name=args.project,
                access_key_id=args.access_key_id,
                secret_access_key=args.secret_access_key,
                region=args.region
            )
            db.add(project)
            db.commit()
            print(f"✅ Created project {project.name} ({project.id})")

        if args.domain:
            identity = ProjectIdentity(
                project_id=project.id,
                domain=args.domain.strip().lower(),
                status="success" if args.verified else "pending",
                configuration_set_name=args.configuration_set
            )
            db.add(identity)
            db.commit()
            print(f"✅ Added identity {identity.domain} (status: {identity.status})")

        api_key = create_api_key(project.id, db, name=args.name)
        print(f"✅ API key ({api_key.id}): {api_key.key}")
        return True

    except Exception as e:
        print(f"❌ Error: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def revoke(api_key_id: str) -> bool:
    db = SessionLocal()
    try:
        api_key = revoke_api_key(api_key_id, db)
        if not api_key:
            print(f"❌ API key not found: {api_key_id}")
            return False
        print(f"✅ Revoked API key {api_key.id}")
        return True
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Provision projects, identities and API keys")
    parser.add_argument("--project", default="default", help="Name for a new project")
    parser.add_argument("--project-id", help="Use an existing project instead of creating one")
    parser.add_argument("--access-key-id", help="AWS access key id for the project")
    parser.add_argument("--secret-access-key", help="AWS secret access key for the project")
    parser.add_argument("--region", help="SES region (defaults to DEFAULT_SES_REGION)")
    parser.add_argument("--domain", help="Sending domain to register as an identity")
    parser.add_argument("--configuration-set", help="SES configuration set for the identity")
    parser.add_argument("--verified", action="store_true", help="Mark the identity as verified")
    parser.add_argument("--name", default="default", help="API key name")
    parser.add_argument("--revoke", metavar="API_KEY_ID", help="Revoke an API key and exit")
    args = parser.parse_args()

    init_db()

    if args.revoke:
        ok = revoke(args.revoke)
    else:
        ok = provision(args)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
