#!/usr/bin/env python3
"""
Seed script to create the first admin account for a company.

Usage:
    export SEED_ADMIN_EMAIL="admin@example.com"
    export SEED_ADMIN_PASSWORD="your_password"
    export SEED_COMPANY_ID="company-1"

    python scripts/seed_admin.py
"""
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from boohk.auth import hash_password
from boohk.database import SessionLocal, init_db
from boohk.models import User
from boohk.services.validators import validate_user


def seed_admin():
    """Create the admin account described by the SEED_* environment variables."""
    user_data = {
        "email": (os.getenv("SEED_ADMIN_EMAIL") or "").strip().lower(),
        "password": os.getenv("SEED_ADMIN_PASSWORD") or "",
        "first_name": os.getenv("SEED_ADMIN_FIRST_NAME", "Admin"),
        "last_name": os.getenv("SEED_ADMIN_LAST_NAME"),
        "roles": ["admin"],
    }
    company_id = os.getenv("SEED_COMPANY_ID")
    if not company_id:
        print("Error: missing SEED_COMPANY_ID env var")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == user_data["email"]).first():
            print(f"Skipped: {user_data['email']} already exists")
            return

        result = validate_user(user_data, db)
        if not result.is_valid:
            for error in result.errors:
                print(f"  ! {error}")
            sys.exit(1)

        db.add(User(
            email=user_data["email"],
            password_hash=hash_password(user_data["password"]),
            first_name=user_data["first_name"],
            last_name=user_data["last_name"],
            company_id=company_id,
            roles=user_data["roles"],
            is_active=True,
        ))
        db.commit()
        print(f"Created: {user_data['email']} (admin, {company_id})")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    seed_admin()
