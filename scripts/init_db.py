"""Create all tables and optionally an admin account.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --admin-email admin@school.edu --admin-password secret123
"""
import argparse

from edushield.core.database import SessionLocal, init_db
from edushield.core.security import hash_password
from edushield.models.enums import UserRole
from edushield.models.user import User
from edushield.repositories.user import UserRepository

parser = argparse.ArgumentParser(description="Initialise the EduShield database")
parser.add_argument("--admin-email", help="create an Admin user with this email")
parser.add_argument("--admin-password", help="password for the Admin user")
parser.add_argument("--admin-name", default="Administrator")
args = parser.parse_args()

init_db()
print("Tables created")

if args.admin_email:
    if not args.admin_password:
        parser.error("--admin-password is required with --admin-email")

    db = SessionLocal()
    try:
        users = UserRepository(db)
        if users.email_exists(args.admin_email):
            print(f"User {args.admin_email} already exists, skipping")
        else:
            users.create(
                User(
                    email=args.admin_email,
                    name=args.admin_name,
                    role=UserRole.ADMIN,
                    password_hash=hash_password(args.admin_password),
                    is_active=True,
                )
            )
            db.commit()
            print(f"Admin user {args.admin_email} created")
    finally:
        db.close()
