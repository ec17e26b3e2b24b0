# seed_admin.py
import argparse

from oms.core.accounts import register_account
from oms.core.clock import utcnow
from oms.core.logging_setup import configure_logging
from oms.core.rbac import Role
from oms.db.session import SessionLocal
from oms.models.user import User


def main():
    parser = argparse.ArgumentParser(description="Create the first admin account.")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--password", default="admin123")
    parser.add_argument("--full-name", default="System Admin")
    args = parser.parse_args()

    configure_logging()
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == args.email.strip().lower()).one_or_none()
        if existing:
            print("Admin already exists:", existing.email)
            return

        reg = register_account(
            db=db,
            email=args.email,
            password=args.password,
            full_name=args.full_name,
            now=utcnow(),
            department="Administration",
        )
        reg.user.role = Role.ADMIN.value
        db.commit()
        print("Admin created:", reg.user.email)
    finally:
        db.close()


if __name__ == "__main__":
    main()
