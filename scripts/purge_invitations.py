# purge_invitations.py
# Run periodically (cron) to drop invitations past their expiry.
from oms.core.clock import utcnow
from oms.core.invitations import purge_expired_invitations
from oms.core.logging_setup import configure_logging
from oms.db.session import SessionLocal


def main():
    configure_logging()
    db = SessionLocal()
    try:
        count = purge_expired_invitations(db, now=utcnow())
        db.commit()
        print("Expired invitations purged:", count)
    finally:
        db.close()


if __name__ == "__main__":
    main()
