from datetime import timedelta

from app.core.config import settings
from app.core.security import now_utc
from app.db.session import SessionLocal
from app.services.rate_limit import purge_windows
from app.services.subscriptions import deactivate_expired


def main():
    db = SessionLocal()
    try:
        now = now_utc()
        expired = deactivate_expired(db, now=now)
        purged = purge_windows(db, older_than=now - timedelta(hours=settings.RATE_LIMIT_RETENTION_HOURS))
        db.commit()
        print(f"ok: sweep completed (subscriptions_deactivated={expired}, rate_windows_purged={purged})")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
