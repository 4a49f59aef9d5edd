# storefront/tasks/cleanup.py
from datetime import datetime, timezone

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def clear_expired_otps(db, now: datetime | None = None) -> int:
    cleared = UserRepo(db).clear_expired_otps(now or datetime.now(timezone.utc))
    logger.info(f"Cleared {cleared} expired OTPs")
    return cleared


@celery_app.task(name="storefront.tasks.cleanup.clear_expired_otps_task")
def clear_expired_otps_task():
    logger.info("Clear expired OTPs task started")

    db = SessionLocal()
    try:
        return clear_expired_otps(db)
    finally:
        db.close()
