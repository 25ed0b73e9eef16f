# storefront/tasks/expire.py
from datetime import datetime, timezone, timedelta

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.cart_repo import CartRepo
from storefront.utils.settings import CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def purge_stale_cart_lines(session_factory=SessionLocal, ttl_seconds: int = CART_TTL_SECONDS) -> int:
    db = session_factory()
    try:
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)
        repo = CartRepo(db)
        purged = repo.purge_stale(cutoff)
        repo.commit()
        logger.info(f"Purged {purged} stale cart lines older than {cutoff.isoformat()}")
        return purged
    except Exception:
        db.rollback()
        logger.exception("Stale cart line purge failed")
        raise
    finally:
        db.close()


@celery_app.task(name="storefront.tasks.expire.purge_stale_cart_lines_task")
def purge_stale_cart_lines_task():
    logger.info("Purge stale cart lines task started")
    return {"deleted_items": purge_stale_cart_lines()}
