# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CART_CLEANUP_INTERVAL_SECONDS,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski musza byc zaimportowane zeby Celery je zarejestrowal
celery_app.conf.imports = ("storefront.tasks.expire",)

celery_app.conf.beat_schedule = {
    "purge-stale-cart-lines": {
        "task": "storefront.tasks.expire.purge_stale_cart_lines_task",
        "schedule": float(CART_CLEANUP_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"
