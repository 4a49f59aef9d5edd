# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CELERY_TASK_ALWAYS_EAGER

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# explicit imports so the worker registers every task
celery_app.conf.imports = (
    "storefront.tasks.mail",
    "storefront.tasks.cleanup",
)

celery_app.conf.beat_schedule = {
    "clear-expired-otps-every-10-minutes": {
        "task": "storefront.tasks.cleanup.clear_expired_otps_task",
        "schedule": 600.0,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
