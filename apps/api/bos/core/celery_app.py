from celery import Celery

from bos.core.config import get_settings

settings = get_settings()

celery_app = Celery("bos_api", broker=settings.redis_url, backend=settings.redis_url, include=["bos.business.quotes.tasks"])
celery_app.conf.task_acks_late = True
celery_app.conf.task_reject_on_worker_lost = True
