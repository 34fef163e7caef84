"""Celery application configuration."""

from celery import Celery
from kombu import Queue, Exchange

from adminkit.config import settings

celery_app = Celery(
    "adminkit",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "adminkit.workers.tasks.imports",
    ],
)

# Task queues
celery_app.conf.task_queues = [
    Queue(settings.import_queue, Exchange("import"), routing_key=settings.import_queue),
    Queue("default", Exchange("default"), routing_key="default"),
]
celery_app.conf.task_default_queue = "default"

# Task routing
celery_app.conf.task_routes = {
    "adminkit.workers.tasks.imports.*": {"queue": settings.import_queue},
}

# Chunks must not be lost when a worker dies mid-transaction
celery_app.conf.task_acks_late = True
celery_app.conf.task_reject_on_worker_lost = True

# Concurrency settings
celery_app.conf.worker_concurrency = 4
celery_app.conf.worker_prefetch_multiplier = 1
celery_app.conf.worker_hijack_root_logger = False

# Task serialization
celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]

# Result expiration
celery_app.conf.result_expires = 86400  # 24 hours

# Visibility timeout for long-running tasks
celery_app.conf.broker_transport_options = {
    "visibility_timeout": 3600,  # 1 hour
}

# Timezone
celery_app.conf.timezone = "UTC"
celery_app.conf.enable_utc = True
