from __future__ import annotations

import logging
from typing import Any

from celery import Celery, Task
from celery.signals import setup_logging
from kombu import Queue

from .core.settings import settings

logger = logging.getLogger(__name__)

CONTACT_TASK = "eventhub.tasks.send_contact_message_email"
CONFIRMATION_TASK = "eventhub.tasks.send_registration_confirmation_email"

# -----------------------------------------------------------------------------
# Celery App
# -----------------------------------------------------------------------------
celery_app = Celery(
    "eventhub",
    broker=settings.worker.CELERY_BROKER_URL,
    backend=settings.worker.CELERY_RESULT_BACKEND,
    include=["eventhub.tasks"],
)

celery_app.conf.update(
    task_serializer=settings.worker.CELERY_TASK_SERIALIZER,
    result_serializer=settings.worker.CELERY_RESULT_SERIALIZER,
    accept_content=settings.worker.CELERY_ACCEPT_CONTENT,
    timezone=settings.worker.CELERY_TIMEZONE,
    enable_utc=settings.worker.CELERY_ENABLE_UTC,
    task_routes={
        CONTACT_TASK: {"queue": "emails"},
        CONFIRMATION_TASK: {"queue": "emails"},
    },
    task_default_queue="default",
    task_queues={
        "default": Queue("default"),
        "emails": Queue("emails"),
    },
    worker_send_task_events=True,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    task_acks_late=True,
    task_track_started=True,
    task_reject_on_worker_lost=True,
    broker_connection_retry_on_startup=True,
    # Publishing from a request fails fast instead of hanging the caller
    broker_transport_options={"max_retries": 1},
    result_expires=3600,
    task_soft_time_limit=60,
    task_time_limit=120,
    task_annotations={
        CONTACT_TASK: {"rate_limit": "30/m"},
        CONFIRMATION_TASK: {"rate_limit": "100/m"},
    },
)

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


@setup_logging.connect  # type: ignore[misc]
def config_loggers(*args: Any, **kwargs: Any) -> None:
    """Configure JSON logging for Celery workers."""
    from logging.config import dictConfig

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "pythonjsonlogger.json.JsonFormatter",
                    "format": "%(asctime)s %(levelname)s %(processName)s %(name)s %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "level": settings.monitoring.LOG_LEVEL,
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
            },
            "root": {"level": settings.monitoring.LOG_LEVEL, "handlers": ["console"]},
            "loggers": {
                "celery": {
                    "level": "INFO",
                    "handlers": ["console"],
                    "propagate": False,
                },
                "eventhub.tasks": {
                    "level": "INFO",
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }
    )


# -----------------------------------------------------------------------------
# Custom Base Task
# -----------------------------------------------------------------------------


class CallbackTask(Task):
    """Base task class with structured logging for lifecycle events."""

    abstract = True

    def on_failure(
        self,
        exc: Exception,
        task_id: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        einfo: Any,  # Celery passes an ExceptionInfo, no stubs available
    ) -> None:
        logger.error(
            f"Task {self.name} [{task_id}] failed: {exc}",
            extra={"task_id": task_id, "task_name": self.name},
        )

    def on_success(
        self,
        retval: Any,
        task_id: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        logger.info(
            f"Task {self.name} [{task_id}] succeeded",
            extra={"task_id": task_id, "task_name": self.name, "retval": retval},
        )


celery_app.Task = CallbackTask
