import logging
from typing import Any

from fastapi import APIRouter, status
from kombu.exceptions import OperationalError

from eventhub.core.errors import ContactDeliveryError
from eventhub.middleware.monitoring import metrics
from eventhub.schemas.contact import ContactMessage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", status_code=status.HTTP_202_ACCEPTED, summary="Contact Support")  # type: ignore[misc]
async def send_contact_message(message: ContactMessage) -> Any:
    """
    **Send a Message to Support**

    Queues the message for delivery to the support inbox. Delivery happens
    in the background; a `202` means the message was accepted, not sent.

    **Errors:**
    - `422`: Missing or invalid fields
    - `503`: The message could not be queued
    """
    from eventhub.celery_app import CONTACT_TASK, celery_app

    try:
        celery_app.send_task(CONTACT_TASK, args=[message.model_dump(mode="json")])
    except OperationalError as e:
        metrics.contact_messages_total.labels(status="failed").inc()
        logger.error(f"Failed to queue contact message from {message.email}: {e}")
        raise ContactDeliveryError() from e

    metrics.contact_messages_total.labels(status="queued").inc()
    return {"message": "Message sent successfully. We'll get back to you soon."}
