"""
Background email tasks.

Both tasks are fire-and-forget and are never retried: a failed delivery is
logged by the base task and dropped.
"""

import logging
from typing import Any, Dict

from .celery_app import CONFIRMATION_TASK, CONTACT_TASK, celery_app
from .core.sendgrid_email import email_service

logger = logging.getLogger(__name__)


@celery_app.task(name=CONTACT_TASK, queue="emails")  # type: ignore[misc]
def send_contact_message_email(message: Dict[str, Any]) -> bool:
    """
    Forward a contact form submission to the support inbox.

    Args:
        message: full_name, email, phone, subject and message fields
    """
    sent = email_service.send_contact_message(message)
    if not sent:
        logger.warning(f"Contact message from {message.get('email')} not delivered")
    return sent


@celery_app.task(name=CONFIRMATION_TASK, queue="emails")  # type: ignore[misc]
def send_registration_confirmation_email(confirmation: Dict[str, Any]) -> bool:
    """
    Email a registration confirmation snapshot to the attendee.

    Args:
        confirmation: serialized RegistrationConfirmation
    """
    return email_service.send_registration_confirmation(confirmation)
