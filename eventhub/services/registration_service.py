"""
Attendee registration submission.

A submission is validated entirely before any store request is made. The
ticket type is derived once, from the event's normalized price, and is never
re-derived afterwards.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from eventhub import crud
from eventhub.core.errors import (
    EventNotFoundError,
    MissingFieldsError,
    RegistrationClosedError,
    RegistrationFailedError,
    StoreError,
    TermsNotAcceptedError,
)
from eventhub.core.settings import settings
from eventhub.models.registration import RegistrationStatus, TicketType
from eventhub.schemas.event import Event
from eventhub.schemas.registration import (
    RegistrationConfirmation,
    RegistrationCreate,
    RegistrationForm,
)
from eventhub.services.event_mapper import FREE, map_event_row

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("full_name", "email", "phone")
UNKNOWN_EVENT_TYPE = "Unknown"


def validate_submission(form: RegistrationForm) -> None:
    if not form.agree_to_terms:
        raise TermsNotAcceptedError()
    missing = [name for name in REQUIRED_FIELDS if not getattr(form, name).strip()]
    if missing:
        raise MissingFieldsError(missing)


def derive_ticket_type(event: Event) -> TicketType:
    return TicketType.FREE if event.price == FREE else TicketType.PAID


def build_registration(form: RegistrationForm, event: Event) -> RegistrationCreate:
    return RegistrationCreate(
        full_name=form.full_name.strip(),
        email=form.email.strip(),
        phone=form.phone.strip(),
        event_type=event.category or UNKNOWN_EVENT_TYPE,
        ticket_type=derive_ticket_type(event),
        status=RegistrationStatus.CONFIRMED,
    )


async def load_event(db: AsyncSession, event_id: str) -> Event:
    row = await crud.event.get_event(db, event_id)
    if row is None:
        raise EventNotFoundError(event_id)
    return map_event_row(row)


async def submit_registration(
    db: AsyncSession,
    event_id: str,
    form: RegistrationForm,
    increment_count: Optional[bool] = None,
) -> RegistrationConfirmation:
    """Validate, insert and return the confirmation snapshot.

    Store failures are reported as a generic failure and never retried.
    """
    validate_submission(form)

    try:
        event = await load_event(db, event_id)
    except StoreError as e:
        logger.error(f"Failed to load event {event_id} for registration: {e}")
        raise RegistrationFailedError() from e

    if not event.registration_open:
        raise RegistrationClosedError(event_id)

    payload = build_registration(form, event)
    try:
        registration = await crud.registration.create_registration(db, payload)
    except StoreError as e:
        logger.error(f"Registration insert failed for event {event_id}: {e}")
        raise RegistrationFailedError() from e

    if increment_count is None:
        increment_count = settings.REGISTRATION_INCREMENTS_COUNT
    if increment_count:
        try:
            await crud.event.increment_registered(db, event_id)
        except StoreError as e:
            # The registration row already exists; report success regardless.
            logger.warning(f"Could not bump registered count for {event_id}: {e}")

    logger.info(
        f"Registration {registration.id} created for event {event_id} "
        f"({payload.ticket_type.value})"
    )

    return RegistrationConfirmation(
        registration_id=registration.id,
        event_id=event.id,
        event_title=event.title,
        event_date=event.date,
        event_time=event.time,
        event_location=event.location,
        event_category=event.category,
        full_name=payload.full_name,
        email=payload.email,
        ticket_type=payload.ticket_type,
    )
