from typing import Any, Awaitable, Callable

import pytest
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
from eventhub.models.event import Event
from eventhub.models.registration import RegistrationStatus, TicketType
from eventhub.schemas.registration import RegistrationForm
from eventhub.services.event_mapper import map_event_row
from eventhub.services.registration_service import (
    build_registration,
    derive_ticket_type,
    submit_registration,
    validate_submission,
)

EventFactory = Callable[..., Awaitable[Event]]


def valid_form(**overrides: Any) -> RegistrationForm:
    values = {
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "555-0100",
        "agree_to_terms": True,
    }
    values.update(overrides)
    return RegistrationForm(**values)


def test_terms_checked_first() -> None:
    with pytest.raises(TermsNotAcceptedError) as exc_info:
        validate_submission(valid_form(agree_to_terms=False, full_name=""))
    assert exc_info.value.message == "Please agree to the terms and conditions"


def test_missing_fields_reported() -> None:
    with pytest.raises(MissingFieldsError) as exc_info:
        validate_submission(valid_form(email="  ", phone=""))
    assert exc_info.value.fields == ["email", "phone"]
    assert exc_info.value.message == "Please fill in all required fields"


@pytest.mark.parametrize(  # type: ignore[misc]
    "price,ticket",
    [
        ("Free", TicketType.FREE),
        ("free", TicketType.FREE),
        ("250", TicketType.PAID),
        ("", TicketType.PAID),
    ],
)
def test_ticket_type_from_price(price: str, ticket: TicketType) -> None:
    event = map_event_row({"id": "e", "title": "t", "price": price})
    assert derive_ticket_type(event) == ticket


def test_build_registration_payload() -> None:
    event = map_event_row({"id": "e", "title": "t", "event_type": "Sports", "price": "20"})
    payload = build_registration(valid_form(), event)
    assert payload.model_dump() == {
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "555-0100",
        "event_type": "Sports",
        "ticket_type": TicketType.PAID,
        "status": RegistrationStatus.CONFIRMED,
    }


def test_build_registration_stores_trimmed_contact_fields() -> None:
    event = map_event_row({"id": "e", "title": "t", "price": "Free"})
    form = valid_form(full_name="  Ada Lovelace ", email=" ada@example.com\t", phone=" 555-0100 ")
    payload = build_registration(form, event)
    assert payload.full_name == "Ada Lovelace"
    assert payload.email == "ada@example.com"
    assert payload.phone == "555-0100"


async def test_rejected_submission_issues_no_store_request(
    db: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def fail(*args: Any, **kwargs: Any) -> None:
        raise AssertionError("store must not be called")

    monkeypatch.setattr(crud.event, "get_event", fail)
    monkeypatch.setattr(crud.registration, "create_registration", fail)

    with pytest.raises(TermsNotAcceptedError):
        await submit_registration(db, "any", valid_form(agree_to_terms=False))


async def test_submit_registration_success(db: AsyncSession, event_factory: EventFactory) -> None:
    event = await event_factory(title="Spring Fest", date="2026-04-12")

    confirmation = await submit_registration(db, event.id, valid_form())

    assert confirmation.event_title == "Spring Fest"
    assert confirmation.ticket_type == TicketType.FREE
    assert confirmation.share_text == "Just registered for Spring Fest on 2026-04-12. Join me!"

    rows = await crud.registration.get_registrations(db)
    assert len(rows) == 1
    assert rows[0].event_type == "College Fest"
    assert rows[0].status == RegistrationStatus.CONFIRMED

    # Counter is left alone by default
    refreshed = await crud.event.get_event(db, event.id)
    assert refreshed is not None
    await db.refresh(refreshed)
    assert refreshed.registered == 0


async def test_submit_registration_increments_when_enabled(
    db: AsyncSession, event_factory: EventFactory
) -> None:
    event = await event_factory(registered=5)

    await submit_registration(db, event.id, valid_form(), increment_count=True)

    refreshed = await crud.event.get_event(db, event.id)
    assert refreshed is not None
    await db.refresh(refreshed)
    assert refreshed.registered == 6


async def test_uncategorized_event_uses_mapped_label(db: AsyncSession, event_factory: EventFactory) -> None:
    event = await event_factory(event_type=None)
    await submit_registration(db, event.id, valid_form())
    rows = await crud.registration.get_registrations(db)
    # The row mapper labels an uncategorized event "Event"
    assert rows[0].event_type == "Event"


async def test_event_not_found(db: AsyncSession) -> None:
    with pytest.raises(EventNotFoundError):
        await submit_registration(db, "missing", valid_form())


async def test_sold_out_event_is_closed(db: AsyncSession, event_factory: EventFactory) -> None:
    event = await event_factory(capacity=100, registered=100)
    with pytest.raises(RegistrationClosedError):
        await submit_registration(db, event.id, valid_form())
    assert await crud.registration.get_registrations(db) == []


async def test_store_failure_is_generic(
    db: AsyncSession, event_factory: EventFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    event = await event_factory()

    async def broken_insert(*args: Any, **kwargs: Any) -> None:
        raise StoreError("connection reset")

    monkeypatch.setattr(crud.registration, "create_registration", broken_insert)

    with pytest.raises(RegistrationFailedError) as exc_info:
        await submit_registration(db, event.id, valid_form())
    assert exc_info.value.message == "Something went wrong. Please try again."
