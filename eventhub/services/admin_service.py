"""
Admin record operations.

Every mutation is a single store request in its own session, followed by a
full reload of the affected list whether or not the mutation succeeded.
Results carry a notice for the dashboard and, on failure, the error code.
"""

import asyncio
import logging
import math
from typing import Any, List, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventhub import crud
from eventhub.core.errors import (
    ConfirmationRequiredError,
    DomainError,
    EventNotFoundError,
    InvalidPriceError,
    MissingFieldsError,
    NothingToExportError,
    RegistrationNotFoundError,
    StoreError,
)
from eventhub.core.settings import settings
from eventhub.middleware.monitoring import metrics
from eventhub.models.registration import RegistrationStatus, TicketType
from eventhub.schemas.admin import (
    DashboardStats,
    EventListResult,
    Notice,
    NoticeLevel,
    RegistrationListResult,
)
from eventhub.schemas.event import Event, EventForm
from eventhub.schemas.registration import Registration
from eventhub.services.catalog import search_events
from eventhub.services.event_mapper import DEFAULT_CAPACITY, FREE, map_event_rows
from eventhub.services.export import export_filename, registrations_to_csv

logger = logging.getLogger(__name__)

EVENT_REQUIRED_FIELDS = ("title", "date", "time", "location")


def parse_features(value: Union[str, Sequence[str], None]) -> Optional[List[str]]:
    """Comma-separated text or a list, trimmed with empties dropped."""
    if value is None:
        return None
    parts = value.split(",") if isinstance(value, str) else value
    features = [str(part).strip() for part in parts if str(part).strip()]
    return features or None


def normalize_price(value: str) -> str:
    """Validate a price entered by an admin and return its stored text."""
    text = (value or "").strip()
    if not text or text.lower() == "free":
        return FREE
    if "_" in text:
        raise InvalidPriceError(value)
    try:
        amount = float(text)
    except ValueError:
        raise InvalidPriceError(value) from None
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidPriceError(value) from None
    return text


def event_form_values(form: EventForm) -> dict[str, Any]:
    missing = [
        name for name in EVENT_REQUIRED_FIELDS if not getattr(form, name).strip()
    ]
    if missing:
        raise MissingFieldsError(missing)
    return {
        "title": form.title.strip(),
        "description": form.description,
        "event_type": form.category,
        "date": form.date,
        "time": form.time,
        "location": form.location.strip(),
        "price": normalize_price(form.price),
        "capacity": form.capacity or DEFAULT_CAPACITY,
        "image": form.image or None,
        "features": parse_features(form.features),
        "long_description": form.long_description,
        "organizer": form.organizer,
    }


def search_registrations(
    registrations: Sequence[Registration], query: str
) -> List[Registration]:
    needle = query.lower()
    return [
        registration
        for registration in registrations
        if needle in registration.full_name.lower()
        or needle in registration.email.lower()
        or needle in registration.event_type.lower()
    ]


def compute_dashboard_stats(
    events: Sequence[Event],
    registrations: Sequence[Registration],
    revenue_per_ticket: Optional[int] = None,
) -> DashboardStats:
    if revenue_per_ticket is None:
        revenue_per_ticket = settings.REVENUE_PER_PAID_TICKET
    paid = sum(1 for r in registrations if r.ticket_type == TicketType.PAID)
    return DashboardStats(
        total_events=len(events),
        total_registrations=len(registrations),
        # Every loaded event counts as active
        active_events=len(events),
        revenue=paid * revenue_per_ticket,
    )


def _success(message: str) -> Notice:
    return Notice(level=NoticeLevel.SUCCESS, message=message)


def _failure(message: str) -> Notice:
    return Notice(level=NoticeLevel.ERROR, message=message)


class AdminOperations:
    """Admin dashboard operations over the event and registration tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    # Reads

    async def list_events(self, query: Optional[str] = None) -> List[Event]:
        async with self.session_factory() as db:
            rows = await crud.event.get_events(db)
        events = map_event_rows(rows)
        return search_events(events, query) if query else events

    async def list_registrations(
        self, query: Optional[str] = None
    ) -> List[Registration]:
        async with self.session_factory() as db:
            rows = await crud.registration.get_registrations(db)
        registrations = [Registration.model_validate(row) for row in rows]
        return search_registrations(registrations, query) if query else registrations

    async def dashboard_stats(self) -> DashboardStats:
        events = await self.list_events()
        registrations = await self.list_registrations()
        return compute_dashboard_stats(events, registrations)

    async def export_registrations(self) -> tuple[str, str]:
        """Returns ``(filename, csv_text)`` for the current registration list."""
        registrations = await self.list_registrations()
        if not registrations:
            raise NothingToExportError()
        return export_filename(), registrations_to_csv(registrations)

    # Event mutations

    async def _event_result(
        self, success: str, failure: Optional[DomainError] = None, prefix: str = ""
    ) -> EventListResult:
        events = await self.list_events()
        if failure is None:
            return EventListResult(ok=True, notice=_success(success), events=events)
        return EventListResult(
            ok=False,
            notice=_failure(_describe(failure, prefix)),
            error_code=failure.code.value,
            events=events,
        )

    async def create_event(self, form: EventForm) -> EventListResult:
        values = event_form_values(form)
        failure: Optional[DomainError] = None
        try:
            async with self.session_factory() as db:
                created = await crud.event.create_event(db, values)
            metrics.events_created_total.inc()
            logger.info(f"Event {created.id} created: {created.title}")
        except StoreError as e:
            logger.error(f"Event create failed: {e}")
            failure = e
        return await self._event_result(
            "Event created successfully", failure, "Error creating event"
        )

    async def update_event(self, event_id: str, form: EventForm) -> EventListResult:
        values = event_form_values(form)
        failure: Optional[DomainError] = None
        try:
            async with self.session_factory() as db:
                if not await crud.event.update_event(db, event_id, values):
                    failure = EventNotFoundError(event_id)
        except StoreError as e:
            logger.error(f"Event {event_id} update failed: {e}")
            failure = e
        return await self._event_result(
            "Event updated successfully", failure, "Error updating event"
        )

    async def delete_event(self, event_id: str, confirm: bool) -> EventListResult:
        if not confirm:
            raise ConfirmationRequiredError("delete this event")
        failure: Optional[DomainError] = None
        try:
            async with self.session_factory() as db:
                if not await crud.event.delete_event(db, event_id):
                    failure = EventNotFoundError(event_id)
        except StoreError as e:
            logger.error(f"Event {event_id} delete failed: {e}")
            failure = e
        return await self._event_result(
            "Event deleted successfully", failure, "Error deleting event"
        )

    # Registration mutations

    async def _registration_result(
        self, success: str, failure: Optional[DomainError] = None, prefix: str = ""
    ) -> RegistrationListResult:
        registrations = await self.list_registrations()
        if failure is None:
            return RegistrationListResult(
                ok=True, notice=_success(success), registrations=registrations
            )
        return RegistrationListResult(
            ok=False,
            notice=_failure(_describe(failure, prefix)),
            error_code=failure.code.value,
            registrations=registrations,
        )

    async def update_registration_status(
        self, registration_id: str, status: RegistrationStatus
    ) -> RegistrationListResult:
        failure: Optional[DomainError] = None
        try:
            async with self.session_factory() as db:
                if not await crud.registration.update_status(
                    db, registration_id, status
                ):
                    failure = RegistrationNotFoundError(registration_id)
        except StoreError as e:
            logger.error(f"Registration {registration_id} status update failed: {e}")
            failure = e
        return await self._registration_result(
            f"Registration marked as {status.value}",
            failure,
            "Error updating registration",
        )

    async def delete_registration(
        self, registration_id: str, confirm: bool
    ) -> RegistrationListResult:
        if not confirm:
            raise ConfirmationRequiredError("delete this registration")
        failure: Optional[DomainError] = None
        try:
            async with self.session_factory() as db:
                if not await crud.registration.delete_registration(
                    db, registration_id
                ):
                    failure = RegistrationNotFoundError(registration_id)
        except StoreError as e:
            logger.error(f"Registration {registration_id} delete failed: {e}")
            failure = e
        return await self._registration_result(
            "Registration deleted successfully", failure, "Error deleting registration"
        )

    async def delete_all_registrations(self, confirm: bool) -> RegistrationListResult:
        """Bulk delete, falling back to per-row deletes on a permission error."""
        if not confirm:
            raise ConfirmationRequiredError("delete ALL registrations")
        failure: Optional[DomainError] = None
        try:
            async with self.session_factory() as db:
                removed = await crud.registration.delete_all_registrations(db)
            logger.info(f"Bulk delete removed {removed} registrations")
        except StoreError as e:
            if e.is_permission_denied:
                logger.warning("Bulk delete denied, deleting registrations one by one")
                failure = await self._delete_registrations_individually()
            else:
                logger.error(f"Bulk registration delete failed: {e}")
                failure = e
        return await self._registration_result(
            "All registrations deleted successfully",
            failure,
            "Error deleting registrations",
        )

    async def _delete_one(self, registration_id: str) -> bool:
        async with self.session_factory() as db:
            return await crud.registration.delete_registration(db, registration_id)

    async def _delete_registrations_individually(self) -> Optional[StoreError]:
        """Issue one delete per row concurrently and wait for all of them.

        Returns the first failure, or None when every delete succeeded. Rows
        that vanished in the meantime count as deleted.
        """
        try:
            async with self.session_factory() as db:
                rows = await crud.registration.get_registrations(db)
        except StoreError as e:
            logger.error(f"Could not list registrations for per-row delete: {e}")
            return e
        ids = [row.id for row in rows]
        results = await asyncio.gather(
            *(self._delete_one(registration_id) for registration_id in ids),
            return_exceptions=True,
        )
        failures: List[StoreError] = []
        for registration_id, result in zip(ids, results):
            if isinstance(result, StoreError):
                failures.append(result)
            elif isinstance(result, Exception):
                logger.exception(
                    f"Unexpected error deleting registration {registration_id}",
                    exc_info=result,
                )
                failures.append(StoreError(str(result)))
            elif isinstance(result, BaseException):
                raise result
        if failures:
            logger.error(
                f"Per-row delete failed for {len(failures)} of {len(ids)} registrations"
            )
            return failures[0]
        return None


def _describe(failure: DomainError, prefix: str) -> str:
    if isinstance(failure, StoreError):
        return failure.describe(prefix)
    return failure.message
