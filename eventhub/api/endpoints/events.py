import logging
from typing import Any, List

from fastapi import APIRouter, Depends, Query, status
from kombu.exceptions import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub import crud
from eventhub.api import deps
from eventhub.core.settings import settings
from eventhub.middleware.monitoring import metrics
from eventhub.schemas.event import CatalogPage, Event
from eventhub.schemas.registration import RegistrationConfirmation, RegistrationForm
from eventhub.services import registration_service
from eventhub.services.catalog import ALL_CATEGORIES, CATEGORIES, CatalogView
from eventhub.services.event_mapper import map_event_rows

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=CatalogPage, summary="Browse Events")  # type: ignore[misc]
async def read_events(
    db: AsyncSession = Depends(deps.get_db),
    q: str = Query("", description="Case-insensitive text matched against title and description"),
    category: str = Query(ALL_CATEGORIES, description="Category label, or 'All'"),
    page: int = Query(1, ge=1, description="1-based page number"),
) -> Any:
    """
    **Browse the Event Catalog**

    Loads every event (newest first), filters by free text and category,
    and returns one page of 12.

    **Query Parameters:**
    - `q`: matched against title and description, case-insensitively
    - `category`: one of the known categories, any other label, or `All`
    - `page`: pages past the end return an empty `items` list

    Use `has_previous` / `has_next` to enable or disable page navigation.
    """
    view = CatalogView()
    view.set_query(q)
    view.set_category(category)
    view.set_page(page)
    rows = await crud.event.get_events(db)
    return view.render(map_event_rows(rows))


@router.get("/categories", response_model=List[str], summary="Category Filters")  # type: ignore[misc]
async def read_categories() -> Any:
    """Category choices for the catalog filter, starting with `All`."""
    return CATEGORIES


@router.get("/{event_id}", response_model=Event, summary="Get Event Details")  # type: ignore[misc]
async def read_event(event_id: str, db: AsyncSession = Depends(deps.get_db)) -> Any:
    """
    **Get Event Details**

    Returns one event with its derived `available_spots`, `availability`
    (`available`, `almost_full` or `sold_out`) and `registration_open`.

    **Errors:**
    - `404`: Event not found
    """
    return await registration_service.load_event(db, event_id)


@router.post(
    "/{event_id}/registrations",
    response_model=RegistrationConfirmation,
    status_code=status.HTTP_201_CREATED,
    summary="Register for an Event",
)  # type: ignore[misc]
async def create_registration(
    event_id: str,
    form: RegistrationForm,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    **Register for an Event**

    Validates the attendee form, derives the ticket type from the event's
    price (`Free` gives a free ticket, anything else a paid one) and
    stores a confirmed registration.

    **Request Body:**
    - `full_name`, `email`, `phone` (required, non-empty)
    - `agree_to_terms` (must be true)
    - `subscribe_newsletter`, `special_requests` (optional)

    **Response:** a confirmation snapshot including `share_text`.

    **Errors:**
    - `422`: Terms not accepted or required fields missing
    - `404`: Event not found
    - `409`: Event is sold out
    - `502`: The registration could not be stored
    """
    confirmation = await registration_service.submit_registration(db, event_id, form)
    metrics.registrations_total.labels(
        ticket_type=confirmation.ticket_type.value
    ).inc()

    if settings.REGISTRATION_CONFIRMATION_EMAILS:
        from eventhub.celery_app import CONFIRMATION_TASK, celery_app

        try:
            celery_app.send_task(
                CONFIRMATION_TASK, args=[confirmation.model_dump(mode="json")]
            )
        except OperationalError as e:
            # The registration is stored; the email is best effort.
            logger.warning(
                f"Could not queue confirmation for {confirmation.registration_id}: {e}"
            )
    return confirmation
