from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from eventhub.api import deps
from eventhub.core.errors import ErrorCode, http_status_for
from eventhub.schemas.admin import (
    AdminResult,
    DashboardStats,
    EventListResult,
    RegistrationListResult,
)
from eventhub.schemas.event import Event, EventForm
from eventhub.schemas.registration import Registration, RegistrationStatusUpdate
from eventhub.services.admin_service import AdminOperations

router = APIRouter(dependencies=[Depends(deps.get_current_admin)])

CONFIRM_DESCRIPTION = "Must be true; the action cannot be undone"


def _respond(result: AdminResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Admin results always carry the refetched list, failures included."""
    status_code = success_status
    if not result.ok and result.error_code:
        status_code = http_status_for(ErrorCode(result.error_code))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))


# Events


@router.get("/events", response_model=List[Event], summary="List Events")  # type: ignore[misc]
async def list_events(
    q: Optional[str] = Query(None, description="Search title, description or category"),
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    return await ops.list_events(q)


@router.post(
    "/events",
    response_model=EventListResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
)  # type: ignore[misc]
async def create_event(
    form: EventForm,
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    """
    **Create an Event**

    Required: `title`, `date`, `time`, `location`. Defaults: category
    `College Fest`, price `Free`, capacity 100. `features` may be a
    comma-separated string or a list.

    **Response:** outcome notice plus the reloaded event list.

    **Errors:**
    - `422`: Required fields missing or price is not `Free` or a positive amount
    - `403`: The store denied the write
    """
    return _respond(await ops.create_event(form), status.HTTP_201_CREATED)


@router.put("/events/{event_id}", response_model=EventListResult, summary="Update Event")  # type: ignore[misc]
async def update_event(
    event_id: str,
    form: EventForm,
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    """Replace an event's fields. Same validation as create."""
    return _respond(await ops.update_event(event_id, form))


@router.delete("/events/{event_id}", response_model=EventListResult, summary="Delete Event")  # type: ignore[misc]
async def delete_event(
    event_id: str,
    confirm: bool = Query(False, description=CONFIRM_DESCRIPTION),
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    """
    **Delete an Event**

    Registrations that copied this event's category are left in place.

    **Errors:**
    - `400`: `confirm` was not set
    - `404`: Event not found
    - `409`: The event is still referenced by other data
    """
    return _respond(await ops.delete_event(event_id, confirm))


# Registrations


@router.get("/registrations", response_model=List[Registration], summary="List Registrations")  # type: ignore[misc]
async def list_registrations(
    q: Optional[str] = Query(None, description="Search name, email or event type"),
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    return await ops.list_registrations(q)


@router.get("/registrations/export", summary="Export Registrations")  # type: ignore[misc]
async def export_registrations(
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Response:
    """
    **Export Registrations as CSV**

    Downloads `EventHub_Registrations_<YYYY-MM-DD>.csv` with one row per
    registration. Missing phone numbers are written as `N/A`.

    **Errors:**
    - `404`: No data to export
    """
    filename, content = await ops.export_registrations()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch(
    "/registrations/{registration_id}",
    response_model=RegistrationListResult,
    summary="Update Registration Status",
)  # type: ignore[misc]
async def update_registration_status(
    registration_id: str,
    body: RegistrationStatusUpdate,
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    """Set status to `pending`, `confirmed` or `cancelled`, from any status."""
    return _respond(await ops.update_registration_status(registration_id, body.status))


@router.delete(
    "/registrations/{registration_id}",
    response_model=RegistrationListResult,
    summary="Delete Registration",
)  # type: ignore[misc]
async def delete_registration(
    registration_id: str,
    confirm: bool = Query(False, description=CONFIRM_DESCRIPTION),
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    return _respond(await ops.delete_registration(registration_id, confirm))


@router.delete(
    "/registrations",
    response_model=RegistrationListResult,
    summary="Delete All Registrations",
)  # type: ignore[misc]
async def delete_all_registrations(
    confirm: bool = Query(False, description=CONFIRM_DESCRIPTION),
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    """
    **Delete All Registrations**

    Issues one bulk delete. When the store denies it (permission error),
    each registration is deleted individually and the call succeeds only
    if every row delete succeeded.

    **Errors:**
    - `400`: `confirm` was not set
    - `403`: Some rows could not be deleted
    """
    return _respond(await ops.delete_all_registrations(confirm))


# Dashboard


@router.get("/stats", response_model=DashboardStats, summary="Dashboard Stats")  # type: ignore[misc]
async def read_stats(
    ops: AdminOperations = Depends(deps.get_admin_operations),
) -> Any:
    """Event and registration totals plus a revenue estimate from paid tickets."""
    return await ops.dashboard_stats()
