import csv
import io
from datetime import date, datetime
from typing import Iterable, Optional

from eventhub.schemas.registration import Registration

EXPORT_COLUMNS = [
    "Registration ID",
    "Full Name",
    "Email",
    "Phone",
    "Event Type",
    "Ticket Type",
    "Status",
    "Registration Date",
    "Last Updated",
]

MISSING_PHONE = "N/A"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"EventHub_Registrations_{day.isoformat()}.csv"


def _timestamp(value: Optional[datetime]) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value else ""


def export_row(registration: Registration) -> list[str]:
    return [
        registration.id,
        registration.full_name,
        registration.email,
        registration.phone or MISSING_PHONE,
        registration.event_type,
        registration.ticket_type.value,
        registration.status.value,
        _timestamp(registration.created_at),
        _timestamp(registration.updated_at),
    ]


def registrations_to_csv(registrations: Iterable[Registration]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for registration in registrations:
        writer.writerow(export_row(registration))
    return buffer.getvalue()
