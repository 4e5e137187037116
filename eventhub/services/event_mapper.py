"""
Mapping from persisted event rows to application-level events.

Rows may be ORM instances or plain mappings (for example rows fetched with a
core ``select``). Mapping is total: any record shape produces an ``Event``.
"""

import math
from collections.abc import Mapping
from typing import Any, List, Optional, Union

from eventhub.schemas.event import Event

FREE = "Free"
PLACEHOLDER_IMAGE = "/placeholder.svg"
DEFAULT_CAPACITY = 100
DEFAULT_REGISTERED = 0
DEFAULT_CATEGORY = "Event"


def map_price(value: Any) -> Union[str, int, float]:
    """Normalize a stored price to ``"Free"`` or a number.

    A missing or blank price reads as ``0``. Text with digit separators is
    not a number.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return FREE
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0
        if text.lower() == "free" or "_" in text:
            return FREE
        try:
            number = float(text)
        except ValueError:
            return FREE
    if not math.isfinite(number):
        return FREE
    if number.is_integer():
        return int(number)
    return number


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _features(value: Any) -> Optional[List[str]]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return None


def map_event_row(row: Any) -> Event:
    description = _field(row, "description")
    category = _field(row, "event_type")
    image = _field(row, "image")
    long_description = _field(row, "long_description")
    organizer = _field(row, "organizer")
    return Event(
        id=_text(_field(row, "id")),
        title=_text(_field(row, "title")),
        description=_text(description),
        category=_text(category) if category else DEFAULT_CATEGORY,
        date=_text(_field(row, "date")),
        time=_text(_field(row, "time")),
        location=_text(_field(row, "location")),
        capacity=_int(_field(row, "capacity"), DEFAULT_CAPACITY),
        registered=_int(_field(row, "registered"), DEFAULT_REGISTERED),
        price=map_price(_field(row, "price")),
        image=_text(image) if image else PLACEHOLDER_IMAGE,
        long_description=(
            _text(long_description) if long_description is not None else None
        ),
        features=_features(_field(row, "features")),
        organizer=_text(organizer) if organizer is not None else None,
    )


def map_event_rows(rows: Any) -> List[Event]:
    return [map_event_row(row) for row in rows]
