"""
Event catalog filtering and pagination.

The catalog loads the whole event list and filters it in memory: a free-text
query over title and description combined with a category selector, then a
fixed-size page slice.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from eventhub.schemas.event import CatalogPage, Event

PAGE_SIZE = 12
ALL_CATEGORIES = "All"
CATEGORIES = [
    ALL_CATEGORIES,
    "College Fest",
    "Corporate Training",
    "Webinar",
    "Sports",
]


def matches_query(event: Event, query: str) -> bool:
    needle = query.lower()
    return needle in event.title.lower() or needle in event.description.lower()


def matches_category(event: Event, category: str) -> bool:
    return category == ALL_CATEGORIES or event.category == category


def filter_events(
    events: Iterable[Event], query: str = "", category: str = ALL_CATEGORIES
) -> List[Event]:
    """Events matching both the query and the category, in input order."""
    return [
        event
        for event in events
        if matches_query(event, query) and matches_category(event, category)
    ]


def search_events(events: Iterable[Event], query: str) -> List[Event]:
    """Admin search: title, description or category."""
    needle = query.lower()
    return [
        event
        for event in events
        if needle in event.title.lower()
        or needle in event.description.lower()
        or needle in event.category.lower()
    ]


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(count / page_size)


def paginate(
    events: Sequence[Event], page: int = 1, page_size: int = PAGE_SIZE
) -> CatalogPage:
    # Out-of-range pages give an empty slice rather than being clamped
    pages = total_pages(len(events), page_size)
    start = (page - 1) * page_size
    items = list(events[start : start + page_size]) if page >= 1 else []
    return CatalogPage(
        items=items,
        total=len(events),
        page=page,
        page_size=page_size,
        pages=pages,
        has_previous=page > 1,
        has_next=page < pages,
    )


@dataclass
class CatalogView:
    """Catalog view state. Changing the query or category returns to page 1."""

    query: str = ""
    category: str = ALL_CATEGORIES
    page: int = 1

    def set_query(self, query: str) -> None:
        self.query = query
        self.page = 1

    def set_category(self, category: str) -> None:
        self.category = category
        self.page = 1

    def set_page(self, page: int) -> None:
        self.page = page

    def render(self, events: Iterable[Event]) -> CatalogPage:
        return paginate(filter_events(events, self.query, self.category), self.page)
