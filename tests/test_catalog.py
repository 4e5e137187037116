from typing import List

import pytest

from eventhub.schemas.event import Event
from eventhub.services.catalog import (
    ALL_CATEGORIES,
    PAGE_SIZE,
    CatalogView,
    filter_events,
    paginate,
    search_events,
    total_pages,
)


def make_events(count: int, category: str = "Webinar") -> List[Event]:
    return [
        Event(
            id=f"{category}-{i}",
            title=f"{category} session {i}",
            description="Weekly talk" if i % 2 else "Hands-on lab",
            category=category,
            date="2026-01-01",
            time="10:00",
            location="Online",
        )
        for i in range(count)
    ]


@pytest.fixture  # type: ignore[misc]
def events() -> List[Event]:
    return make_events(5, "Webinar") + make_events(3, "Sports") + make_events(2, "College Fest")


def test_all_category_equals_no_filter(events: List[Event]) -> None:
    assert filter_events(events, "", ALL_CATEGORIES) == events


def test_empty_query_returns_category_set(events: List[Event]) -> None:
    sports = filter_events(events, "", "Sports")
    assert [e.id for e in sports] == ["Sports-0", "Sports-1", "Sports-2"]


def test_query_matches_title_or_description_case_insensitive(events: List[Event]) -> None:
    assert len(filter_events(events, "WEEKLY")) == 4
    assert [e.id for e in filter_events(events, "sports session 1")] == ["Sports-1"]


def test_query_and_category_combine(events: List[Event]) -> None:
    result = filter_events(events, "lab", "Webinar")
    assert [e.id for e in result] == ["Webinar-0", "Webinar-2", "Webinar-4"]


def test_unknown_category_is_accepted(events: List[Event]) -> None:
    assert filter_events(events, "", "Hackathon") == []


def test_filtering_is_idempotent(events: List[Event]) -> None:
    once = filter_events(events, "session", "Webinar")
    assert filter_events(once, "session", "Webinar") == once


def test_search_events_includes_category(events: List[Event]) -> None:
    assert len(search_events(events, "college fest")) == 2


@pytest.mark.parametrize(  # type: ignore[misc]
    "count,pages", [(0, 0), (1, 1), (12, 1), (13, 2), (24, 2), (25, 3)]
)
def test_total_pages(count: int, pages: int) -> None:
    assert total_pages(count) == pages


def test_pages_reconstruct_list() -> None:
    events = make_events(30)
    pages = total_pages(len(events))
    rebuilt: List[Event] = []
    for page in range(1, pages + 1):
        rebuilt.extend(paginate(events, page).items)
    assert rebuilt == events


def test_navigation_flags() -> None:
    events = make_events(30)
    first = paginate(events, 1)
    last = paginate(events, 3)
    assert first.has_previous is False and first.has_next is True
    assert last.has_previous is True and last.has_next is False
    assert len(first.items) == PAGE_SIZE
    assert len(last.items) == 6


def test_out_of_range_page_is_empty_not_clamped() -> None:
    result = paginate(make_events(5), 4)
    assert result.items == []
    assert result.page == 4
    assert result.pages == 1
    assert result.has_next is False


def test_view_resets_page_on_query_or_category_change() -> None:
    view = CatalogView()
    view.set_page(3)
    view.set_query("lab")
    assert view.page == 1
    view.set_page(2)
    view.set_category("Sports")
    assert view.page == 1
    view.set_page(2)
    assert view.page == 2
