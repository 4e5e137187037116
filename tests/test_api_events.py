from typing import Any, Awaitable, Callable, Dict, List

from httpx import AsyncClient

from eventhub.celery_app import CONFIRMATION_TASK
from eventhub.models.event import Event

EventFactory = Callable[..., Awaitable[Event]]

REGISTRATION = {
    "full_name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "555-0100",
    "agree_to_terms": True,
}


async def test_catalog_pages_and_filters(client: AsyncClient, event_factory: EventFactory) -> None:
    for i in range(13):
        await event_factory(title=f"Talk {i}", event_type="Webinar")
    await event_factory(title="Cup Final", event_type="Sports", description="Football")

    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 14
    assert body["pages"] == 2
    assert len(body["items"]) == 12
    assert body["has_previous"] is False
    assert body["has_next"] is True

    response = await client.get("/api/v1/events/", params={"category": "Sports"})
    assert [e["title"] for e in response.json()["items"]] == ["Cup Final"]

    response = await client.get("/api/v1/events/", params={"q": "FOOT"})
    assert response.json()["total"] == 1

    response = await client.get("/api/v1/events/", params={"page": 5})
    assert response.json()["items"] == []


async def test_catalog_rejects_page_zero(client: AsyncClient) -> None:
    response = await client.get("/api/v1/events/", params={"page": 0})
    assert response.status_code == 422


async def test_categories(client: AsyncClient) -> None:
    response = await client.get("/api/v1/events/categories")
    assert response.json() == ["All", "College Fest", "Corporate Training", "Webinar", "Sports"]


async def test_event_detail(client: AsyncClient, event_factory: EventFactory) -> None:
    event = await event_factory(capacity=100, registered=95, price="250")

    response = await client.get(f"/api/v1/events/{event.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["price"] == 250
    assert body["available_spots"] == 5
    assert body["availability"] == "almost_full"
    assert body["registration_open"] is True
    assert body["image"] == "/placeholder.svg"


async def test_event_detail_not_found(client: AsyncClient) -> None:
    response = await client.get("/api/v1/events/missing")
    assert response.status_code == 404
    assert response.json()["error_code"] == "EVENT_NOT_FOUND"


async def test_register_for_event(
    client: AsyncClient, event_factory: EventFactory, sent_tasks: List[Dict[str, Any]]
) -> None:
    event = await event_factory(title="Spring Fest", date="2026-04-12", price="Free")

    response = await client.post(f"/api/v1/events/{event.id}/registrations", json=REGISTRATION)

    assert response.status_code == 201
    body = response.json()
    assert body["ticket_type"] == "free"
    assert body["share_text"] == "Just registered for Spring Fest on 2026-04-12. Join me!"
    assert [task["name"] for task in sent_tasks] == [CONFIRMATION_TASK]
    assert sent_tasks[0]["args"][0]["email"] == "ada@example.com"


async def test_register_requires_terms(client: AsyncClient, event_factory: EventFactory) -> None:
    event = await event_factory()
    payload = {**REGISTRATION, "agree_to_terms": False}

    response = await client.post(f"/api/v1/events/{event.id}/registrations", json=payload)

    assert response.status_code == 422
    assert response.json() == {
        "detail": "Please agree to the terms and conditions",
        "error_code": "TERMS_NOT_ACCEPTED",
    }


async def test_register_requires_fields(client: AsyncClient, event_factory: EventFactory) -> None:
    event = await event_factory()
    payload = {**REGISTRATION, "phone": ""}

    response = await client.post(f"/api/v1/events/{event.id}/registrations", json=payload)

    assert response.status_code == 422
    assert response.json()["fields"] == ["phone"]


async def test_register_sold_out(client: AsyncClient, event_factory: EventFactory) -> None:
    event = await event_factory(capacity=100, registered=100)

    response = await client.post(f"/api/v1/events/{event.id}/registrations", json=REGISTRATION)

    assert response.status_code == 409
    assert response.json()["error_code"] == "REGISTRATION_CLOSED"
