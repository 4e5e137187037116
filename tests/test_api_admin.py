from typing import Awaitable, Callable, Dict

from httpx import AsyncClient

from eventhub.models.event import Event

EventFactory = Callable[..., Awaitable[Event]]

NEW_EVENT = {
    "title": "Career Fair",
    "date": "2026-03-01",
    "time": "10:00",
    "location": "Hall A",
    "features": "Booths, Interviews",
}

REGISTRATION = {
    "full_name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "555-0100",
    "agree_to_terms": True,
}


async def test_admin_requires_session(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/events")
    assert response.status_code == 401


async def test_admin_rejects_garbage_token(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/admin/events", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


async def test_create_event_returns_refetched_list(
    client: AsyncClient, admin_headers: Dict[str, str]
) -> None:
    response = await client.post("/api/v1/admin/events", json=NEW_EVENT, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["ok"] is True
    assert body["notice"] == {"level": "success", "message": "Event created successfully"}
    assert [e["title"] for e in body["events"]] == ["Career Fair"]
    assert body["events"][0]["features"] == ["Booths", "Interviews"]


async def test_create_event_validation(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.post(
        "/api/v1/admin/events", json={**NEW_EVENT, "time": ""}, headers=admin_headers
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "Please fill in all required fields"

    response = await client.post(
        "/api/v1/admin/events", json={**NEW_EVENT, "price": "cheap"}, headers=admin_headers
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "INVALID_PRICE"


async def test_update_event(
    client: AsyncClient, admin_headers: Dict[str, str], event_factory: EventFactory
) -> None:
    event = await event_factory()

    response = await client.put(
        f"/api/v1/admin/events/{event.id}",
        json={**NEW_EVENT, "title": "Career Fair 2026"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["events"][0]["title"] == "Career Fair 2026"


async def test_update_missing_event(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.put("/api/v1/admin/events/nope", json=NEW_EVENT, headers=admin_headers)
    assert response.status_code == 404
    body = response.json()
    assert body["ok"] is False
    assert body["error_code"] == "EVENT_NOT_FOUND"
    assert body["events"] == []


async def test_delete_event_needs_confirm_and_keeps_registrations(
    client: AsyncClient, admin_headers: Dict[str, str], event_factory: EventFactory
) -> None:
    event = await event_factory()
    await client.post(f"/api/v1/events/{event.id}/registrations", json=REGISTRATION)

    response = await client.delete(f"/api/v1/admin/events/{event.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "CONFIRMATION_REQUIRED"

    response = await client.delete(
        f"/api/v1/admin/events/{event.id}", params={"confirm": "true"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["events"] == []

    catalog = await client.get("/api/v1/events/")
    assert catalog.json()["total"] == 0

    registrations = await client.get("/api/v1/admin/registrations", headers=admin_headers)
    assert len(registrations.json()) == 1


async def test_registration_management(
    client: AsyncClient, admin_headers: Dict[str, str], event_factory: EventFactory
) -> None:
    event = await event_factory(price="99")
    await client.post(f"/api/v1/events/{event.id}/registrations", json=REGISTRATION)
    await client.post(
        f"/api/v1/events/{event.id}/registrations",
        json={**REGISTRATION, "full_name": "Grace Hopper", "email": "grace@example.com"},
    )

    listing = await client.get(
        "/api/v1/admin/registrations", params={"q": "grace"}, headers=admin_headers
    )
    [grace] = listing.json()
    assert grace["ticket_type"] == "paid"

    response = await client.patch(
        f"/api/v1/admin/registrations/{grace['id']}",
        json={"status": "cancelled"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    statuses = {r["id"]: r["status"] for r in response.json()["registrations"]}
    assert statuses[grace["id"]] == "cancelled"

    response = await client.patch(
        f"/api/v1/admin/registrations/{grace['id']}",
        json={"status": "archived"},
        headers=admin_headers,
    )
    assert response.status_code == 422

    response = await client.delete(
        f"/api/v1/admin/registrations/{grace['id']}",
        params={"confirm": "true"},
        headers=admin_headers,
    )
    assert [r["full_name"] for r in response.json()["registrations"]] == ["Ada Lovelace"]

    stats = await client.get("/api/v1/admin/stats", headers=admin_headers)
    assert stats.json() == {
        "total_events": 1,
        "total_registrations": 1,
        "active_events": 1,
        "revenue": 50,
    }

    response = await client.delete(
        "/api/v1/admin/registrations", params={"confirm": "true"}, headers=admin_headers
    )
    assert response.json()["ok"] is True
    assert response.json()["registrations"] == []


async def test_export(
    client: AsyncClient, admin_headers: Dict[str, str], event_factory: EventFactory
) -> None:
    response = await client.get("/api/v1/admin/registrations/export", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "No data to export"

    event = await event_factory()
    await client.post(f"/api/v1/events/{event.id}/registrations", json=REGISTRATION)

    response = await client.get("/api/v1/admin/registrations/export", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "EventHub_Registrations_" in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("Registration ID,Full Name,Email")
    assert len(lines) == 2
