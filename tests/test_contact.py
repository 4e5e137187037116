from typing import Any, Dict, List

import pytest
from httpx import AsyncClient
from kombu.exceptions import OperationalError

from eventhub.celery_app import CONTACT_TASK, celery_app
from eventhub.core.sendgrid_email import SendGridEmailService

MESSAGE = {
    "full_name": "Ada Lovelace",
    "email": "ada@example.com",
    "phone": "555-0100",
    "subject": "Group tickets",
    "message": "Can we book 20 seats?",
}


async def test_contact_message_is_queued(
    client: AsyncClient, sent_tasks: List[Dict[str, Any]]
) -> None:
    response = await client.post("/api/v1/contact/", json=MESSAGE)

    assert response.status_code == 202
    assert sent_tasks == [{"name": CONTACT_TASK, "args": [MESSAGE], "kwargs": {}}]


async def test_contact_message_validation(
    client: AsyncClient, sent_tasks: List[Dict[str, Any]]
) -> None:
    response = await client.post("/api/v1/contact/", json={**MESSAGE, "email": "nope"})
    assert response.status_code == 422
    assert sent_tasks == []


async def test_contact_broker_down(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def broker_down(*args: Any, **kwargs: Any) -> None:
        raise OperationalError("connection refused")

    monkeypatch.setattr(celery_app, "send_task", broker_down)

    response = await client.post("/api/v1/contact/", json=MESSAGE)

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to send message. Please try again."


def test_contact_template_renders() -> None:
    service = SendGridEmailService()
    html, text = service.render_template(
        "contact_message",
        {
            "to_name": "EventHub Support",
            "from_name": "Ada <script>",
            "from_email": "ada@example.com",
            "phone": "555-0100",
            "subject": "Hi",
            "message": "Hello there",
            "project_name": "EventHub",
        },
    )
    assert "Ada &lt;script&gt;" in html
    assert "Hello there" in text


def test_emails_disabled_without_sendgrid() -> None:
    service = SendGridEmailService()
    assert service.send_contact_message(MESSAGE) is False
