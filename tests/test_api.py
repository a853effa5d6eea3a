"""
HTTP tests for the appointments API and the WhatsApp webhook.
"""

from __future__ import annotations

import pytest
from conftest import MONDAY, PHONE, build_shop
from fastapi.testclient import TestClient

from barbershop.core.config import settings
from barbershop.main import app
from barbershop.wiring.dependencies import (
    get_appointment_service,
    get_handle_incoming_message_use_case,
    get_send_reply_use_case,
    get_slot_calculator,
)


@pytest.fixture
def shop(monkeypatch):
    shop = build_shop()
    monkeypatch.setattr(settings, "ENV", "test")
    monkeypatch.setattr(settings, "WHATSAPP_VERIFY_TOKEN", "verify-me")
    app.dependency_overrides[get_appointment_service] = lambda: shop.appointments
    app.dependency_overrides[get_slot_calculator] = lambda: shop.slots
    app.dependency_overrides[get_handle_incoming_message_use_case] = lambda: shop.handler
    app.dependency_overrides[get_send_reply_use_case] = lambda: shop.send_reply
    yield shop
    app.dependency_overrides.clear()


@pytest.fixture
def client(shop):
    return TestClient(app)


def _create(client, shop, start="2026-10-19T10:00:00-05:00", **overrides):
    customer = shop.clients.find_by_phone(PHONE) or shop.new_client()
    payload = {
        "client_id": customer.id,
        "employee_id": "emp-1",
        "service_name": "Corte de cabello",
        "start": start,
        "duration_minutes": 30,
        **overrides,
    }
    return client.post("/api/v1/appointments", json=payload)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_and_fetch(client, shop):
    response = _create(client, shop)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["origin"] == "MANUAL"
    assert body["calendar_event_id"] == "mock_event_1"

    assert client.get(f"/api/v1/appointments/{body['id']}").json()["tracking_code"] == body["tracking_code"]
    by_code = client.get(f"/api/v1/appointments/by-code/{body['tracking_code'].lower()}")
    assert by_code.json()["id"] == body["id"]
    listed = client.get("/api/v1/appointments", params={"day": MONDAY.isoformat()}).json()
    assert [a["id"] for a in listed] == [body["id"]]


def test_double_booking_is_a_conflict(client, shop):
    first = _create(client, shop).json()

    response = _create(client, shop, start="2026-10-19T10:15:00-05:00")

    assert response.status_code == 409
    assert response.json()["detail"]["reason"] == "double_booking"
    assert response.json()["detail"]["appointment_id"] == first["id"]


def test_rule_violations_are_unprocessable(client, shop):
    response = _create(client, shop, start="2026-10-19T13:15:00-05:00")

    assert response.status_code == 422
    assert response.json()["detail"]["reason"] == "lunch_window"


def test_unknown_entities_are_not_found(client, shop):
    assert _create(client, shop, employee_id="emp-unknown").status_code == 404
    assert client.get("/api/v1/appointments/missing").status_code == 404
    assert client.get("/api/v1/appointments/by-code/RAD-ZZZZZZ").status_code == 404


def test_status_changes_and_delete(client, shop):
    created = _create(client, shop).json()
    url = f"/api/v1/appointments/{created['id']}"

    missing_reason = client.post(f"{url}/status", json={"status": "CANCELLED"})
    assert missing_reason.status_code == 422
    assert missing_reason.json()["detail"]["reason"] == "missing_reason"

    completed = client.post(f"{url}/status", json={"status": "COMPLETED"})
    assert completed.json()["status"] == "COMPLETED"
    assert client.delete(url).status_code == 422

    other = _create(client, shop, start="2026-10-19T11:00:00-05:00").json()
    assert client.delete(f"/api/v1/appointments/{other['id']}").status_code == 204
    assert client.get(f"/api/v1/appointments/{other['id']}").status_code == 404


def test_reschedule(client, shop):
    created = _create(client, shop).json()
    _create(client, shop, start="2026-10-19T11:00:00-05:00")
    url = f"/api/v1/appointments/{created['id']}"

    taken = client.patch(url, json={"start": "2026-10-19T11:00:00-05:00"})
    assert taken.status_code == 409
    assert taken.json()["detail"]["reason"] == "not_available"

    moved = client.patch(url, json={"start": "2026-10-19T16:00:00-05:00"})
    assert moved.status_code == 200
    assert moved.json()["start"].startswith("2026-10-19T16:00:00")


def test_slots_upcoming_and_statistics(client, shop):
    _create(client, shop)

    slots = client.get(
        "/api/v1/appointments/slots", params={"employee_id": "emp-1", "day": MONDAY.isoformat()}
    ).json()
    assert slots["duration_minutes"] == 30
    assert "10:00" not in slots["slots"]
    assert "09:30" in slots["slots"]

    assert len(client.get("/api/v1/appointments/upcoming").json()) == 1
    assert client.get("/api/v1/appointments/statistics").json() == {
        "total": 1,
        "pending": 1,
        "confirmed": 0,
        "completed": 0,
        "cancelled": 0,
    }


def test_webhook_verification(client):
    params = {"hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "challenge-42"}

    assert client.get("/webhooks/whatsapp", params=params).text == "challenge-42"
    assert client.get("/webhooks/whatsapp", params={**params, "hub.verify_token": "nope"}).status_code == 403


def test_webhook_message_gets_a_reply(client, shop):
    payload = {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "changes": [
                    {
                        "value": {
                            "messages": [
                                {
                                    "id": "wamid.api.1",
                                    "from": PHONE,
                                    "timestamp": "1760875200",
                                    "type": "text",
                                    "text": {"body": "hola"},
                                }
                            ]
                        }
                    }
                ]
            }
        ],
    }

    response = client.post("/webhooks/whatsapp", json=payload)

    assert response.status_code == 200
    assert shop.platform.messages_to(PHONE) == [shop.templates.welcome()]
    assert shop.platform.read == ["wamid.api.1"]


def test_webhook_rejects_bad_requests(client, monkeypatch):
    assert client.post("/webhooks/whatsapp", content=b"{not json").status_code == 400
    assert client.post("/webhooks/whatsapp", json={"object": "page", "entry": []}).status_code == 404

    monkeypatch.setattr(settings, "ENV", "production")
    assert client.post("/webhooks/whatsapp", json={"object": "whatsapp_business_account"}).status_code == 403
