#!/usr/bin/env python3
"""
HTTP boundary tests for the device registry API
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from flash_registry.core.config import settings
from flash_registry.main import create_app

MAC = "AA:BB:CC:DD:EE:01"
API = settings.API_PREFIX
ADMIN_HEADERS = {"X-API-Key": settings.ADMIN_API_KEY}


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def ticking_clock(monkeypatch):
    """Registry clock that advances one second per reading"""
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ticks = count()
    monkeypatch.setattr(
        "flash_registry.services.registry.utcnow",
        lambda: start + timedelta(seconds=next(ticks)),
    )


def parse_time(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def register(client, **payload):
    body = {"macAddress": MAC, "chipType": "ESP32-S3"}
    body.update(payload)
    return client.post(f"{API}/devices/register", json=body)


def test_register_scenario(client):
    response = register(client)
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    device = data["device"]
    assert device["isActive"] is True
    assert device["deviceId"]
    assert device["chipType"] == "ESP32-S3"
    assert "macAddress" not in device

    again = register(client, flashSize="16MB").json()["device"]
    assert again["deviceId"] == device["deviceId"]
    assert again["flashSize"] == "16MB"


def test_responses_use_camel_case(client):
    device = register(client, deviceType="DevKitC").json()["device"]
    assert set(device) == {
        "deviceId",
        "chipType",
        "flashSize",
        "deviceType",
        "registeredAt",
        "lastSeen",
        "isActive",
    }


def test_register_invalid_data(client, app):
    response = client.post(f"{API}/devices/register", json={"chipType": "ESP32"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid device data"
    assert app.state.registry.count() == 0


def test_register_blank_mac_rejected(client, app):
    response = register(client, macAddress="   ")
    assert response.status_code == 400
    assert app.state.registry.count() == 0

    logs = app.state.tracker.get_access_logs()
    assert logs[0].success is False
    assert logs[0].access_type == "register"


def test_get_device_hides_mac_and_refreshes_presence(client, app, ticking_clock):
    device = register(client).json()["device"]

    response = client.get(f"{API}/devices/{device['deviceId']}")
    assert response.status_code == 200
    assert MAC not in response.text

    fetched = response.json()["device"]
    assert fetched["deviceId"] == device["deviceId"]
    assert parse_time(fetched["lastSeen"]) > parse_time(device["lastSeen"])


def test_get_unknown_device(client, app):
    response = client.get(f"{API}/devices/never-registered")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Device not found"}
    assert app.state.registry.count() == 0


def test_list_active_devices(client):
    first = register(client).json()["device"]
    second = register(client, macAddress="AA:BB:CC:DD:EE:02", chipType="ESP32-C3").json()["device"]

    body = client.get(f"{API}/devices").json()
    assert body["count"] == 2
    assert [d["deviceId"] for d in body["devices"]] == [first["deviceId"], second["deviceId"]]
    assert MAC not in str(body)

    sorted_body = client.get(f"{API}/devices", params={"sort": "chipType"}).json()
    assert [d["chipType"] for d in sorted_body["devices"]] == ["ESP32-C3", "ESP32-S3"]


def test_list_rejects_unknown_sort(client):
    response = client.get(f"{API}/devices", params={"sort": "macAddress"})
    assert response.status_code == 400


def test_ping_refreshes_last_seen_only(client, app, ticking_clock):
    device = register(client, flashSize="16MB").json()["device"]
    registry = app.state.registry

    response = client.patch(f"{API}/devices/{device['deviceId']}/ping")
    assert response.status_code == 200
    assert response.json()["success"] is True

    after = registry.get_device_by_id(device["deviceId"])
    assert after.last_seen > parse_time(device["lastSeen"])
    assert after.chip_type == "ESP32-S3"
    assert after.flash_size == "16MB"
    assert after.is_active is True

    assert client.patch(f"{API}/devices/unknown/ping").status_code == 404


def test_deactivate_and_reregister(client):
    device = register(client).json()["device"]
    device_id = device["deviceId"]

    assert client.delete(f"{API}/devices/{device_id}").status_code == 200
    assert client.delete(f"{API}/devices/{device_id}").status_code == 200
    assert client.get(f"{API}/devices").json()["count"] == 0

    again = register(client).json()["device"]
    assert again["deviceId"] == device_id
    assert again["isActive"] is True
    assert client.get(f"{API}/devices").json()["count"] == 1


def test_deactivate_unknown(client, app):
    register(client)
    response = client.delete(f"{API}/devices/unknown-id")
    assert response.status_code == 404
    assert app.state.registry.count_active() == 1


def test_identify_registered_and_unknown(client):
    register(client, flashSize="16MB", deviceType="Sense360 Core")

    known = client.get(f"{API}/devices/identify/{MAC}").json()
    assert known["isRegistered"] is True
    assert known["chipFamily"] == "ESP32-S3"
    assert known["flashSize"] == "16MB"
    assert known["deviceType"] == "Sense360 Core"

    unknown = client.get(f"{API}/devices/identify/11:22:33:44:55:66")
    assert unknown.status_code == 200
    assert unknown.json()["isRegistered"] is False


def test_identify_does_not_reveal_device_id(client):
    device_id = register(client).json()["device"]["deviceId"]

    response = client.get(f"{API}/devices/identify/{MAC}")

    assert "deviceId" not in response.json()
    assert device_id not in response.text


def test_admin_logs_require_api_key(client):
    assert client.get(f"{API}/admin/logs").status_code == 401
    assert client.get(f"{API}/admin/logs", headers={"X-API-Key": "wrong"}).status_code == 401


def test_admin_logs(client):
    device_id = register(client).json()["device"]["deviceId"]
    client.patch(f"{API}/devices/{device_id}/ping")

    body = client.get(f"{API}/admin/logs", headers=ADMIN_HEADERS).json()
    assert body["count"] == 2
    assert [log["accessType"] for log in body["logs"]] == ["ping", "register"]
    assert MAC not in str(body)

    limited = client.get(
        f"{API}/admin/logs", params={"limit": 1}, headers=ADMIN_HEADERS
    ).json()
    assert limited["count"] == 1

    stats = client.get(f"{API}/admin/stats", headers=ADMIN_HEADERS).json()
    assert stats["totalAccesses"] == 2
    assert stats["byType"] == {"register": 1, "ping": 1}


def test_health(client):
    register(client)
    body = client.get(f"{API}/health").json()
    assert body["status"] == "healthy"
    assert body["totalDevices"] == 1
    assert body["activeDevices"] == 1


def test_apps_are_isolated():
    with TestClient(create_app()) as first, TestClient(create_app()) as second:
        register(first)
        assert first.get(f"{API}/devices").json()["count"] == 1
        assert second.get(f"{API}/devices").json()["count"] == 0


def test_error_envelope_documented(client):
    schema = client.get("/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]

    ping = schema["paths"][f"{API}/devices/{{device_id}}/ping"]["patch"]
    assert ping["responses"]["404"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
