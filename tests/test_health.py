"""Health endpoint tests."""

from datetime import datetime

from fastapi.testclient import TestClient

from relaybot.health import create_app, create_server

client = TestClient(create_app())


def test_health_returns_200():
    response = client.get("/health")
    assert response.status_code == 200


def test_health_returns_ok_status_and_timestamp():
    body = client.get("/health").json()
    assert body["status"] == "OK"
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


def test_only_health_is_exposed():
    assert client.get("/docs").status_code == 404


def test_server_config():
    server = create_server("127.0.0.1", 3999)
    assert server.config.host == "127.0.0.1"
    assert server.config.port == 3999
