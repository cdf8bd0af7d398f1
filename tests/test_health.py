# tests/test_health.py
from typing import Any


def test_root_responds(client: Any) -> None:
    """Verify that the root endpoint reports the service name."""
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["name"] == "Ticket Desk"


def test_health_reports_subscribers(client: Any) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert isinstance(body["subscribers"], int)
