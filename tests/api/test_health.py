from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_reports_in_memory_backends(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "checks": {
            "database": "not_configured",
            "redis": "not_configured",
            "storage": "in_memory",
        },
    }


def test_ready_without_database(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200


def test_health_is_not_rate_limited(client: TestClient) -> None:
    statuses = {client.get("/health").status_code for _ in range(80)}
    assert statuses == {200}
