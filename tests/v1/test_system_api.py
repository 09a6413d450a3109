"""Tests for system and transparency endpoints."""

from fastapi import status
from fastapi.testclient import TestClient


def test_system_config(client: TestClient) -> None:
    r = client.get("/api/v1/system/config")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["expiry"] == {
        "enabled": True,
        "note_life_hours": 24,
        "check_interval_minutes": 5,
    }
    assert data["limits"]["write"] == {"window_seconds": 60, "max_requests": 5}
    assert set(data["limits"]) == {"global", "write", "slowdown"}


def test_system_stats_counts_live_notes(client: TestClient) -> None:
    assert client.get("/api/v1/system/stats").json() == {"live_notes": 0}

    note_id = client.post("/api/v1/notes", json={"cipher": "abc"}).json()["id"]
    assert client.get("/api/v1/system/stats").json() == {"live_notes": 1}

    client.get(f"/api/v1/notes/{note_id}")
    assert client.get("/api/v1/system/stats").json() == {"live_notes": 0}
