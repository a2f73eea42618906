import json
import logging
import os

import httpx
import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from lifehub.config import SETTINGS
from lifehub.replication import HttpReplicator

SNAPSHOT = {"userProfile": {"fitnessPoints": 22}, "lastSync": "2026-10-19T08:00:00+00:00"}


def _recording_transport(requests: list[httpx.Request], status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, json={"ok": status < 400})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_replicate_schedules_on_running_loop():
    requests: list[httpx.Request] = []
    replicator = HttpReplicator(
        "https://backup.example.com/api/",
        token="secret-token",
        transport=_recording_transport(requests),
    )

    replicator.replicate(SNAPSHOT)
    assert requests == []  # not awaited by the caller

    await replicator.drain()
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "PUT"
    assert str(request.url) == "https://backup.example.com/api/LifeHub_Backups/Sister_Data"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert json.loads(request.content) == SNAPSHOT


@pytest.mark.asyncio
async def test_replicate_failure_is_logged(caplog):
    requests: list[httpx.Request] = []
    replicator = HttpReplicator(
        "https://backup.example.com", transport=_recording_transport(requests, status=503)
    )

    with caplog.at_level(logging.WARNING):
        replicator.replicate(SNAPSHOT)
        await replicator.drain()

    assert len(requests) == 1
    assert "Cloud sync failed" in caplog.text


def test_replicate_without_loop_uses_background_thread():
    requests: list[httpx.Request] = []
    replicator = HttpReplicator(
        "https://backup.example.com",
        collection="Backups",
        document="me",
        transport=_recording_transport(requests),
    )

    replicator.replicate(SNAPSHOT)
    replicator.join(timeout=5)

    assert len(requests) == 1
    assert str(requests[0].url) == "https://backup.example.com/Backups/me"
    assert "Authorization" not in requests[0].headers


def test_from_settings(monkeypatch):
    monkeypatch.setattr(SETTINGS, "REPLICATION_URL", None)
    assert HttpReplicator.from_settings() is None

    monkeypatch.setattr(SETTINGS, "REPLICATION_URL", "https://backup.example.com")
    monkeypatch.setattr(SETTINGS, "FF_REPLICATION", False)
    assert HttpReplicator.from_settings() is None

    monkeypatch.setattr(SETTINGS, "FF_REPLICATION", True)
    replicator = HttpReplicator.from_settings()
    assert replicator is not None
    assert replicator.url == "https://backup.example.com/LifeHub_Backups/Sister_Data"
