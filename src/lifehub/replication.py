"""
Best-effort remote backup of the full store snapshot.

Replication never blocks or fails the local commit: requests run on the
current event loop when there is one, otherwise on a daemon thread, and every
error is logged as a warning.
"""

import asyncio
import logging
import threading
from typing import Any, Protocol

import httpx

from .config import SETTINGS

logger = logging.getLogger(__name__)


class Replicator(Protocol):
    def replicate(self, snapshot: dict[str, Any]) -> None: ...


class HttpReplicator:
    """PUTs the snapshot as JSON to ``{base_url}/{collection}/{document}``."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        collection: str = "LifeHub_Backups",
        document: str = "Sister_Data",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | httpx.BaseTransport | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}/{collection}/{document}"
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.timeout = timeout
        self.transport = transport
        self._tasks: set[asyncio.Task[None]] = set()
        self._threads: list[threading.Thread] = []

    @classmethod
    def from_settings(cls) -> "HttpReplicator | None":
        if not (SETTINGS.FF_REPLICATION and SETTINGS.REPLICATION_URL):
            return None
        return cls(
            SETTINGS.REPLICATION_URL,
            token=SETTINGS.REPLICATION_TOKEN,
            collection=SETTINGS.REPLICATION_COLLECTION,
            document=SETTINGS.REPLICATION_DOCUMENT,
            timeout=SETTINGS.REPLICATION_TIMEOUT,
        )

    def replicate(self, snapshot: dict[str, Any]) -> None:
        """Schedule the upload and return immediately."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._send_async(snapshot))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return

        thread = threading.Thread(target=self._send_sync, args=(snapshot,), daemon=True)
        self._threads = [t for t in self._threads if t.is_alive()]
        self._threads.append(thread)
        thread.start()

    async def _send_async(self, snapshot: dict[str, Any]) -> None:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if isinstance(self.transport, httpx.AsyncBaseTransport):
            kwargs["transport"] = self.transport
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                resp = await client.put(self.url, json=snapshot, headers=self.headers)
                resp.raise_for_status()
            logger.info("Cloud sync: success")
        except Exception as e:
            logger.warning("Cloud sync failed (offline?): %s", e)

    def _send_sync(self, snapshot: dict[str, Any]) -> None:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if isinstance(self.transport, httpx.BaseTransport):
            kwargs["transport"] = self.transport
        try:
            with httpx.Client(**kwargs) as client:
                resp = client.put(self.url, json=snapshot, headers=self.headers)
                resp.raise_for_status()
            logger.info("Cloud sync: success")
        except Exception as e:
            logger.warning("Cloud sync failed (offline?): %s", e)

    async def drain(self) -> None:
        """Wait for uploads scheduled on the running loop (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def join(self, timeout: float | None = None) -> None:
        """Wait for uploads sent from background threads."""
        for thread in self._threads:
            thread.join(timeout)
        self._threads = [t for t in self._threads if t.is_alive()]
