"""Serialized outbound request queue.

All authenticated client calls go through one FIFO drained by a single worker
task, with a fixed pause between requests, so the client never has more than
one request in flight against the API's rate limits.

Notes:
- Enqueued requests cannot be cancelled and the queue has no overall
  deadline; each request carries its own timeout. A hung request therefore
  stalls everything behind it until its timeout fires.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 0.3
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class RequestConfig:
    """Description of one HTTP call, relative to the transport base URL."""

    method: str
    url: str
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT_SECONDS


@dataclass
class QueuedRequest:
    config: RequestConfig
    future: asyncio.Future


Sender = Callable[[RequestConfig], Awaitable[httpx.Response]]


class RequestQueue:
    """FIFO of requests executed one at a time."""

    def __init__(
        self,
        send: Sender,
        *,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the queue.

        Args:
            send: Coroutine function performing a single request.
            delay_seconds: Pause after each settled request.
            sleep: Awaitable sleep, injectable for tests.
        """
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._send = send
        self._delay = delay_seconds
        self._sleep = sleep
        self._pending: deque[QueuedRequest] = deque()
        self._worker: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def enqueue(self, config: RequestConfig) -> asyncio.Future:
        """Append ``config`` and return a future for its response.

        Must be called from a running event loop. Starts the worker when idle.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._pending.append(QueuedRequest(config=config, future=future))
        if not self.is_processing:
            self._worker = loop.create_task(self._drain())
        return future

    async def join(self) -> None:
        """Wait until every queued request has settled."""
        while True:
            worker = self._worker
            if worker is None or worker.done():
                return
            await asyncio.shield(worker)

    async def _drain(self) -> None:
        while self._pending:
            item = self._pending.popleft()
            try:
                response = await self._send(item.config)
            except Exception as exc:
                logger.debug(
                    "client.queue.request_failed",
                    extra={"method": item.config.method, "url": item.config.url, "error": str(exc)},
                )
                if not item.future.done():
                    item.future.set_exception(exc)
            else:
                if not item.future.done():
                    item.future.set_result(response)
            await self._sleep(self._delay)


class HttpxTransport:
    """Send :class:`RequestConfig` objects with a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(self, config: RequestConfig) -> httpx.Response:
        """Perform the request; raise ``httpx.HTTPStatusError`` on 4xx/5xx."""
        response = await self._client.request(
            config.method,
            config.url,
            json=config.json,
            headers=config.headers or None,
            timeout=config.timeout,
        )
        response.raise_for_status()
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
