"""Tests for the serialized request queue and its httpx transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from storefront.client.request_queue import HttpxTransport, RequestConfig, RequestQueue


class RecordingSender:
    """Fake transport tracking concurrency and call order."""

    def __init__(self, fail_urls: tuple[str, ...] = ()) -> None:
        self.fail_urls = fail_urls
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, config: RequestConfig) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.calls.append(config.url)
        try:
            await asyncio.sleep(0)
            if config.url in self.fail_urls:
                raise httpx.ConnectError("connection refused")
            return httpx.Response(200, json={"url": config.url})
        finally:
            self.in_flight -= 1


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_requests_settle_in_fifo_order_one_at_a_time():
    sender = RecordingSender()
    queue = RequestQueue(sender, sleep=RecordingSleep())
    settled: list[int] = []

    futures = []
    for i in range(5):
        future = queue.enqueue(RequestConfig("GET", f"/r{i}"))
        future.add_done_callback(lambda _f, i=i: settled.append(i))
        futures.append(future)

    responses = await asyncio.gather(*futures)

    assert settled == [0, 1, 2, 3, 4]
    assert sender.calls == [f"/r{i}" for i in range(5)]
    assert sender.max_in_flight == 1
    assert [r.json()["url"] for r in responses] == sender.calls


@pytest.mark.asyncio
async def test_failure_does_not_block_later_requests():
    sender = RecordingSender(fail_urls=("/bad",))
    queue = RequestQueue(sender, sleep=RecordingSleep())

    futures = [
        queue.enqueue(RequestConfig("GET", "/first")),
        queue.enqueue(RequestConfig("GET", "/bad")),
        queue.enqueue(RequestConfig("GET", "/last")),
    ]
    results = await asyncio.gather(*futures, return_exceptions=True)

    assert isinstance(results[0], httpx.Response)
    assert isinstance(results[1], httpx.ConnectError)
    assert isinstance(results[2], httpx.Response)
    assert sender.calls == ["/first", "/bad", "/last"]


@pytest.mark.asyncio
async def test_delay_follows_every_request():
    sleep = RecordingSleep()
    queue = RequestQueue(RecordingSender(fail_urls=("/b",)), delay_seconds=0.3, sleep=sleep)

    for url in ("/a", "/b", "/c"):
        queue.enqueue(RequestConfig("GET", url))
    await queue.join()

    assert sleep.delays == [0.3, 0.3, 0.3]


@pytest.mark.asyncio
async def test_is_processing_tracks_worker_lifecycle():
    queue = RequestQueue(RecordingSender(), sleep=RecordingSleep())
    assert queue.is_processing is False

    future = queue.enqueue(RequestConfig("GET", "/a"))
    queue.enqueue(RequestConfig("GET", "/b"))
    assert queue.is_processing is True
    assert len(queue) == 2

    await future
    await queue.join()

    assert queue.is_processing is False
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_join_on_idle_queue_returns_immediately():
    sender = RecordingSender()
    queue = RequestQueue(sender, sleep=RecordingSleep())

    await asyncio.wait_for(queue.join(), timeout=1)

    assert queue.is_processing is False
    assert sender.calls == []


@pytest.mark.asyncio
async def test_enqueue_after_drain_restarts_worker():
    sender = RecordingSender()
    queue = RequestQueue(sender, sleep=RecordingSleep())

    await queue.enqueue(RequestConfig("GET", "/a"))
    await queue.join()
    response = await queue.enqueue(RequestConfig("GET", "/b"))

    assert response.json() == {"url": "/b"}
    assert sender.calls == ["/a", "/b"]


@pytest.mark.asyncio
async def test_requests_enqueued_while_running_are_appended():
    sender = RecordingSender()
    queue = RequestQueue(sender, sleep=RecordingSleep())
    order: list[str] = []

    async def producer(name: str) -> None:
        response = await queue.enqueue(RequestConfig("GET", f"/{name}"))
        order.append(response.json()["url"])

    await asyncio.gather(producer("a"), producer("b"), producer("c"))

    assert order == ["/a", "/b", "/c"]
    assert sender.max_in_flight == 1


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        RequestQueue(RecordingSender(), delay_seconds=-1)


@pytest.mark.asyncio
async def test_httpx_transport_sends_config():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"ok": True})

    transport = HttpxTransport("http://api.test", transport=httpx.MockTransport(handler))
    try:
        response = await transport.send(
            RequestConfig(
                "POST",
                "/api/orders",
                json={"a": 1},
                headers={"Authorization": "Bearer t"},
            )
        )
    finally:
        await transport.aclose()

    assert response.status_code == 201
    assert seen == {
        "method": "POST",
        "url": "http://api.test/api/orders",
        "auth": "Bearer t",
        "body": {"a": 1},
    }


@pytest.mark.asyncio
async def test_httpx_transport_raises_for_error_status():
    transport = HttpxTransport(
        "http://api.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(404, json={"detail": "Not Found"})),
    )
    try:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await transport.send(RequestConfig("GET", "/api/missing"))
    finally:
        await transport.aclose()

    assert exc_info.value.response.status_code == 404
