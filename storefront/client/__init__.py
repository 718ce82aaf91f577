"""Async client for the storefront API with a persisted session/cart store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storefront.client.api import StorefrontClient, calculate_prices, extract_error_message
from storefront.client.request_queue import HttpxTransport, RequestConfig, RequestQueue
from storefront.client.storage import AbstractStorage, InMemoryStorage, JsonFileStorage
from storefront.client.store import Store, load_state

if TYPE_CHECKING:
    from storefront.core.config import ClientSettings


def create_client(
    client_settings: ClientSettings | None = None,
    *,
    storage: AbstractStorage | None = None,
) -> StorefrontClient:
    """Wire storage, store, transport and queue into a ready client.

    Args:
        client_settings: Client configuration; the global settings when omitted.
        storage: Durable storage override (defaults to a JSON file when
            ``storage_path`` is configured, otherwise in-memory).
    """
    if client_settings is None:
        from storefront.core.config import settings

        client_settings = settings.client

    if storage is None:
        if client_settings.storage_path:
            storage = JsonFileStorage(client_settings.storage_path)
        else:
            storage = InMemoryStorage()

    transport = HttpxTransport(client_settings.base_url, timeout=client_settings.timeout_seconds)
    queue = RequestQueue(transport.send, delay_seconds=client_settings.queue_delay_seconds)
    return StorefrontClient(
        Store(storage),
        queue,
        transport,
        timeout=client_settings.timeout_seconds,
    )


__all__ = [
    "AbstractStorage",
    "HttpxTransport",
    "InMemoryStorage",
    "JsonFileStorage",
    "RequestConfig",
    "RequestQueue",
    "Store",
    "StorefrontClient",
    "calculate_prices",
    "create_client",
    "extract_error_message",
    "load_state",
]
