"""Mutable holder around the pure client state transition.

``Store`` applies intents through :func:`storefront.client.state.reduce`,
writes the session and cart to durable storage after each change and
notifies subscribers. ``load_state`` rehydrates from the same storage.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable

from pydantic import ValidationError

from storefront.client.state import AppState, Cart, CartLine, Session, reduce
from storefront.client.storage import AbstractStorage
from storefront.schemas.order import ShippingAddress

logger = logging.getLogger(__name__)

USER_INFO_KEY = "user_info"
CART_ITEMS_KEY = "cart_items"
SHIPPING_ADDRESS_KEY = "shipping_address"
PAYMENT_METHOD_KEY = "payment_method"

Listener = Callable[[AppState], None]


def _read_json(storage: AbstractStorage, key: str) -> Any:
    raw = storage.get(key)
    if not raw:
        return None
    return json.loads(raw)


def _load_session(storage: AbstractStorage) -> Session | None:
    try:
        data = _read_json(storage, USER_INFO_KEY)
        return Session.model_validate(data) if data is not None else None
    except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as exc:
        logger.warning("client.state.rehydrate_failed", extra={"key": USER_INFO_KEY, "error": str(exc)})
        return None


def _load_cart_items(storage: AbstractStorage) -> tuple[CartLine, ...]:
    try:
        data = _read_json(storage, CART_ITEMS_KEY)
        if data is None:
            return ()
        if not isinstance(data, list):
            raise TypeError("cart items must be a list")
        return tuple(CartLine.model_validate(item) for item in data)
    except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as exc:
        logger.warning("client.state.rehydrate_failed", extra={"key": CART_ITEMS_KEY, "error": str(exc)})
        return ()


def _load_shipping_address(storage: AbstractStorage) -> ShippingAddress | None:
    try:
        data = _read_json(storage, SHIPPING_ADDRESS_KEY)
        return ShippingAddress.model_validate(data) if data else None
    except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as exc:
        logger.warning(
            "client.state.rehydrate_failed", extra={"key": SHIPPING_ADDRESS_KEY, "error": str(exc)}
        )
        return None


def load_state(storage: AbstractStorage) -> AppState:
    """Rebuild the client state from storage.

    Each key is parsed on its own; a missing, malformed or schema-invalid
    entry falls back to its default instead of raising.
    """
    cart = Cart(
        items=_load_cart_items(storage),
        shipping_address=_load_shipping_address(storage),
        payment_method=storage.get(PAYMENT_METHOD_KEY) or "",
    )
    return AppState(session=_load_session(storage), cart=cart)


def persist_state(storage: AbstractStorage, state: AppState) -> None:
    """Write session and cart to ``storage``.

    An absent session removes the stored entry, as does an empty payment
    method.
    """
    if state.session is not None:
        storage.set(USER_INFO_KEY, state.session.model_dump_json())
    else:
        storage.remove(USER_INFO_KEY)

    storage.set(CART_ITEMS_KEY, json.dumps([line.model_dump() for line in state.cart.items]))

    address = state.cart.shipping_address
    storage.set(SHIPPING_ADDRESS_KEY, address.model_dump_json() if address is not None else "{}")

    if state.cart.payment_method:
        storage.set(PAYMENT_METHOD_KEY, state.cart.payment_method)
    else:
        storage.remove(PAYMENT_METHOD_KEY)


class Store:
    """Single source of truth for the client session and cart."""

    def __init__(self, storage: AbstractStorage, *, initial_state: AppState | None = None) -> None:
        self._storage = storage
        self._state = initial_state if initial_state is not None else load_state(storage)
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, intent: object) -> AppState:
        """Apply ``intent`` and return the resulting state.

        Unchanged states are neither persisted nor announced.
        """
        with self._lock:
            previous = self._state
            current = reduce(previous, intent)
            if current is previous:
                return current
            self._state = current
            listeners = list(self._listeners)
            # persisted under the lock so snapshots are written in dispatch order
            if current.session != previous.session or current.cart != previous.cart:
                self._persist(current)

        for listener in listeners:
            listener(current)
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _persist(self, state: AppState) -> None:
        try:
            persist_state(self._storage, state)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("client.state.persist_failed", extra={"error": str(exc)})
