"""Tests for the client store: dispatch, persistence, rehydration, observers."""

from __future__ import annotations

import json
import logging
import threading
import time

from storefront.client.state import (
    AddToCart,
    AppState,
    CartLine,
    RemoveFromCart,
    RequestStart,
    SavePaymentMethod,
    SaveShippingAddress,
    Session,
    UserLogin,
    UserLogout,
)
from storefront.client.storage import InMemoryStorage
from storefront.client.store import (
    CART_ITEMS_KEY,
    PAYMENT_METHOD_KEY,
    SHIPPING_ADDRESS_KEY,
    USER_INFO_KEY,
    Store,
    load_state,
)
from storefront.schemas.order import ShippingAddress

SESSION = Session(id="u1", name="Jane", email="jane@example.com", token="tok")
LINE = CartLine(product_id="p1", name="Lamp", price=20.0, quantity=2, stock_at_add_time=5)
ADDRESS = ShippingAddress(address="1 Main St", city="Springfield", postal_code="12345", country="US")


class FailingStorage(InMemoryStorage):
    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


def test_dispatch_persists_session_and_cart():
    storage = InMemoryStorage()
    store = Store(storage)

    store.dispatch(UserLogin(SESSION))
    store.dispatch(AddToCart(LINE))
    store.dispatch(SaveShippingAddress(ADDRESS))
    store.dispatch(SavePaymentMethod("PayPal"))

    assert json.loads(storage.get(USER_INFO_KEY))["token"] == "tok"
    assert json.loads(storage.get(CART_ITEMS_KEY))[0]["product_id"] == "p1"
    assert json.loads(storage.get(SHIPPING_ADDRESS_KEY))["city"] == "Springfield"
    assert storage.get(PAYMENT_METHOD_KEY) == "PayPal"


def test_logout_removes_session_entry_instead_of_storing_null():
    storage = InMemoryStorage()
    store = Store(storage)
    store.dispatch(UserLogin(SESSION))
    store.dispatch(SavePaymentMethod("PayPal"))

    store.dispatch(UserLogout())

    assert USER_INFO_KEY not in storage.snapshot()
    assert PAYMENT_METHOD_KEY not in storage.snapshot()
    assert storage.get(CART_ITEMS_KEY) == "[]"


def test_state_survives_restart():
    storage = InMemoryStorage()
    store = Store(storage)
    store.dispatch(UserLogin(SESSION))
    store.dispatch(AddToCart(LINE))
    store.dispatch(SaveShippingAddress(ADDRESS))

    restored = Store(storage).state

    assert restored.session == SESSION
    assert restored.cart.items == (LINE,)
    assert restored.cart.shipping_address == ADDRESS
    assert restored.loading is False


def test_rehydrating_corrupted_storage_yields_defaults(caplog):
    storage = InMemoryStorage(
        {
            USER_INFO_KEY: "{not json",
            CART_ITEMS_KEY: json.dumps([{"product_id": "p1", "quantity": -3}]),
            SHIPPING_ADDRESS_KEY: "[1, 2]",
            PAYMENT_METHOD_KEY: "PayPal",
        }
    )

    with caplog.at_level(logging.WARNING):
        state = load_state(storage)

    assert state.session is None
    assert state.cart.items == ()
    assert state.cart.shipping_address is None
    assert state.cart.payment_method == "PayPal"
    assert "client.state.rehydrate_failed" in caplog.text


def test_rehydrating_wrong_shapes_yields_defaults():
    storage = InMemoryStorage({USER_INFO_KEY: "42", CART_ITEMS_KEY: '{"a": 1}'})

    state = load_state(storage)

    assert state == AppState()


def test_empty_storage_yields_defaults():
    assert load_state(InMemoryStorage()) == AppState()


def test_storage_failures_do_not_propagate(caplog):
    store = Store(FailingStorage())

    with caplog.at_level(logging.ERROR):
        state = store.dispatch(AddToCart(LINE))

    assert state.cart.items == (LINE,)
    assert "client.state.persist_failed" in caplog.text


def test_subscribers_are_notified_on_change_only():
    store = Store(InMemoryStorage())
    seen: list[AppState] = []
    unsubscribe = store.subscribe(seen.append)

    store.dispatch(AddToCart(LINE))
    store.dispatch(RemoveFromCart("missing"))
    store.dispatch(object())

    assert len(seen) == 1
    assert seen[0].cart.items == (LINE,)

    unsubscribe()
    store.dispatch(RequestStart())
    assert len(seen) == 1


def test_initial_state_overrides_storage():
    storage = InMemoryStorage({USER_INFO_KEY: SESSION.model_dump_json()})

    store = Store(storage, initial_state=AppState())

    assert store.state.session is None


class SlowStorage(InMemoryStorage):
    def set(self, key: str, value: str) -> None:
        time.sleep(0.001)
        super().set(key, value)


def test_concurrent_dispatches_leave_latest_state_persisted():
    storage = SlowStorage()
    store = Store(storage)
    start = threading.Barrier(8)

    def add(index: int) -> None:
        start.wait()
        for qty in range(1, 4):
            store.dispatch(AddToCart(LINE.model_copy(update={"product_id": f"p{index}", "quantity": qty})))

    threads = [threading.Thread(target=add, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store.state.cart.items) == 8
    assert load_state(storage).cart.items == store.state.cart.items
