"""High-level storefront client operations.

Every remote operation follows the same shape: dispatch ``RequestStart``,
send through the serialized queue, apply the response to the store, dispatch
``RequestSuccess``. On failure the error is reduced to one user-facing
message, stored via ``RequestFail`` and raised as ``RequestAppError``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, TypeVar

import httpx

from storefront.client.request_queue import HttpxTransport, RequestConfig, RequestQueue
from storefront.client.state import (
    AddToCart,
    AppState,
    CartLine,
    ClearCart,
    RemoveFromCart,
    RequestFail,
    RequestStart,
    RequestSuccess,
    ResetError,
    SavePaymentMethod,
    SaveShippingAddress,
    Session,
    UpdateUserProfile,
    UserLogin,
    UserLogout,
)
from storefront.client.store import Store
from storefront.core.errors import ErrorDetails, RequestAppError, ValidationAppError
from storefront.schemas.order import OrderCreateRequest, OrderResponse, ShippingAddress
from storefront.schemas.product import ProductPage, ProductResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOGIN_FALLBACK = "Login failed. Please try again."
REGISTER_FALLBACK = "Registration failed. Please try again."
PROFILE_FALLBACK = "Profile update failed. Please try again."
ORDER_FALLBACK = "Order creation failed. Please try again."
ORDERS_FALLBACK = "Could not load your orders. Please try again."
PRODUCTS_FALLBACK = "Could not load products. Please try again."

TIMEOUT_MESSAGE = "The request timed out. Please try again."
NETWORK_MESSAGE = "Network error. Please check your connection and try again."

FREE_SHIPPING_THRESHOLD = 100.0
SHIPPING_FEE = 10.0
TAX_RATE = 0.15


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    return None


def extract_error_message(exc: BaseException, fallback: str) -> str:
    """Reduce a failed request to one message suitable for display.

    Preference order: server-provided message, HTTP reason phrase, generic
    transport message, ``fallback``.

    >>> extract_error_message(RuntimeError("boom"), "Login failed.")
    'Login failed.'
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return _server_message(exc.response) or exc.response.reason_phrase or fallback
    if isinstance(exc, httpx.TimeoutException):
        return TIMEOUT_MESSAGE
    if isinstance(exc, httpx.TransportError):
        return NETWORK_MESSAGE
    return fallback


def _error_details(exc: BaseException) -> ErrorDetails | None:
    if not isinstance(exc, httpx.HTTPStatusError):
        return None
    details: ErrorDetails = {"http_status": exc.response.status_code}
    try:
        body = exc.response.json()
    except ValueError:
        return details
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        if isinstance(error.get("code"), str):
            details["code"] = error["code"]
        server_details = error.get("details")
        if isinstance(server_details, dict):
            for key in ("attempts_left", "retry_after"):
                if isinstance(server_details.get(key), int):
                    details[key] = server_details[key]  # type: ignore[literal-required]
    return details


def calculate_prices(items: Iterable[CartLine]) -> dict[str, float]:
    """Checkout totals for the given cart lines.

    Shipping is free above 100, otherwise a flat 10; tax is 15 % of the
    items total. All amounts are rounded to cents.
    """
    items_price = round(sum(line.price * line.quantity for line in items), 2)
    shipping_price = 0.0 if items_price > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE
    tax_price = round(items_price * TAX_RATE, 2)
    total_price = round(items_price + shipping_price + tax_price, 2)
    return {
        "items_price": items_price,
        "shipping_price": shipping_price,
        "tax_price": tax_price,
        "total_price": total_price,
    }


def _parse_quantity(qty: Any) -> int | None:
    if isinstance(qty, bool):
        return None
    if isinstance(qty, int):
        return qty
    if isinstance(qty, float):
        return int(qty) if qty.is_integer() else None
    if isinstance(qty, str):
        try:
            return int(qty.strip())
        except ValueError:
            return None
    return None


class StorefrontClient:
    """Session, cart and order operations against the storefront API."""

    def __init__(
        self,
        store: Store,
        queue: RequestQueue,
        transport: HttpxTransport,
        *,
        timeout: float = 10.0,
    ) -> None:
        self.store = store
        self.queue = queue
        self.transport = transport
        self.timeout = timeout

    @property
    def state(self) -> AppState:
        return self.store.state

    # Internals

    def _auth_headers(self) -> dict[str, str]:
        session = self.store.state.session
        if session is None or not session.token:
            return {}
        return {"Authorization": f"Bearer {session.token}"}

    def _config(self, method: str, url: str, *, json: Any = None, auth: bool = False) -> RequestConfig:
        return RequestConfig(
            method=method,
            url=url,
            json=json,
            headers=self._auth_headers() if auth else {},
            timeout=self.timeout,
        )

    async def _call(
        self,
        config: RequestConfig,
        fallback: str,
        on_success: Callable[[Any], T],
    ) -> T:
        self.store.dispatch(RequestStart())
        try:
            response: httpx.Response = await self.queue.enqueue(config)
            result = on_success(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            message = extract_error_message(exc, fallback)
            logger.info(
                "client.request_failed",
                extra={"method": config.method, "url": config.url, "error": message},
            )
            self.store.dispatch(RequestFail(message))
            raise RequestAppError(
                code="request_failed", message=message, details=_error_details(exc)
            ) from exc
        self.store.dispatch(RequestSuccess())
        return result

    async def _fetch(self, url: str, params: Mapping[str, Any] | None = None) -> Any:
        try:
            response = await self.transport.client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            message = extract_error_message(exc, PRODUCTS_FALLBACK)
            raise RequestAppError(
                code="request_failed", message=message, details=_error_details(exc)
            ) from exc

    # Session

    async def login(self, email: str, password: str) -> Session:
        def apply(data: Any) -> Session:
            session = Session.model_validate(data)
            self.store.dispatch(UserLogin(session))
            return session

        config = self._config("POST", "/api/users/login", json={"email": email, "password": password})
        return await self._call(config, LOGIN_FALLBACK, apply)

    async def register(self, name: str, email: str, password: str) -> Session:
        def apply(data: Any) -> Session:
            session = Session.model_validate(data)
            self.store.dispatch(UserLogin(session))
            return session

        config = self._config(
            "POST", "/api/users", json={"name": name, "email": email, "password": password}
        )
        return await self._call(config, REGISTER_FALLBACK, apply)

    async def update_profile(self, changes: Mapping[str, Any]) -> Session | None:
        """Update name/email/password; the stored session reflects the reply."""

        def apply(data: Any) -> Session | None:
            if not isinstance(data, dict):
                raise ValueError("unexpected profile payload")
            self.store.dispatch(UpdateUserProfile(changes=data))
            return self.store.state.session

        config = self._config("PUT", "/api/users/profile", json=dict(changes), auth=True)
        return await self._call(config, PROFILE_FALLBACK, apply)

    def logout(self) -> None:
        self.store.dispatch(UserLogout())

    # Cart

    def add_to_cart(self, product: ProductResponse | Mapping[str, Any], qty: Any) -> CartLine:
        """Put ``qty`` units of ``product`` in the cart, replacing any existing line.

        ``product`` is either a model returned by ``get_product``/``list_products``
        or a mapping with the same keys.

        Raises:
            ValidationAppError: If the quantity is not a positive integer or
                exceeds the stock reported for the product.
        """
        if isinstance(product, ProductResponse):
            product = product.model_dump()
        stock = product.get("count_in_stock", product.get("stock", 0))
        quantity = _parse_quantity(qty)
        if quantity is None or quantity <= 0 or quantity > stock:
            message = "Invalid quantity"
            self.store.dispatch(RequestFail(message))
            raise ValidationAppError(
                code="invalid_quantity", message=message, details={"field": "quantity"}
            )

        line = CartLine(
            product_id=str(product["id"]),
            name=product.get("name", ""),
            image=product.get("image", ""),
            price=product.get("price", 0.0),
            quantity=quantity,
            stock_at_add_time=stock,
        )
        self.store.dispatch(AddToCart(line))
        return line

    def remove_from_cart(self, product_id: str) -> None:
        self.store.dispatch(RemoveFromCart(product_id))

    def save_shipping_address(self, address: ShippingAddress | Mapping[str, Any]) -> None:
        if not isinstance(address, ShippingAddress):
            address = ShippingAddress.model_validate(dict(address))
        self.store.dispatch(SaveShippingAddress(address))

    def save_payment_method(self, method: str) -> None:
        self.store.dispatch(SavePaymentMethod(method))

    def clear_cart(self) -> None:
        self.store.dispatch(ClearCart())

    def reset_error(self) -> None:
        self.store.dispatch(ResetError())

    def checkout_payload(self) -> OrderCreateRequest:
        """Build an order request from the current cart."""
        cart = self.store.state.cart
        return OrderCreateRequest(
            order_items=[
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "image": line.image,
                    "price": line.price,
                    "quantity": line.quantity,
                }
                for line in cart.items
            ],
            shipping_address=cart.shipping_address,
            payment_method=cart.payment_method,
            **calculate_prices(cart.items),
        )

    # Orders

    async def create_order(self, order: OrderCreateRequest | Mapping[str, Any]) -> OrderResponse:
        """Place an order; the cart items are cleared once the server accepts it."""
        if isinstance(order, OrderCreateRequest):
            body = order.model_dump(mode="json")
        else:
            body = dict(order)

        def apply(data: Any) -> OrderResponse:
            created = OrderResponse.model_validate(data)
            self.store.dispatch(ClearCart())
            return created

        config = self._config("POST", "/api/orders", json=body, auth=True)
        return await self._call(config, ORDER_FALLBACK, apply)

    async def get_my_orders(self) -> list[OrderResponse]:
        def apply(data: Any) -> list[OrderResponse]:
            if not isinstance(data, list):
                raise ValueError("unexpected orders payload")
            return [OrderResponse.model_validate(item) for item in data]

        config = self._config("GET", "/api/orders/myorders", auth=True)
        return await self._call(config, ORDERS_FALLBACK, apply)

    # Catalog (not queued)

    async def list_products(self, keyword: str = "", page: int = 1) -> ProductPage:
        params: dict[str, Any] = {"page_number": page}
        if keyword:
            params["keyword"] = keyword
        return ProductPage.model_validate(await self._fetch("/api/products", params))

    async def get_product(self, product_id: str) -> ProductResponse:
        return ProductResponse.model_validate(await self._fetch(f"/api/products/{product_id}"))

    async def aclose(self) -> None:
        await self.queue.join()
        await self.transport.aclose()
