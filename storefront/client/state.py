"""Storefront client state: session + cart, intents and the transition function.

``reduce(state, intent)`` is pure: it never mutates its input and never
raises. Unknown intents return the state unchanged. ``Store`` (see
``storefront.client.store``) is the mutable holder that applies it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.order import ShippingAddress


class Session(BaseModel):
    """Authenticated identity held by the client after login."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    email: str
    is_admin: bool = False
    token: str | None = None


class CartLine(BaseModel):
    """One product in the cart, snapshotted when it was added."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    image: str = ""
    price: float = Field(ge=0)
    quantity: int = Field(gt=0)
    stock_at_add_time: int = Field(ge=0)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cart:
    items: tuple[CartLine, ...] = ()
    shipping_address: ShippingAddress | None = None
    payment_method: str = ""

    def find(self, product_id: str) -> CartLine | None:
        return next((line for line in self.items if line.product_id == product_id), None)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)


@dataclass(frozen=True)
class AppState:
    session: Session | None = None
    cart: Cart = field(default_factory=Cart)
    loading: bool = False
    error: str | None = None


# Intents


@dataclass(frozen=True)
class RequestStart:
    pass


@dataclass(frozen=True)
class RequestSuccess:
    pass


@dataclass(frozen=True)
class RequestFail:
    message: str


@dataclass(frozen=True)
class UserLogin:
    session: Session


@dataclass(frozen=True)
class UserLogout:
    pass


@dataclass(frozen=True)
class AddToCart:
    line: CartLine


@dataclass(frozen=True)
class RemoveFromCart:
    product_id: str


@dataclass(frozen=True)
class SaveShippingAddress:
    address: ShippingAddress


@dataclass(frozen=True)
class SavePaymentMethod:
    method: str


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class UpdateUserProfile:
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class ResetError:
    pass


def _add_to_cart(state: AppState, intent: AddToCart) -> AppState:
    line = intent.line
    if state.cart.find(line.product_id) is None:
        items = state.cart.items + (line,)
    else:
        # The new line replaces the old one; quantities are not summed.
        items = tuple(line if i.product_id == line.product_id else i for i in state.cart.items)
    return replace(state, cart=replace(state.cart, items=items))


def _remove_from_cart(state: AppState, intent: RemoveFromCart) -> AppState:
    if state.cart.find(intent.product_id) is None:
        return state
    items = tuple(i for i in state.cart.items if i.product_id != intent.product_id)
    return replace(state, cart=replace(state.cart, items=items))


def _update_user_profile(state: AppState, intent: UpdateUserProfile) -> AppState:
    if state.session is None:
        return state
    changes = {k: v for k, v in intent.changes.items() if k in Session.model_fields}
    return replace(state, session=state.session.model_copy(update=changes), error=None)


_TRANSITIONS: dict[type, Callable[[AppState, Any], AppState]] = {
    RequestStart: lambda s, i: replace(s, loading=True, error=None),
    RequestSuccess: lambda s, i: replace(s, loading=False),
    RequestFail: lambda s, i: replace(s, loading=False, error=i.message),
    UserLogin: lambda s, i: replace(s, session=i.session, error=None),
    UserLogout: lambda s, i: replace(s, session=None, cart=Cart()),
    AddToCart: _add_to_cart,
    RemoveFromCart: _remove_from_cart,
    SaveShippingAddress: lambda s, i: replace(s, cart=replace(s.cart, shipping_address=i.address)),
    SavePaymentMethod: lambda s, i: replace(s, cart=replace(s.cart, payment_method=i.method)),
    ClearCart: lambda s, i: replace(s, cart=replace(s.cart, items=())),
    UpdateUserProfile: _update_user_profile,
    ResetError: lambda s, i: replace(s, error=None),
}


def reduce(state: AppState, intent: object) -> AppState:
    """Apply ``intent`` to ``state`` and return the next state."""
    transition = _TRANSITIONS.get(type(intent))
    if transition is None:
        return state
    return transition(state, intent)
