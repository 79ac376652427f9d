from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from pos_checkout.core.domain.model.cart import Cart, CartItem
from pos_checkout.core.domain.model.checkout_state import CheckoutState
from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import (
    CustomerInfo,
    OrderTotals,
    PaymentMethod,
    Sale,
)
from pos_checkout.core.domain.service.payment_processor import ChangeResult


@dataclass(frozen=True)
class CheckoutSnapshot:
    state: CheckoutState
    cart: Cart
    totals: OrderTotals
    customer: CustomerInfo | None
    payment_method: PaymentMethod | None
    amount_received: Money | None
    change: ChangeResult | None
    in_flight: bool
    last_sale: Sale | None


class CheckoutUseCase(Protocol):
    def snapshot(self) -> CheckoutSnapshot: ...

    # ---- cart --------------------------------------------------------------

    def add_item(self, item: CartItem) -> Result[Cart, CheckoutError]: ...

    def update_quantity(
        self, item_id: str, new_quantity: int
    ) -> Result[Cart, CheckoutError]: ...

    def remove_item(self, item_id: str) -> Result[Cart, CheckoutError]: ...

    def clear_cart(self) -> Result[Cart, CheckoutError]: ...

    def totals(self) -> OrderTotals: ...

    # ---- checkout ----------------------------------------------------------

    def begin_checkout(
        self, collect_customer: bool = True
    ) -> Result[CheckoutState, CheckoutError]: ...

    def submit_customer(
        self, name: str | None, phone: str | None
    ) -> Result[CheckoutState, CheckoutError]: ...

    def skip_customer(self) -> Result[CheckoutState, CheckoutError]: ...

    def select_payment_method(
        self, method: PaymentMethod | None
    ) -> Result[CheckoutState, CheckoutError]: ...

    async def enter_cash(
        self, amount_received: Money
    ) -> Result[ChangeResult, CheckoutError]: ...

    async def complete_payment(self) -> Result[Sale, CheckoutError]: ...

    def cancel(self) -> Result[CheckoutState, CheckoutError]: ...

    def new_transaction(self) -> Result[CheckoutState, CheckoutError]: ...
