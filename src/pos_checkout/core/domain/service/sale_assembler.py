from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.cart import Cart
from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    EmptyCart,
    MissingPaymentMethod,
    ValidationError,
)
from pos_checkout.core.domain.model.money import now_utc
from pos_checkout.core.domain.model.sale import (
    CustomerInfo,
    OrderTotals,
    PaymentMethod,
    PaymentOutcome,
    Sale,
)


@dataclass(frozen=True)
class SaleAssembler:
    clock: Callable[[], datetime] = now_utc

    def assemble(
        self,
        cart: Cart,
        totals: OrderTotals,
        payment: PaymentOutcome,
        customer: CustomerInfo | None = None,
    ) -> Result[Sale, CheckoutError]:
        if cart.is_empty():
            return Failure(EmptyCart("cannot assemble a sale from an empty cart"))
        if payment.method is None:
            return Failure(MissingPaymentMethod("payment outcome has no method"))
        if payment.method is PaymentMethod.CASH and payment.change is None:
            return Failure(ValidationError("cash payment outcome has no change"))
        if payment.method is PaymentMethod.CARD and payment.change is not None:
            return Failure(ValidationError("card payment outcome must not carry change"))

        if customer is not None and customer.is_empty():
            customer = None

        return Success(
            Sale(
                sale_id=None,
                timestamp=self.clock(),
                customer=customer,
                items=tuple(cart.items),
                totals=totals,
                payment=payment,
            )
        )
