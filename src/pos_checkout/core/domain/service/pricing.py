from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from pos_checkout.core.domain.model.cart import Cart
from pos_checkout.core.domain.model.money import DEFAULT_CURRENCY, Money, fold_money
from pos_checkout.core.domain.model.sale import OrderTotals


class PricingPolicy(Protocol):
    def tax_for(self, subtotal: Money) -> Money: ...

    def discount_for(self, subtotal: Money) -> Money: ...


@dataclass(frozen=True)
class ZeroPricingPolicy(PricingPolicy):
    """No tax, no discount. The shop currently charges neither."""

    def tax_for(self, subtotal: Money) -> Money:
        return Money.zero(subtotal.currency)

    def discount_for(self, subtotal: Money) -> Money:
        return Money.zero(subtotal.currency)


def compute_subtotal(cart: Cart, currency: str = DEFAULT_CURRENCY) -> Money:
    return fold_money((it.line_total() for it in cart), currency=currency)


def compute_total(subtotal: Money, tax: Money, discount: Money) -> Money:
    return subtotal + tax - discount


@dataclass(frozen=True)
class PricingEngine:
    policy: PricingPolicy = field(default_factory=ZeroPricingPolicy)
    currency: str = DEFAULT_CURRENCY

    def totals(self, cart: Cart) -> OrderTotals:
        subtotal = compute_subtotal(cart, currency=self.currency)
        tax = self.policy.tax_for(subtotal)
        discount = self.policy.discount_for(subtotal)
        return OrderTotals(
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total=compute_total(subtotal, tax, discount),
        )
