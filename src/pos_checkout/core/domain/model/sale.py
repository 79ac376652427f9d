from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Tuple
from uuid import UUID, uuid4

from pos_checkout.core.domain.model.cart import CartItem
from pos_checkout.core.domain.model.money import Money


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class ChangeSource(str, Enum):
    REMOTE = "remote"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class SaleId:
    value: str

    @staticmethod
    def new() -> "SaleId":
        return SaleId(str(uuid4()))

    @staticmethod
    def from_uuid(value: UUID) -> "SaleId":
        return SaleId(str(value))


@dataclass(frozen=True)
class CustomerInfo:
    name: str = ""
    phone: str = ""

    @staticmethod
    def of(name: str | None, phone: str | None) -> "CustomerInfo":
        return CustomerInfo(name=(name or "").strip(), phone=(phone or "").strip())

    def is_empty(self) -> bool:
        return not self.name and not self.phone


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Money
    tax: Money
    discount: Money
    total: Money


@dataclass(frozen=True)
class PaymentRequest:
    method: PaymentMethod | None
    total: Money
    amount_received: Money | None = None


@dataclass(frozen=True)
class PaymentOutcome:
    method: PaymentMethod
    amount_received: Money | None = None
    change: Money | None = None
    change_source: ChangeSource | None = None

    @staticmethod
    def card() -> "PaymentOutcome":
        return PaymentOutcome(method=PaymentMethod.CARD)

    @staticmethod
    def cash(
        amount_received: Money, change: Money, source: ChangeSource
    ) -> "PaymentOutcome":
        return PaymentOutcome(
            method=PaymentMethod.CASH,
            amount_received=amount_received,
            change=change,
            change_source=source,
        )


@dataclass(frozen=True)
class Sale:
    """
    Finalized record of one checkout.

    ``sale_id`` is None on the draft handed to the submission service and
    carries the server-assigned id afterwards.
    """

    sale_id: SaleId | None
    timestamp: datetime
    customer: CustomerInfo | None
    items: Tuple[CartItem, ...]
    totals: OrderTotals
    payment: PaymentOutcome

    @property
    def subtotal(self) -> Money:
        return self.totals.subtotal

    @property
    def tax(self) -> Money:
        return self.totals.tax

    @property
    def discount(self) -> Money:
        return self.totals.discount

    @property
    def total(self) -> Money:
        return self.totals.total

    def is_finalized(self) -> bool:
        return self.sale_id is not None

    def finalize(self, sale_id: SaleId) -> "Sale":
        return replace(self, sale_id=sale_id)
