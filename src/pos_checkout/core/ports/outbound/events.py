from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from returns.result import Result

from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import PaymentMethod, SaleId


@dataclass(frozen=True)
class SaleCompleted:
    sale_id: SaleId
    total: Money
    method: PaymentMethod


@dataclass(frozen=True)
class ChangeFallbackUsed:
    total: Money
    amount_received: Money
    change: Money
    reason: str


CheckoutEvent = Union[SaleCompleted, ChangeFallbackUsed]


class EventPublisher(Protocol):
    def publish(self, event: CheckoutEvent) -> Result[None, CheckoutError]: ...
