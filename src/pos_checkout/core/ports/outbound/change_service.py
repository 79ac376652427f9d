from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.money import Money


@dataclass(frozen=True)
class ChangeRequest:
    total: Money
    amount_received: Money


class ChangeService(Protocol):
    """Authoritative change calculation kept by the backend ledger."""

    async def calculate_change(
        self, request: ChangeRequest
    ) -> Result[Money, CheckoutError]: ...
