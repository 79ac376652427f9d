from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    SaleNotFound,
    SubmissionFailure,
)
from pos_checkout.core.domain.model.sale import Sale, SaleId
from pos_checkout.core.ports.outbound.sales import SaleRepository, SaleSubmitter


@dataclass
class InMemorySaleStore(SaleSubmitter, SaleRepository):
    fail: bool = False
    _store: Dict[str, Sale] = field(default_factory=dict)

    async def submit(self, draft: Sale) -> Result[Sale, CheckoutError]:
        if self.fail:
            return Failure(SubmissionFailure("sale store is down"))
        if draft.is_finalized():
            return Failure(SubmissionFailure("sale was already submitted"))

        sale_id = SaleId.new()
        sale = draft.finalize(sale_id)
        self._store[sale_id.value] = sale
        return Success(sale)

    def get(self, sale_id: SaleId) -> Result[Sale, CheckoutError]:
        if sale_id.value not in self._store:
            return Failure(SaleNotFound(message="sale not found", sale_id=sale_id.value))
        return Success(self._store[sale_id.value])

    def list(self, offset: int, limit: int) -> Result[Sequence[Sale], CheckoutError]:
        sales = sorted(self._store.values(), key=lambda s: s.timestamp, reverse=True)
        return Success(tuple(sales[offset : offset + limit]))
