from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.sale import Sale, SaleId


class SaleSubmitter(Protocol):
    async def submit(self, draft: Sale) -> Result[Sale, CheckoutError]:
        """Persist a draft sale and return it with the server-assigned id."""
        ...


class SaleRepository(Protocol):
    def get(self, sale_id: SaleId) -> Result[Sale, CheckoutError]: ...

    def list(self, offset: int, limit: int) -> Result[Sequence[Sale], CheckoutError]: ...
