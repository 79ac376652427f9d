"""In-memory sale store tests."""

import asyncio
from dataclasses import replace
from datetime import timedelta

from pos_checkout.adapters.outbound.in_memory_sales import InMemorySaleStore
from pos_checkout.core.domain.model.errors import SaleNotFound, SubmissionFailure
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import (
    OrderTotals,
    PaymentOutcome,
    Sale,
    SaleId,
)

from conftest import FIXED_TIME, item, money


def draft(offset_minutes=0) -> Sale:
    return Sale(
        sale_id=None,
        timestamp=FIXED_TIME + timedelta(minutes=offset_minutes),
        customer=None,
        items=(item(),),
        totals=OrderTotals(money("100"), Money.zero(), Money.zero(), money("100")),
        payment=PaymentOutcome.card(),
    )


class TestInMemorySaleStore:
    def test_submit_assigns_id_and_stores(self):
        store = InMemorySaleStore()

        sale = asyncio.run(store.submit(draft())).unwrap()

        assert sale.is_finalized()
        assert store.get(sale.sale_id).unwrap() == sale

    def test_rejects_finalized_sale(self):
        store = InMemorySaleStore()
        result = asyncio.run(store.submit(replace(draft(), sale_id=SaleId("x"))))
        assert isinstance(result.failure(), SubmissionFailure)

    def test_fail_switch(self):
        result = asyncio.run(InMemorySaleStore(fail=True).submit(draft()))
        assert isinstance(result.failure(), SubmissionFailure)

    def test_unknown_sale(self):
        err = InMemorySaleStore().get(SaleId("missing")).failure()
        assert isinstance(err, SaleNotFound)
        assert err.sale_id == "missing"

    def test_list_newest_first(self):
        store = InMemorySaleStore()
        older = asyncio.run(store.submit(draft(0))).unwrap()
        newer = asyncio.run(store.submit(draft(5))).unwrap()

        assert list(store.list(0, 10).unwrap()) == [newer, older]
        assert list(store.list(1, 10).unwrap()) == [older]
