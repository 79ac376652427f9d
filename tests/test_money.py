"""Money value object tests."""

from decimal import Decimal

import pytest

from pos_checkout.core.domain.model.money import Money, fold_money


class TestMoney:
    def test_of_quantizes_to_cents(self):
        assert Money.of("10.005").amount == Decimal("10.01")
        assert Money.of(3).amount == Decimal("3.00")

    def test_of_rejects_garbage(self):
        with pytest.raises(ValueError):
            Money.of("abc")

    def test_of_rejects_non_finite(self):
        with pytest.raises(ValueError):
            Money.of("NaN")

    def test_arithmetic(self):
        assert Money.of("100") + Money.of("50.50") == Money.of("150.50")
        assert Money.of("500") - Money.of("200") == Money.of("300")
        assert Money.of("95") * 2 == Money.of("190")

    def test_comparison(self):
        assert Money.of("150") < Money.of("200")
        assert Money.of("200") >= Money.of("200")

    def test_currency_mismatch_raises(self):
        with pytest.raises(ValueError):
            Money.of("1", "LKR") + Money.of("1", "USD")

    def test_fold_money(self):
        total = fold_money([Money.of("1.10"), Money.of("2.20")])
        assert total == Money.of("3.30")
        assert fold_money([]) == Money.zero()

    def test_of_rejects_amount_beyond_precision(self):
        with pytest.raises(ValueError):
            Money.of("1e30")
