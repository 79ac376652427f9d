from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

DEFAULT_CURRENCY = "LKR"

_CENTS = Decimal("0.01")


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def of(amount: Decimal | int | str, currency: str = DEFAULT_CURRENCY) -> "Money":
        try:
            dec = Decimal(str(amount))
            if not dec.is_finite():
                raise ValueError(f"invalid_amount: {amount!r}")
            # quantize traps when the value exceeds the context precision
            quantized = _quantize(dec)
        except InvalidOperation as exc:
            raise ValueError(f"invalid_amount: {amount!r}") from exc
        return Money(quantized, currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money.of(0, currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(_quantize(self.amount + other.amount), self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(_quantize(self.amount - other.amount), self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(_quantize(self.amount * Decimal(n)), self.currency)

    def __lt__(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


def fold_money(values: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
