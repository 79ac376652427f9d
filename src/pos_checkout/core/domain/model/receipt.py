from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ReceiptLine:
    label: str
    value: str


@dataclass(frozen=True)
class ReceiptItemLine:
    name: str
    detail: str  # "2 x Rs. 100.00"
    amount: str


@dataclass(frozen=True)
class ReceiptView:
    title: str
    sale_id: str
    issued_at: str
    customer: Tuple[ReceiptLine, ...]
    items: Tuple[ReceiptItemLine, ...]
    summary: Tuple[ReceiptLine, ...]
    total: ReceiptLine
    payment: Tuple[ReceiptLine, ...]
    footer: str

    def has_customer(self) -> bool:
        return bool(self.customer)
