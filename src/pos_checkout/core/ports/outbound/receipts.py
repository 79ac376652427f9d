from __future__ import annotations

from typing import Protocol

from pos_checkout.core.domain.model.receipt import ReceiptView


class ReceiptPrinter(Protocol):
    def print_receipt(self, receipt: ReceiptView) -> None: ...
