from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TextIO

from pos_checkout.core.domain.model.receipt import ReceiptView
from pos_checkout.core.domain.service.receipt_formatter import render_text
from pos_checkout.core.ports.outbound.receipts import ReceiptPrinter


@dataclass
class ConsoleReceiptPrinter(ReceiptPrinter):
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    width: int = 40

    def print_receipt(self, receipt: ReceiptView) -> None:
        print(render_text(receipt, width=self.width), file=self.stream)
