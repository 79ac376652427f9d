"""Receipt formatting: Sale -> ReceiptView -> printable text."""

from __future__ import annotations

from typing import List

from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.receipt import (
    ReceiptItemLine,
    ReceiptLine,
    ReceiptView,
)
from pos_checkout.core.domain.model.sale import PaymentMethod, Sale

CURRENCY_SYMBOLS = {"LKR": "Rs."}

RECEIPT_TITLE = "SALE RECEIPT"
RECEIPT_FOOTER = "Thank you for your business!"
PENDING_ID = "(pending)"


def format_money(money: Money) -> str:
    symbol = CURRENCY_SYMBOLS.get(money.currency, money.currency)
    return f"{symbol} {money.amount:,.2f}"


def format_receipt(sale: Sale) -> ReceiptView:
    """Project a sale into the structured receipt shown to the customer."""
    customer: List[ReceiptLine] = []
    if sale.customer is not None:
        if sale.customer.name:
            customer.append(ReceiptLine("Name", sale.customer.name))
        if sale.customer.phone:
            customer.append(ReceiptLine("Phone", sale.customer.phone))

    items = tuple(
        ReceiptItemLine(
            name=it.name,
            detail=f"{it.quantity} x {format_money(it.unit_price)}",
            amount=format_money(it.line_total()),
        )
        for it in sale.items
    )

    summary = [ReceiptLine("Subtotal", format_money(sale.subtotal))]
    if not sale.tax.is_zero():
        summary.append(ReceiptLine("Tax", format_money(sale.tax)))
    if not sale.discount.is_zero():
        summary.append(ReceiptLine("Discount", f"- {format_money(sale.discount)}"))

    payment = [ReceiptLine("Method", sale.payment.method.value.capitalize())]
    if sale.payment.method is PaymentMethod.CASH:
        if sale.payment.amount_received is not None:
            payment.append(
                ReceiptLine("Amount Received", format_money(sale.payment.amount_received))
            )
        if sale.payment.change is not None:
            payment.append(ReceiptLine("Change", format_money(sale.payment.change)))

    return ReceiptView(
        title=RECEIPT_TITLE,
        sale_id=sale.sale_id.value if sale.sale_id is not None else PENDING_ID,
        issued_at=sale.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        customer=tuple(customer),
        items=items,
        summary=tuple(summary),
        total=ReceiptLine("Total", format_money(sale.total)),
        payment=tuple(payment),
        footer=RECEIPT_FOOTER,
    )


def render_text(view: ReceiptView, width: int = 40) -> str:
    """Render a receipt as fixed-width text for a slip printer."""
    rule = "=" * width
    thin = "-" * width
    lines: List[str] = []

    lines.append(rule)
    lines.append(view.title.center(width).rstrip())
    lines.append(rule)
    lines.append(f"Sale ID: {view.sale_id}")
    lines.append(f"Date: {view.issued_at}")

    if view.has_customer():
        lines.append(thin)
        lines.append("Customer Information")
        for ln in view.customer:
            lines.append(f"{ln.label}: {ln.value}")

    lines.append(thin)
    for item in view.items:
        lines.append(item.name)
        lines.append(_two_columns(f"  {item.detail}", item.amount, width))

    lines.append(thin)
    for ln in view.summary:
        lines.append(_two_columns(f"{ln.label}:", ln.value, width))
    lines.append(_two_columns(f"{view.total.label.upper()}:", view.total.value, width))

    lines.append(thin)
    lines.append("Payment Details")
    for ln in view.payment:
        lines.append(f"{ln.label}: {ln.value}")

    lines.append(rule)
    lines.append(view.footer.center(width).rstrip())
    lines.append(rule)

    return "\n".join(lines)


def _two_columns(left: str, right: str, width: int) -> str:
    gap = max(1, width - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"
