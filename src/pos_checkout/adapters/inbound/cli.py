from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.cart import CartItem
from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import PaymentMethod, Sale
from pos_checkout.core.domain.service.checkout_session import CheckoutSession


@dataclass(frozen=True)
class SaleInput:
    items: Sequence[CartItem]
    method: PaymentMethod
    amount_received: Money | None
    customer_name: str | None
    customer_phone: str | None
    collect_customer: bool


async def run_cli(session: CheckoutSession, raw: str) -> int:
    """
    raw: JSON string.
    Example:
      {"customer":{"name":"Nimal","phone":"0771234567"},
       "items":[{"id":"4","name":"Sunlight Soap 100g","unit_price":"95.00","quantity":2}],
       "payment":{"method":"cash","amount_received":"500"}}
    """
    currency = session.deps.pricing.currency
    try:
        payload = json.loads(raw)
        sale_input = _parse_input(payload, currency)
    except (ValueError, KeyError, TypeError) as e:
        print(f"invalid_input: {e}")
        return 2

    result = await _run_sale(session, sale_input)

    if isinstance(result, Success):
        sale = result.unwrap()
        print(
            "[ok]",
            {
                "sale_id": sale.sale_id.value if sale.sale_id else None,
                "total": str(sale.total.amount),
                "currency": sale.total.currency,
                "method": sale.payment.method.value,
                "change": str(sale.payment.change.amount) if sale.payment.change else None,
            },
        )
        return 0

    print("[ng]", str(result.failure()))
    return 1


async def _run_sale(
    session: CheckoutSession, sale_input: SaleInput
) -> Result[Sale, CheckoutError]:
    for item in sale_input.items:
        added = session.add_item(item)
        if isinstance(added, Failure):
            return added

    begun = session.begin_checkout(collect_customer=sale_input.collect_customer)
    if isinstance(begun, Failure):
        return begun

    if sale_input.collect_customer:
        submitted = session.submit_customer(
            sale_input.customer_name, sale_input.customer_phone
        )
        if isinstance(submitted, Failure):
            return submitted

    selected = session.select_payment_method(sale_input.method)
    if isinstance(selected, Failure):
        return selected

    if sale_input.method is PaymentMethod.CASH:
        if sale_input.amount_received is None:
            return Failure(CheckoutError("payment.amount_received is required for cash"))
        changed = await session.enter_cash(sale_input.amount_received)
        if isinstance(changed, Failure):
            return changed

    return await session.complete_payment()


def _parse_input(payload: Any, currency: str) -> SaleInput:
    payload = _object(payload, "payload")
    items = [_parse_item(_object(x, "item"), currency) for x in payload.get("items", [])]
    payment = _object(payload.get("payment") or {}, "payment")
    received = payment.get("amount_received")
    customer = payload.get("customer")
    if customer is not None:
        customer = _object(customer, "customer")
    return SaleInput(
        items=items,
        method=PaymentMethod(str(payment.get("method", ""))),
        amount_received=None if received is None else Money.of(str(received), currency),
        customer_name=customer.get("name") if customer else None,
        customer_phone=customer.get("phone") if customer else None,
        collect_customer=customer is not None,
    )


def _parse_item(x: dict[str, Any], currency: str) -> CartItem:
    return CartItem(
        id=str(x["id"]),
        name=str(x["name"]),
        unit_price=Money.of(str(x["unit_price"]), currency),
        quantity=_quantity(x.get("quantity", 1)),
        barcode=x.get("barcode"),
    )


def _quantity(value: Any) -> int:
    # bool is an int subclass; floats are never truncated
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"quantity must be a whole number: {value!r}")
    return value


def _object(value: Any, name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object")
    return value
