from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import requests
import structlog
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError, SubmissionFailure
from pos_checkout.core.domain.model.sale import PaymentMethod, Sale, SaleId
from pos_checkout.core.ports.outbound.sales import SaleSubmitter

logger = structlog.get_logger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to create sale"


@dataclass
class HttpSaleSubmitter(SaleSubmitter):
    """
    Client for the backend ``POST /CreateSale`` endpoint.

    Failures are reported once; retrying is left to the cashier.
    """

    base_url: str
    timeout: float = 5.0
    session: requests.Session = field(default_factory=requests.Session)

    async def submit(self, draft: Sale) -> Result[Sale, CheckoutError]:
        return await asyncio.to_thread(self._post, draft)

    def _post(self, draft: Sale) -> Result[Sale, CheckoutError]:
        url = f"{self.base_url.rstrip('/')}/CreateSale"
        payload = sale_payload(draft)
        logger.info(
            "sale_submission_request",
            url=url,
            item_count=len(payload["items"]),
            payment_method=payload["paymentMethod"],
        )

        try:
            resp = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            return Failure(SubmissionFailure(f"sale service unreachable: {exc}"))

        if not resp.ok:
            return Failure(
                SubmissionFailure(
                    message=_error_message(resp), status_code=resp.status_code
                )
            )

        try:
            sale_id = str(resp.json()["sale"]["id"])
        except (ValueError, KeyError, TypeError) as exc:
            return Failure(
                SubmissionFailure(
                    message=f"malformed sale response: {exc!r}",
                    status_code=resp.status_code,
                )
            )
        if not sale_id:
            return Failure(SubmissionFailure("sale response carried no id"))

        return Success(draft.finalize(SaleId(sale_id)))


def sale_payload(draft: Sale) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "items": [{"productId": it.id, "quantity": it.quantity} for it in draft.items],
        "paymentMethod": draft.payment.method.value,
    }
    if draft.customer is not None:
        if draft.customer.name:
            payload["customerName"] = draft.customer.name
        if draft.customer.phone:
            payload["mobileNumber"] = draft.customer.phone
    if (
        draft.payment.method is PaymentMethod.CASH
        and draft.payment.amount_received is not None
    ):
        payload["amountReceived"] = float(draft.payment.amount_received.amount)
    if not draft.tax.is_zero() and not draft.subtotal.is_zero():
        rate = draft.tax.amount / draft.subtotal.amount * 100
        payload["taxPercentage"] = float(round(rate, 2))
    if not draft.discount.is_zero():
        payload["discount"] = float(draft.discount.amount)
        payload["discountType"] = "fixed"
    return payload


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return DEFAULT_FAILURE_MESSAGE
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or DEFAULT_FAILURE_MESSAGE)
    return DEFAULT_FAILURE_MESSAGE
