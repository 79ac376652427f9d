from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import requests
import structlog
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError, RemoteUnavailable
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.ports.outbound.change_service import ChangeRequest, ChangeService

logger = structlog.get_logger(__name__)


@dataclass
class HttpChangeService(ChangeService):
    """Client for the backend ``POST /CalculateChange`` endpoint."""

    base_url: str
    timeout: float = 5.0
    session: requests.Session = field(default_factory=requests.Session)

    async def calculate_change(
        self, request: ChangeRequest
    ) -> Result[Money, CheckoutError]:
        # requests blocks; keep it off the event loop
        return await asyncio.to_thread(self._post, request)

    def _post(self, request: ChangeRequest) -> Result[Money, CheckoutError]:
        url = f"{self.base_url.rstrip('/')}/CalculateChange"
        payload = {
            "total": float(request.total.amount),
            "amountReceived": float(request.amount_received.amount),
        }
        logger.debug("change_service_request", url=url, **payload)

        try:
            resp = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            return Failure(RemoteUnavailable(f"change service unreachable: {exc}"))

        if not resp.ok:
            return Failure(
                RemoteUnavailable(f"change service returned status {resp.status_code}")
            )

        try:
            body = resp.json()
            change = Money.of(str(body["change"]), request.total.currency)
        except (ValueError, KeyError, TypeError) as exc:
            return Failure(RemoteUnavailable(f"malformed change response: {exc!r}"))

        return Success(change)
