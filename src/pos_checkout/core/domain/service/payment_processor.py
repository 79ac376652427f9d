from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import structlog
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    InsufficientPayment,
    MissingPaymentMethod,
    ValidationError,
)
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import (
    ChangeSource,
    PaymentMethod,
    PaymentOutcome,
    PaymentRequest,
)
from pos_checkout.core.ports.outbound.change_service import ChangeRequest, ChangeService
from pos_checkout.core.ports.outbound.events import ChangeFallbackUsed, EventPublisher

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RemoteSucceeded:
    change: Money

    @property
    def source(self) -> ChangeSource:
        return ChangeSource.REMOTE


@dataclass(frozen=True)
class FallbackUsed:
    change: Money
    reason: str

    @property
    def source(self) -> ChangeSource:
        return ChangeSource.FALLBACK


ChangeResult = Union[RemoteSucceeded, FallbackUsed]


def local_change(total: Money, amount_received: Money) -> Money:
    return amount_received - total


@dataclass(frozen=True)
class PaymentProcessor:
    """
    Validates a payment and works out the change owed for cash.

    The remote change service is asked first so the figure matches the
    backend ledger. When it cannot answer, or answers with something other
    than ``amount_received - total``, the local figure is used and the
    substitution is logged and published as ``ChangeFallbackUsed``.
    """

    change_service: ChangeService | None = None
    events: EventPublisher | None = None

    async def settle(
        self, request: PaymentRequest, known_change: ChangeResult | None = None
    ) -> Result[PaymentOutcome, CheckoutError]:
        """
        Validate ``request`` and produce its outcome.

        ``known_change`` is the result of an earlier ``calculate_change`` for
        the same amounts; when given, the change service is not asked again.
        """
        checked = validate_payment(request)
        if isinstance(checked, Failure):
            return checked

        if request.method is PaymentMethod.CARD:
            # card authorization is handled outside the till
            return Success(PaymentOutcome.card())

        received = request.amount_received
        if received is None:
            return Failure(ValidationError("amount_received is required for cash"))

        expected = local_change(request.total, received)
        if known_change is not None and known_change.change == expected:
            result = known_change
        else:
            result = await self.calculate_change(request.total, received)
        return Success(PaymentOutcome.cash(received, result.change, result.source))

    async def calculate_change(
        self, total: Money, amount_received: Money
    ) -> ChangeResult:
        expected = local_change(total, amount_received)

        if self.change_service is None:
            return self._fallback(
                total, amount_received, expected, "change service not configured"
            )

        remote = await self.change_service.calculate_change(
            ChangeRequest(total=total, amount_received=amount_received)
        )
        if isinstance(remote, Failure):
            return self._fallback(total, amount_received, expected, str(remote.failure()))

        change = remote.unwrap()
        if change.currency != expected.currency or change.amount != expected.amount:
            return self._fallback(
                total,
                amount_received,
                expected,
                f"remote change {change.amount} diverges from local {expected.amount}",
            )

        logger.info(
            "change_calculated",
            source=ChangeSource.REMOTE.value,
            total=str(total.amount),
            amount_received=str(amount_received.amount),
            change=str(change.amount),
        )
        return RemoteSucceeded(change)

    def _fallback(
        self, total: Money, amount_received: Money, change: Money, reason: str
    ) -> FallbackUsed:
        logger.warning(
            "change_fallback_used",
            total=str(total.amount),
            amount_received=str(amount_received.amount),
            change=str(change.amount),
            reason=reason,
        )
        if self.events is not None:
            published = self.events.publish(
                ChangeFallbackUsed(
                    total=total,
                    amount_received=amount_received,
                    change=change,
                    reason=reason,
                )
            )
            if isinstance(published, Failure):
                logger.warning("event_publish_failed", error=str(published.failure()))
        return FallbackUsed(change=change, reason=reason)


def validate_payment(request: PaymentRequest) -> Result[PaymentRequest, CheckoutError]:
    if request.method is None:
        return Failure(MissingPaymentMethod("a payment method must be selected"))
    if request.total.is_negative():
        return Failure(ValidationError("total must be >= 0"))

    if request.method is PaymentMethod.CARD:
        return Success(request)

    received = request.amount_received
    if received is None:
        return Failure(ValidationError("amount_received is required for cash"))
    if received.currency != request.total.currency:
        return Failure(
            ValidationError(
                f"amount_received currency {received.currency} "
                f"does not match {request.total.currency}"
            )
        )
    if received.is_negative():
        return Failure(ValidationError("amount_received must be >= 0"))
    if received < request.total:
        return Failure(
            InsufficientPayment(
                message="cash received is less than the total",
                total=str(request.total.amount),
                amount_received=str(received.amount),
            )
        )
    return Success(request)
