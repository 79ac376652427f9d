from __future__ import annotations

from dataclasses import dataclass

import structlog
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError, PublishError
from pos_checkout.core.ports.outbound.events import (
    ChangeFallbackUsed,
    CheckoutEvent,
    EventPublisher,
    SaleCompleted,
)

logger = structlog.get_logger("pos_checkout.events")


@dataclass
class StructlogEventPublisher(EventPublisher):
    fail: bool = False

    def publish(self, event: CheckoutEvent) -> Result[None, CheckoutError]:
        if self.fail:
            return Failure(PublishError("publisher is down"))

        if isinstance(event, SaleCompleted):
            logger.info(
                "sale_completed_event",
                sale_id=event.sale_id.value,
                total=str(event.total.amount),
                method=event.method.value,
            )
        elif isinstance(event, ChangeFallbackUsed):
            logger.warning(
                "change_fallback_event",
                total=str(event.total.amount),
                amount_received=str(event.amount_received.amount),
                change=str(event.change.amount),
                reason=event.reason,
            )
        return Success(None)
