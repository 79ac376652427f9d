from __future__ import annotations

from dataclasses import dataclass

import structlog

from pos_checkout.adapters.outbound.console_printer import ConsoleReceiptPrinter
from pos_checkout.adapters.outbound.http_change_service import HttpChangeService
from pos_checkout.adapters.outbound.http_sales import HttpSaleSubmitter
from pos_checkout.adapters.outbound.in_memory_sales import InMemorySaleStore
from pos_checkout.adapters.outbound.structlog_events import StructlogEventPublisher
from pos_checkout.config import Settings, load_settings
from pos_checkout.core.domain.service.checkout_session import (
    CheckoutDeps,
    CheckoutSession,
)
from pos_checkout.core.domain.service.payment_processor import PaymentProcessor
from pos_checkout.core.domain.service.pricing import PricingEngine
from pos_checkout.core.ports.outbound.receipts import ReceiptPrinter
from pos_checkout.core.ports.outbound.sales import SaleRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Application:
    checkout: CheckoutSession
    sales: SaleRepository | None
    settings: Settings


def build_application(
    settings: Settings | None = None, printer: ReceiptPrinter | None = None
) -> Application:
    settings = settings or load_settings()
    events = StructlogEventPublisher()

    if settings.backend_url:
        change_service: HttpChangeService | None = HttpChangeService(
            settings.backend_url, timeout=settings.request_timeout_seconds
        )
        submitter = HttpSaleSubmitter(
            settings.backend_url, timeout=settings.request_timeout_seconds
        )
        sales: SaleRepository | None = None
        logger.info("backend_configured", backend_url=settings.backend_url)
    else:
        change_service = None
        store = InMemorySaleStore()
        submitter = store
        sales = store
        logger.info("running_offline")

    checkout = CheckoutSession(
        CheckoutDeps(
            payment=PaymentProcessor(change_service=change_service, events=events),
            sales=submitter,
            events=events,
            printer=printer,
            pricing=PricingEngine(currency=settings.currency),
        )
    )
    return Application(checkout=checkout, sales=sales, settings=settings)


def build_cli_application(settings: Settings | None = None) -> Application:
    # CLI prints each receipt; the HTTP app returns it in the response instead
    return build_application(settings, printer=ConsoleReceiptPrinter())
