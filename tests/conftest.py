"""Shared pytest fixtures and fakes for checkout tests."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import pytest
from structlog.testing import capture_logs
from returns.result import Failure, Success

from pos_checkout.adapters.outbound.in_memory_sales import InMemorySaleStore
from pos_checkout.core.domain.model.cart import CartItem
from pos_checkout.core.domain.model.errors import PublishError, RemoteUnavailable
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.service.checkout_session import (
    CheckoutDeps,
    CheckoutSession,
)
from pos_checkout.core.domain.service.payment_processor import PaymentProcessor
from pos_checkout.core.domain.service.sale_assembler import SaleAssembler

FIXED_TIME = datetime(2024, 3, 1, 10, 30, 0, tzinfo=timezone.utc)


def money(amount) -> Money:
    return Money.of(amount)


def item(item_id="1", name="Item", price="100", quantity=1, barcode=None) -> CartItem:
    return CartItem(
        id=item_id,
        name=name,
        unit_price=Money.of(price),
        quantity=quantity,
        barcode=barcode,
    )


@dataclass
class FakeChangeService:
    """Answers with ``amount_received - total`` unless told otherwise."""

    down: bool = False
    override: Optional[Money] = None
    calls: int = 0

    async def calculate_change(self, request):
        self.calls += 1
        if self.down:
            return Failure(RemoteUnavailable("change service unreachable"))
        if self.override is not None:
            return Success(self.override)
        return Success(request.amount_received - request.total)


@dataclass
class BlockingChangeService:
    """Holds every call until ``release`` is set."""

    release: asyncio.Event = field(default_factory=asyncio.Event)
    started: asyncio.Event = field(default_factory=asyncio.Event)

    async def calculate_change(self, request):
        self.started.set()
        await self.release.wait()
        return Success(request.amount_received - request.total)


@dataclass
class BlockingSubmitter:
    """Holds every submission until ``release`` is set.

    With ``accept_after_cancel`` the backend still stores the sale when the
    caller gives up waiting, like a server that already committed it.
    """

    store: InMemorySaleStore = field(default_factory=InMemorySaleStore)
    accept_after_cancel: bool = False
    release: asyncio.Event = field(default_factory=asyncio.Event)
    started: asyncio.Event = field(default_factory=asyncio.Event)

    async def submit(self, draft):
        self.started.set()
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            if not self.accept_after_cancel:
                raise
        return await self.store.submit(draft)


@dataclass
class RecordingPublisher:
    events: List[object] = field(default_factory=list)
    fail: bool = False

    def publish(self, event):
        if self.fail:
            return Failure(PublishError("publisher is down"))
        self.events.append(event)
        return Success(None)


@dataclass
class RecordingPrinter:
    receipts: List[object] = field(default_factory=list)

    def print_receipt(self, receipt):
        self.receipts.append(receipt)


@dataclass
class SessionHarness:
    session: CheckoutSession
    store: InMemorySaleStore
    change_service: object
    events: RecordingPublisher
    printer: RecordingPrinter


def build_session(change_service=None, store=None) -> SessionHarness:
    change_service = change_service if change_service is not None else FakeChangeService()
    store = store if store is not None else InMemorySaleStore()
    events = RecordingPublisher()
    printer = RecordingPrinter()
    session = CheckoutSession(
        CheckoutDeps(
            payment=PaymentProcessor(change_service=change_service, events=events),
            sales=store,
            events=events,
            printer=printer,
            assembler=SaleAssembler(clock=lambda: FIXED_TIME),
        )
    )
    return SessionHarness(session, store, change_service, events, printer)


@pytest.fixture(autouse=True)
def logs():
    """Capture structlog events instead of printing them."""
    with capture_logs() as captured:
        yield captured


@pytest.fixture
def harness():
    """Fresh session wired to in-memory fakes."""
    return build_session()
