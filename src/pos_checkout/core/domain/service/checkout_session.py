from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

import structlog
from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.cart import Cart, CartItem
from pos_checkout.core.domain.model.checkout_state import (
    CART_EDITABLE,
    PAYABLE,
    CheckoutState,
    can_transition,
    is_terminal,
)
from pos_checkout.core.domain.model.errors import (
    CheckoutCancelled,
    CheckoutError,
    EmptyCart,
    InvalidTransition,
    MissingPaymentMethod,
    PaymentInProgress,
    SubmissionFailure,
)
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import (
    CustomerInfo,
    OrderTotals,
    PaymentMethod,
    PaymentRequest,
    Sale,
    SaleId,
)
from pos_checkout.core.domain.service.payment_processor import (
    ChangeResult,
    PaymentProcessor,
    validate_payment,
)
from pos_checkout.core.domain.service.pricing import PricingEngine
from pos_checkout.core.domain.service.receipt_formatter import format_receipt
from pos_checkout.core.domain.service.sale_assembler import SaleAssembler
from pos_checkout.core.ports.inbound.checkout import CheckoutSnapshot, CheckoutUseCase
from pos_checkout.core.ports.outbound.events import EventPublisher, SaleCompleted
from pos_checkout.core.ports.outbound.receipts import ReceiptPrinter
from pos_checkout.core.ports.outbound.sales import SaleSubmitter

logger = structlog.get_logger(__name__)

T = TypeVar("T")

S = CheckoutState


@dataclass(frozen=True)
class CheckoutDeps:
    payment: PaymentProcessor
    sales: SaleSubmitter
    events: EventPublisher
    printer: ReceiptPrinter | None = None
    pricing: PricingEngine = field(default_factory=PricingEngine)
    assembler: SaleAssembler = field(default_factory=SaleAssembler)


class CheckoutSession(CheckoutUseCase):
    """
    Drives one till through cart -> payment -> sale.

    The session is the only writer of its cart. Change calculation and sale
    submission run as a single ``asyncio.Task`` owned by the session; at most
    one is outstanding at a time. ``cancel()`` cancels that task and bumps
    the generation so nothing it produces is applied afterwards.
    """

    def __init__(self, deps: CheckoutDeps) -> None:
        self.deps = deps
        self._state = S.IDLE
        self._cart = Cart.empty()
        self._customer: CustomerInfo | None = None
        self._method: PaymentMethod | None = None
        self._amount_received: Money | None = None
        self._change: ChangeResult | None = None
        self._last_sale: Sale | None = None
        self._task: asyncio.Task | None = None
        self._generation = 0

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def last_sale(self) -> Sale | None:
        return self._last_sale

    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def snapshot(self) -> CheckoutSnapshot:
        return CheckoutSnapshot(
            state=self._state,
            cart=self._cart,
            totals=self.totals(),
            customer=self._customer,
            payment_method=self._method,
            amount_received=self._amount_received,
            change=self._change,
            in_flight=self.in_flight(),
            last_sale=self._last_sale,
        )

    # ---- cart ----------------------------------------------------------------

    def add_item(self, item: CartItem) -> Result[Cart, CheckoutError]:
        return self._edit_cart("add_item", lambda cart: cart.add_item(item))

    def update_quantity(
        self, item_id: str, new_quantity: int
    ) -> Result[Cart, CheckoutError]:
        return self._edit_cart(
            "update_quantity", lambda cart: cart.update_quantity(item_id, new_quantity)
        )

    def remove_item(self, item_id: str) -> Result[Cart, CheckoutError]:
        return self._edit_cart("remove_item", lambda cart: cart.remove_item(item_id))

    def clear_cart(self) -> Result[Cart, CheckoutError]:
        return self._edit_cart("clear_cart", lambda cart: Success(cart.clear()))

    def totals(self) -> OrderTotals:
        return self.deps.pricing.totals(self._cart)

    def _edit_cart(
        self, action: str, command: Callable[[Cart], Result[Cart, CheckoutError]]
    ) -> Result[Cart, CheckoutError]:
        if self._state not in CART_EDITABLE:
            return Failure(self._invalid(action, "cart is locked for payment"))

        result = command(self._cart)
        if isinstance(result, Success):
            self._cart = result.unwrap()
            logger.debug(
                "cart_updated",
                action=action,
                item_count=self._cart.item_count(),
                total_quantity=self._cart.total_quantity(),
            )
        return result

    # ---- customer / payment selection ---------------------------------------

    def begin_checkout(
        self, collect_customer: bool = True
    ) -> Result[CheckoutState, CheckoutError]:
        if self._state is not S.IDLE:
            return Failure(self._invalid("begin_checkout", "checkout already started"))
        if self._cart.is_empty():
            return Failure(EmptyCart("cart is empty"))

        target = S.CUSTOMER_INFO_PROMPT if collect_customer else S.PAYMENT_SELECTION
        return Success(self._move(target))

    def submit_customer(
        self, name: str | None, phone: str | None
    ) -> Result[CheckoutState, CheckoutError]:
        if self._state is not S.CUSTOMER_INFO_PROMPT:
            return Failure(self._invalid("submit_customer", "no customer prompt open"))
        info = CustomerInfo.of(name, phone)
        self._customer = None if info.is_empty() else info
        return Success(self._move(S.PAYMENT_SELECTION))

    def skip_customer(self) -> Result[CheckoutState, CheckoutError]:
        if self._state is not S.CUSTOMER_INFO_PROMPT:
            return Failure(self._invalid("skip_customer", "no customer prompt open"))
        return Success(self._move(S.PAYMENT_SELECTION))

    def select_payment_method(
        self, method: PaymentMethod | None
    ) -> Result[CheckoutState, CheckoutError]:
        if self.in_flight():
            return Failure(PaymentInProgress("a payment action is already in progress"))
        if method is None:
            return Failure(MissingPaymentMethod("a payment method must be selected"))

        target = S.CASH_ENTRY if method is PaymentMethod.CASH else S.CARD_READY
        if self._state is not target and not can_transition(self._state, target):
            return Failure(self._invalid("select_payment_method", "not selecting payment"))
        if self._cart.is_empty():
            return Failure(EmptyCart("cart is empty"))

        self._method = method
        self._amount_received = None
        self._change = None
        return Success(self._move(target))

    # ---- in-flight actions ----------------------------------------------------

    async def enter_cash(
        self, amount_received: Money
    ) -> Result[ChangeResult, CheckoutError]:
        if self.in_flight():
            return Failure(PaymentInProgress("a payment action is already in progress"))
        if self._state not in (S.CASH_ENTRY, S.CHANGE_COMPUTED):
            return Failure(self._invalid("enter_cash", "cash payment not selected"))

        if self._state is S.CHANGE_COMPUTED:
            self._move(S.CASH_ENTRY)
        self._amount_received = None
        self._change = None

        total = self.totals().total
        checked = validate_payment(
            PaymentRequest(PaymentMethod.CASH, total, amount_received)
        )
        if isinstance(checked, Failure):
            return checked

        generation = self._generation

        async def compute() -> Result[ChangeResult, CheckoutError]:
            change = await self.deps.payment.calculate_change(total, amount_received)
            if generation != self._generation:
                return Failure(CheckoutCancelled("payment was cancelled"))
            self._amount_received = amount_received
            self._change = change
            self._move(S.CHANGE_COMPUTED)
            return Success(change)

        return await self._run_in_flight("enter_cash", compute)

    async def complete_payment(self) -> Result[Sale, CheckoutError]:
        if self.in_flight():
            return Failure(PaymentInProgress("a payment action is already in progress"))
        if self._state not in PAYABLE:
            return Failure(self._invalid("complete_payment", "payment is not ready"))

        generation = self._generation
        totals = self.totals()
        request = PaymentRequest(
            method=self._method,
            total=totals.total,
            amount_received=self._amount_received,
        )

        async def complete() -> Result[Sale, CheckoutError]:
            settled = await self.deps.payment.settle(request, known_change=self._change)
            if isinstance(settled, Failure):
                return settled

            assembled = self.deps.assembler.assemble(
                self._cart, totals, settled.unwrap(), self._customer
            )
            if isinstance(assembled, Failure):
                return assembled

            submitted = await self.deps.sales.submit(assembled.unwrap())
            if isinstance(submitted, Failure):
                logger.error(
                    "sale_submission_failed",
                    error=str(submitted.failure()),
                    total=str(totals.total.amount),
                )
                return submitted

            if generation != self._generation:
                logger.warning("late_sale_result_discarded")
                return Failure(CheckoutCancelled("payment was cancelled"))

            sale = submitted.unwrap()
            if sale.sale_id is None:
                return Failure(SubmissionFailure("sale service returned no sale id"))
            self._cart = self._cart.clear()
            self._last_sale = sale
            self._move(S.COMPLETED)
            return Success(sale)

        result = await self._run_in_flight("complete_payment", complete)
        if isinstance(result, Success):
            sale = result.unwrap()
            if sale.sale_id is not None:
                self._after_sale(sale, sale.sale_id)
        return result

    def _after_sale(self, sale: Sale, sale_id: SaleId) -> None:
        logger.info(
            "sale_completed",
            sale_id=sale_id.value,
            total=str(sale.total.amount),
            method=sale.payment.method.value,
        )
        published = self.deps.events.publish(
            SaleCompleted(sale_id=sale_id, total=sale.total, method=sale.payment.method)
        )
        if isinstance(published, Failure):
            logger.warning("event_publish_failed", error=str(published.failure()))
        if self.deps.printer is not None:
            self.deps.printer.print_receipt(format_receipt(sale))

    async def _run_in_flight(
        self,
        action: str,
        factory: Callable[[], Awaitable[Result[T, CheckoutError]]],
    ) -> Result[T, CheckoutError]:
        generation = self._generation
        task = asyncio.ensure_future(factory())
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if generation == self._generation:
                raise
            logger.info("in_flight_action_cancelled", action=action)
            return Failure(CheckoutCancelled("payment was cancelled"))
        finally:
            if self._task is task:
                self._task = None

    # ---- cancel / reset -------------------------------------------------------

    def cancel(self) -> Result[CheckoutState, CheckoutError]:
        if is_terminal(self._state):
            return Failure(self._invalid("cancel", "sale already completed"))
        self._abort_in_flight()
        self._method = None
        self._amount_received = None
        self._change = None
        return Success(self._move(S.IDLE))

    def new_transaction(self) -> Result[CheckoutState, CheckoutError]:
        if self._state not in (S.IDLE, S.COMPLETED):
            return Failure(
                self._invalid("new_transaction", "checkout in progress; cancel it first")
            )
        self._abort_in_flight()
        self._cart = Cart.empty()
        self._customer = None
        self._method = None
        self._amount_received = None
        self._change = None
        return Success(self._move(S.IDLE))

    def _abort_in_flight(self) -> None:
        self._generation += 1
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    # ---- helpers ---------------------------------------------------------------

    def _move(self, target: CheckoutState) -> CheckoutState:
        if target is not self._state:
            logger.debug(
                "checkout_state_changed", from_state=self._state.value, to_state=target.value
            )
        self._state = target
        return target

    def _invalid(self, action: str, message: str) -> InvalidTransition:
        return InvalidTransition(message=message, state=self._state.value, action=action)
