from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Result, Success

from pos_checkout.core.domain.model.cart import Cart, CartItem
from pos_checkout.core.domain.model.errors import (
    CheckoutCancelled,
    CheckoutError,
    InsufficientPayment,
    InvalidTransition,
    ItemNotInCart,
    PaymentInProgress,
    PublishError,
    RemoteUnavailable,
    SaleNotFound,
    SubmissionFailure,
    ValidationError,
)
from pos_checkout.core.domain.model.money import Money
from pos_checkout.core.domain.model.sale import PaymentMethod, Sale, SaleId
from pos_checkout.core.domain.service.checkout_session import CheckoutSession
from pos_checkout.core.domain.service.receipt_formatter import (
    format_receipt,
    render_text,
)
from pos_checkout.core.ports.inbound.checkout import CheckoutSnapshot
from pos_checkout.core.ports.outbound.sales import SaleRepository

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class AddItemRequest(BaseModel):
    id: str = Field(min_length=1, examples=["4"])
    name: str = Field(min_length=1, examples=["Sunlight Soap 100g"])
    unit_price: Decimal = Field(ge=0, examples=["95.00"])
    quantity: int = Field(default=1, ge=1, examples=[1])
    barcode: str | None = Field(default=None, examples=["123459"])


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(examples=[3])


class BeginCheckoutRequest(BaseModel):
    collect_customer: bool = True


class CustomerRequest(BaseModel):
    name: str | None = Field(default=None, examples=["Nimal Perera"])
    phone: str | None = Field(default=None, examples=["0771234567"])


class PaymentMethodRequest(BaseModel):
    method: Literal["cash", "card"]


class CashRequest(BaseModel):
    amount_received: Decimal = Field(ge=0, examples=["500.00"])


class CartLineOut(BaseModel):
    id: str
    name: str
    unit_price: str
    quantity: int
    line_total: str


class TotalsOut(BaseModel):
    subtotal: str
    tax: str
    discount: str
    total: str
    currency: str


class CartResponse(BaseModel):
    items: list[CartLineOut]
    item_count: int
    total_quantity: int
    totals: TotalsOut


class ChangeResponse(BaseModel):
    change: str
    source: str
    reason: str | None = None


class CheckoutResponse(BaseModel):
    state: str
    cart: CartResponse
    customer_name: str | None = None
    customer_phone: str | None = None
    payment_method: str | None = None
    amount_received: str | None = None
    change: ChangeResponse | None = None
    in_flight: bool
    last_sale_id: str | None = None


class SaleResponse(BaseModel):
    sale_id: str
    timestamp: str
    customer_name: str | None = None
    customer_phone: str | None = None
    items: list[CartLineOut]
    totals: TotalsOut
    payment_method: str
    amount_received: str | None = None
    change: str | None = None
    change_source: str | None = None


class ReceiptLineOut(BaseModel):
    label: str
    value: str


class ReceiptItemOut(BaseModel):
    name: str
    detail: str
    amount: str


class ReceiptResponse(BaseModel):
    title: str
    sale_id: str
    issued_at: str
    customer: list[ReceiptLineOut]
    items: list[ReceiptItemOut]
    summary: list[ReceiptLineOut]
    total: ReceiptLineOut
    payment: list[ReceiptLineOut]
    footer: str
    text: str


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None


def _map_error_to_http(err: CheckoutError) -> tuple[int, ErrorResponse]:
    body = ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, InsufficientPayment):
        return 402, body

    if isinstance(err, ValidationError):
        return 400, body

    if isinstance(err, (ItemNotInCart, SaleNotFound)):
        return 404, body

    if isinstance(err, (InvalidTransition, PaymentInProgress, CheckoutCancelled)):
        return 409, body

    if isinstance(err, SubmissionFailure):
        return 502, body

    if isinstance(err, (PublishError, RemoteUnavailable)):
        return 503, body

    return 500, body


# ---- mapping helpers -------------------------------------------------------


def _line_out(item: CartItem) -> CartLineOut:
    return CartLineOut(
        id=item.id,
        name=item.name,
        unit_price=str(item.unit_price.amount),
        quantity=item.quantity,
        line_total=str(item.line_total().amount),
    )


def _cart_out(session: CheckoutSession, cart: Cart) -> CartResponse:
    totals = session.deps.pricing.totals(cart)
    return CartResponse(
        items=[_line_out(it) for it in cart],
        item_count=cart.item_count(),
        total_quantity=cart.total_quantity(),
        totals=TotalsOut(
            subtotal=str(totals.subtotal.amount),
            tax=str(totals.tax.amount),
            discount=str(totals.discount.amount),
            total=str(totals.total.amount),
            currency=totals.total.currency,
        ),
    )


def _checkout_out(session: CheckoutSession, snap: CheckoutSnapshot) -> CheckoutResponse:
    change = None
    if snap.change is not None:
        change = ChangeResponse(
            change=str(snap.change.change.amount),
            source=snap.change.source.value,
            reason=getattr(snap.change, "reason", None),
        )
    last_sale_id = None
    if snap.last_sale is not None and snap.last_sale.sale_id is not None:
        last_sale_id = snap.last_sale.sale_id.value
    return CheckoutResponse(
        state=snap.state.value,
        cart=_cart_out(session, snap.cart),
        customer_name=snap.customer.name if snap.customer else None,
        customer_phone=snap.customer.phone if snap.customer else None,
        payment_method=snap.payment_method.value if snap.payment_method else None,
        amount_received=(
            str(snap.amount_received.amount) if snap.amount_received else None
        ),
        change=change,
        in_flight=snap.in_flight,
        last_sale_id=last_sale_id,
    )


def _sale_out(sale: Sale) -> SaleResponse:
    payment = sale.payment
    return SaleResponse(
        sale_id=sale.sale_id.value if sale.sale_id else "",
        timestamp=sale.timestamp.isoformat(),
        customer_name=sale.customer.name if sale.customer else None,
        customer_phone=sale.customer.phone if sale.customer else None,
        items=[_line_out(it) for it in sale.items],
        totals=TotalsOut(
            subtotal=str(sale.subtotal.amount),
            tax=str(sale.tax.amount),
            discount=str(sale.discount.amount),
            total=str(sale.total.amount),
            currency=sale.total.currency,
        ),
        payment_method=payment.method.value,
        amount_received=(
            str(payment.amount_received.amount) if payment.amount_received else None
        ),
        change=str(payment.change.amount) if payment.change else None,
        change_source=payment.change_source.value if payment.change_source else None,
    )


def _receipt_out(sale: Sale) -> ReceiptResponse:
    view = format_receipt(sale)
    return ReceiptResponse(
        title=view.title,
        sale_id=view.sale_id,
        issued_at=view.issued_at,
        customer=[ReceiptLineOut(label=ln.label, value=ln.value) for ln in view.customer],
        items=[
            ReceiptItemOut(name=it.name, detail=it.detail, amount=it.amount)
            for it in view.items
        ],
        summary=[ReceiptLineOut(label=ln.label, value=ln.value) for ln in view.summary],
        total=ReceiptLineOut(label=view.total.label, value=view.total.value),
        payment=[ReceiptLineOut(label=ln.label, value=ln.value) for ln in view.payment],
        footer=view.footer,
        text=render_text(view),
    )


def _unwrap(result: Result[Any, CheckoutError]) -> Any:
    if isinstance(result, Success):
        return result.unwrap()
    raise result.failure()


def _money(amount: Decimal, currency: str) -> Money:
    try:
        return Money.of(amount, currency)
    except ValueError as exc:
        raise ValidationError(f"invalid amount: {amount}") from exc


# ---- app factory -----------------------------------------------------------


def create_app(session: CheckoutSession, sales: SaleRepository | None = None) -> FastAPI:
    app = FastAPI(title="pos_checkout")
    currency = session.deps.pricing.currency

    # --- exception handlers --------------------------------------------------

    @app.exception_handler(CheckoutError)
    async def handle_domain_error(_: Request, exc: CheckoutError) -> JSONResponse:
        status, body = _map_error_to_http(exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                for e in exc.errors()
            ],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    def _find_sale(sale_id: str) -> Sale:
        last = session.last_sale
        if last is not None and last.sale_id is not None and last.sale_id.value == sale_id:
            return last
        if sales is None:
            raise SaleNotFound(message="sale not found", sale_id=sale_id)
        return _unwrap(sales.get(SaleId(sale_id)))

    # --- routes --------------------------------------------------------------

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/checkout", response_model=CheckoutResponse)
    async def get_checkout() -> Any:
        return _checkout_out(session, session.snapshot())

    @app.get("/cart", response_model=CartResponse)
    async def get_cart() -> Any:
        return _cart_out(session, session.cart)

    @app.post("/cart/items", response_model=CartResponse, status_code=201)
    async def add_item(req: AddItemRequest) -> Any:
        item = CartItem(
            id=req.id,
            name=req.name,
            unit_price=_money(req.unit_price, currency),
            quantity=req.quantity,
            barcode=req.barcode,
        )
        return _cart_out(session, _unwrap(session.add_item(item)))

    @app.patch("/cart/items/{item_id}", response_model=CartResponse)
    async def update_quantity(item_id: str, req: UpdateQuantityRequest) -> Any:
        return _cart_out(session, _unwrap(session.update_quantity(item_id, req.quantity)))

    @app.delete("/cart/items/{item_id}", response_model=CartResponse)
    async def remove_item(item_id: str) -> Any:
        return _cart_out(session, _unwrap(session.remove_item(item_id)))

    @app.delete("/cart", response_model=CartResponse)
    async def clear_cart() -> Any:
        return _cart_out(session, _unwrap(session.clear_cart()))

    @app.post(
        "/checkout/begin",
        response_model=CheckoutResponse,
        responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    )
    async def begin_checkout(req: BeginCheckoutRequest | None = None) -> Any:
        collect = req.collect_customer if req is not None else True
        _unwrap(session.begin_checkout(collect_customer=collect))
        return _checkout_out(session, session.snapshot())

    @app.post("/checkout/customer", response_model=CheckoutResponse)
    async def submit_customer(req: CustomerRequest) -> Any:
        _unwrap(session.submit_customer(req.name, req.phone))
        return _checkout_out(session, session.snapshot())

    @app.post("/checkout/customer/skip", response_model=CheckoutResponse)
    async def skip_customer() -> Any:
        _unwrap(session.skip_customer())
        return _checkout_out(session, session.snapshot())

    @app.post("/checkout/payment-method", response_model=CheckoutResponse)
    async def select_payment_method(req: PaymentMethodRequest) -> Any:
        _unwrap(session.select_payment_method(PaymentMethod(req.method)))
        return _checkout_out(session, session.snapshot())

    @app.post(
        "/checkout/cash",
        response_model=ChangeResponse,
        responses={
            400: {"model": ErrorResponse},
            402: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
    )
    async def enter_cash(req: CashRequest) -> Any:
        result = _unwrap(await session.enter_cash(_money(req.amount_received, currency)))
        return ChangeResponse(
            change=str(result.change.amount),
            source=result.source.value,
            reason=getattr(result, "reason", None),
        )

    @app.post(
        "/checkout/complete",
        response_model=SaleResponse,
        status_code=201,
        responses={
            400: {"model": ErrorResponse},
            402: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
            502: {"model": ErrorResponse},
        },
    )
    async def complete_payment() -> Any:
        sale = _unwrap(await session.complete_payment())
        return _sale_out(sale)

    @app.post("/checkout/cancel", response_model=CheckoutResponse)
    async def cancel() -> Any:
        _unwrap(session.cancel())
        return _checkout_out(session, session.snapshot())

    @app.post("/checkout/new", response_model=CheckoutResponse)
    async def new_transaction() -> Any:
        _unwrap(session.new_transaction())
        return _checkout_out(session, session.snapshot())

    @app.get(
        "/sales/{sale_id}",
        response_model=SaleResponse,
        responses={404: {"model": ErrorResponse}},
    )
    async def get_sale(sale_id: str) -> Any:
        return _sale_out(_find_sale(sale_id))

    @app.get(
        "/sales/{sale_id}/receipt",
        response_model=ReceiptResponse,
        responses={404: {"model": ErrorResponse}},
    )
    async def get_receipt(sale_id: str) -> Any:
        return _receipt_out(_find_sale(sale_id))

    return app
