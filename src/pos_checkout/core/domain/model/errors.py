from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CheckoutError(Exception):
    message: str

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class ValidationError(CheckoutError):
    pass


@dataclass(frozen=True)
class InsufficientPayment(ValidationError):
    total: str
    amount_received: str

    def __str__(self) -> str:  # pragma: no cover
        return (
            f"insufficient_payment: total={self.total} "
            f"received={self.amount_received} ({self.message})"
        )


@dataclass(frozen=True)
class MissingPaymentMethod(ValidationError):
    pass


@dataclass(frozen=True)
class EmptyCart(ValidationError):
    pass


@dataclass(frozen=True)
class ItemNotInCart(CheckoutError):
    item_id: str

    def __str__(self) -> str:  # pragma: no cover
        return f"item_not_in_cart: {self.item_id} ({self.message})"


@dataclass(frozen=True)
class SaleNotFound(CheckoutError):
    sale_id: str

    def __str__(self) -> str:  # pragma: no cover
        return f"sale_not_found: {self.sale_id} ({self.message})"


@dataclass(frozen=True)
class InvalidTransition(CheckoutError):
    state: str
    action: str

    def __str__(self) -> str:  # pragma: no cover
        return f"invalid_transition: {self.action} from {self.state} ({self.message})"


@dataclass(frozen=True)
class PaymentInProgress(CheckoutError):
    pass


@dataclass(frozen=True)
class CheckoutCancelled(CheckoutError):
    pass


@dataclass(frozen=True)
class RemoteUnavailable(CheckoutError):
    pass


@dataclass(frozen=True)
class SubmissionFailure(CheckoutError):
    status_code: int | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.status_code is None:
            return f"submission_failure: {self.message}"
        return f"submission_failure: status={self.status_code} ({self.message})"


@dataclass(frozen=True)
class PublishError(CheckoutError):
    pass
