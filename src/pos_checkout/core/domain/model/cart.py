from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Tuple

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.errors import (
    CheckoutError,
    ItemNotInCart,
    ValidationError,
)
from pos_checkout.core.domain.model.money import Money


@dataclass(frozen=True)
class CartItem:
    id: str
    name: str
    unit_price: Money
    quantity: int = 1
    barcode: str | None = None

    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "CartItem":
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class Cart:
    """
    Pending line items of a single sale.

    Every command returns a new Cart wrapped in a Result; the receiver is
    never modified, so a failed command leaves the caller's cart as it was.
    """

    items: Tuple[CartItem, ...] = ()

    @staticmethod
    def empty() -> "Cart":
        return Cart()

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def get(self, item_id: str) -> CartItem | None:
        for it in self.items:
            if it.id == item_id:
                return it
        return None

    def is_empty(self) -> bool:
        return not self.items

    def item_count(self) -> int:
        return len(self.items)

    def total_quantity(self) -> int:
        return sum(it.quantity for it in self.items)

    # ---- commands ----------------------------------------------------------

    def add_item(self, item: CartItem) -> Result["Cart", CheckoutError]:
        checked = _validate_item(item)
        if isinstance(checked, Failure):
            return checked

        existing = self.get(item.id)
        if existing is None:
            return Success(Cart(self.items + (item,)))

        merged = existing.with_quantity(existing.quantity + item.quantity)
        return Success(self._replace_line(merged))

    def update_quantity(
        self, item_id: str, new_quantity: int
    ) -> Result["Cart", CheckoutError]:
        if not _is_whole_number(new_quantity):
            return Failure(ValidationError("quantity must be a whole number"))

        existing = self.get(item_id)
        if existing is None:
            return Failure(ItemNotInCart(message="item not in cart", item_id=item_id))

        if new_quantity < 1:
            return self.remove_item(item_id)

        return Success(self._replace_line(existing.with_quantity(new_quantity)))

    def remove_item(self, item_id: str) -> Result["Cart", CheckoutError]:
        if self.get(item_id) is None:
            return Failure(ItemNotInCart(message="item not in cart", item_id=item_id))
        return Success(Cart(tuple(it for it in self.items if it.id != item_id)))

    def clear(self) -> "Cart":
        return Cart.empty()

    def _replace_line(self, line: CartItem) -> "Cart":
        return Cart(tuple(line if it.id == line.id else it for it in self.items))


def _is_whole_number(value: object) -> bool:
    # bool is an int subclass but never a quantity
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_item(item: CartItem) -> Result[CartItem, CheckoutError]:
    if not item.id.strip():
        return Failure(ValidationError("item id is required"))
    if not item.name.strip():
        return Failure(ValidationError(f"item {item.id}: name is required"))
    if item.unit_price.is_negative():
        return Failure(ValidationError(f"item {item.id}: unit_price must be >= 0"))
    if not _is_whole_number(item.quantity):
        return Failure(
            ValidationError(f"item {item.id}: quantity must be a whole number")
        )
    if item.quantity < 1:
        return Failure(ValidationError(f"item {item.id}: quantity must be >= 1"))
    return Success(item)
