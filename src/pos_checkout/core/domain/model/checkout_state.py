from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Mapping


class CheckoutState(str, Enum):
    IDLE = "idle"
    CUSTOMER_INFO_PROMPT = "customer_info_prompt"
    PAYMENT_SELECTION = "payment_selection"
    CASH_ENTRY = "cash_entry"
    CHANGE_COMPUTED = "change_computed"
    CARD_READY = "card_ready"
    COMPLETED = "completed"


S = CheckoutState

TRANSITIONS: Mapping[CheckoutState, FrozenSet[CheckoutState]] = {
    S.IDLE: frozenset({S.CUSTOMER_INFO_PROMPT, S.PAYMENT_SELECTION}),
    S.CUSTOMER_INFO_PROMPT: frozenset({S.IDLE, S.PAYMENT_SELECTION}),
    S.PAYMENT_SELECTION: frozenset({S.IDLE, S.CASH_ENTRY, S.CARD_READY}),
    S.CASH_ENTRY: frozenset({S.IDLE, S.CHANGE_COMPUTED, S.CARD_READY}),
    S.CHANGE_COMPUTED: frozenset({S.IDLE, S.CASH_ENTRY, S.CARD_READY, S.COMPLETED}),
    S.CARD_READY: frozenset({S.IDLE, S.CASH_ENTRY, S.COMPLETED}),
    S.COMPLETED: frozenset({S.IDLE}),
}

# states in which the cart may still be edited
CART_EDITABLE: FrozenSet[CheckoutState] = frozenset(
    {S.IDLE, S.CUSTOMER_INFO_PROMPT, S.PAYMENT_SELECTION}
)

# states from which "complete payment" may be invoked
PAYABLE: FrozenSet[CheckoutState] = frozenset({S.CHANGE_COMPUTED, S.CARD_READY})


def can_transition(current: CheckoutState, target: CheckoutState) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(state: CheckoutState) -> bool:
    return state is CheckoutState.COMPLETED
