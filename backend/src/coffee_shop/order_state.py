"""Order lifecycle.

Orders move forward one step at a time; CANCELLED can be reached from any
state before TAKEN. TAKEN and CANCELLED are terminal.
"""

import enum


class OrderState(enum.StrEnum):
    INIT = "INIT"
    PAID = "PAID"
    BREWING = "BREWING"
    BREWED = "BREWED"
    TAKEN = "TAKEN"
    CANCELLED = "CANCELLED"


# Current state -> states it may move to next
VALID_TRANSITIONS: dict[OrderState, frozenset[OrderState]] = {
    OrderState.INIT: frozenset({OrderState.PAID, OrderState.CANCELLED}),
    OrderState.PAID: frozenset({OrderState.BREWING, OrderState.CANCELLED}),
    OrderState.BREWING: frozenset({OrderState.BREWED, OrderState.CANCELLED}),
    OrderState.BREWED: frozenset({OrderState.TAKEN, OrderState.CANCELLED}),
    OrderState.TAKEN: frozenset(),
    OrderState.CANCELLED: frozenset(),
}


def is_valid_transition(current: OrderState, target: OrderState) -> bool:
    """True if an order in ``current`` may move to ``target``.

    Re-applying the current state counts as valid (a no-op).
    """
    return current == target or target in VALID_TRANSITIONS[current]
