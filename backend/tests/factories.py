"""Factory functions for creating model instances in tests."""

from coffee_shop.models import Coffee, CoffeeOrder
from coffee_shop.order_state import OrderState


def make_coffee(*, name: str = "espresso", price: int = 2000) -> Coffee:
    """Price is in minor units: 2000 == 20.00."""
    return Coffee(name=name, price=price)


def make_order(
    *,
    customer: str = "Li Lei",
    items: list[Coffee] | None = None,
    state: OrderState = OrderState.INIT,
) -> CoffeeOrder:
    return CoffeeOrder(customer=customer, items=items or [], state=state)
