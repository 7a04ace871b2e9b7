"""Order business logic.

Creates orders from coffee names and moves them through their lifecycle
(see coffee_shop.order_state).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from coffee_shop.exceptions import InvalidStateTransitionError, NotFoundError
from coffee_shop.logging import get_logger
from coffee_shop.models import CoffeeOrder
from coffee_shop.order_state import OrderState, is_valid_transition
from coffee_shop.repositories.coffee import find_coffees_by_names
from coffee_shop.repositories.order import get_order, save_order

logger = get_logger(__name__)


async def create_order(db: AsyncSession, customer: str, coffee_names: list[str]) -> CoffeeOrder:
    """Create an INIT order for ``customer`` holding the named coffees.

    Repeated names collapse to one item. Raises NotFoundError naming the
    first coffee that does not exist.
    """
    wanted = list(dict.fromkeys(name.strip() for name in coffee_names))
    coffees = await find_coffees_by_names(db, wanted)

    found = {coffee.name for coffee in coffees}
    missing = [name for name in wanted if name not in found]
    if missing:
        raise NotFoundError("Coffee", missing[0])

    order = await save_order(
        db, CoffeeOrder(customer=customer, items=coffees, state=OrderState.INIT)
    )
    logger.info("order_created", order_id=order.id, customer=customer, items=len(coffees))
    return order


async def get_order_by_id(db: AsyncSession, order_id: int) -> CoffeeOrder:
    order = await get_order(db, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


async def update_order_state(db: AsyncSession, order_id: int, target: OrderState) -> CoffeeOrder:
    """Move an order to ``target``.

    Raises InvalidStateTransitionError for a backward move, a skipped step,
    or any move out of TAKEN or CANCELLED.
    """
    order = await get_order_by_id(db, order_id)
    current = order.state
    if not is_valid_transition(current, target):
        raise InvalidStateTransitionError(order_id, current.value, target.value)
    if current == target:
        return order

    order.state = target
    order = await save_order(db, order)
    logger.info(
        "order_state_changed", order_id=order_id, previous=current.value, state=target.value
    )
    return order
