"""Order data-access layer."""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coffee_shop.models import CoffeeOrder


def _order_by_id(order_id: int) -> Select[tuple[CoffeeOrder]]:
    # populate_existing reloads server-generated timestamps after a flush
    return (
        select(CoffeeOrder)
        .options(selectinload(CoffeeOrder.items))
        .where(CoffeeOrder.id == order_id)
        .execution_options(populate_existing=True)
    )


async def get_order(db: AsyncSession, order_id: int) -> CoffeeOrder | None:
    """Return one order with its coffees eagerly loaded, or None."""
    result = await db.execute(_order_by_id(order_id))
    return result.scalar_one_or_none()


async def save_order(db: AsyncSession, order: CoffeeOrder) -> CoffeeOrder:
    """Flush ``order`` and reload it with generated columns and items."""
    db.add(order)
    await db.flush()
    result = await db.execute(_order_by_id(order.id))
    return result.scalar_one()
