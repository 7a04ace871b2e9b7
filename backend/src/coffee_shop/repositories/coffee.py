"""Coffee data-access layer.

Pure query functions, no business logic, no HTTP concerns.
Each function takes a session and returns models.
"""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coffee_shop.models import Coffee


async def list_coffees(db: AsyncSession) -> list[Coffee]:
    """Return all coffees ordered by id."""
    result = await db.execute(select(Coffee).order_by(Coffee.id))
    return list(result.scalars().all())


async def find_coffees_by_names(db: AsyncSession, names: Sequence[str]) -> list[Coffee]:
    """Return the coffees whose name is in ``names``, ordered by id."""
    if not names:
        return []
    stmt = select(Coffee).where(Coffee.name.in_(names)).order_by(Coffee.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def save_coffees(db: AsyncSession, coffees: Sequence[Coffee]) -> list[Coffee]:
    """Insert ``coffees`` and load their generated ids and timestamps."""
    db.add_all(coffees)
    await db.flush()
    for coffee in coffees:
        await db.refresh(coffee)
    return list(coffees)
