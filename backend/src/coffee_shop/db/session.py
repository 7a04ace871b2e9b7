"""Database engine, declarative base and the per-request session."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from coffee_shop.config import settings

# Constraint names used by the coffee tables and by alembic/versions
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",  # uq_coffee_name
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # ck_coffee_price_non_negative
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for Coffee, CoffeeOrder and the order_coffee table."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def _connect_args(database_url: str) -> dict[str, Any]:
    # aiosqlite has no statement timeout
    if database_url.startswith("postgresql+asyncpg"):
        return {"command_timeout": settings.db_statement_timeout}
    return {}


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_recycle=settings.db_pool_recycle,
    pool_pre_ping=settings.db_pool_pre_ping,
    echo=settings.db_echo,
    connect_args=_connect_args(settings.database_url),
)

# Coffees returned from a committed request are serialized after commit
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Session for one request, committed when the endpoint returns.

    Any exception rolls the request's writes back, including a coffee batch
    rejected halfway through or a unique-name race caught at flush time.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def shutdown() -> None:
    await engine.dispose()
