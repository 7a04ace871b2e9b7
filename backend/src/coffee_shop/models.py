"""SQLAlchemy models.

Define all ORM models here. They must inherit from Base so that
Alembic's autogenerate can detect them.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Table,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coffee_shop.db.session import Base
from coffee_shop.order_state import OrderState

# Many-to-many: an order lists coffees, a coffee can appear in many orders.
order_coffee = Table(
    "coffee_order_coffee",
    Base.metadata,
    Column("coffee_order_id", ForeignKey("coffee_order.id"), primary_key=True),
    Column("items_id", ForeignKey("coffee.id"), primary_key=True),
)


class Coffee(Base):
    __tablename__ = "coffee"
    __table_args__ = (
        CheckConstraint("price >= 0", name="price_non_negative"),
        CheckConstraint("name <> ''", name="name_not_empty"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    # Minor units, see coffee_shop.money
    price: Mapped[int] = mapped_column(BigInteger)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class CoffeeOrder(Base):
    __tablename__ = "coffee_order"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer: Mapped[str] = mapped_column(String(255))
    state: Mapped[OrderState] = mapped_column(
        Enum(OrderState, name="order_state", native_enum=False, length=16),
        default=OrderState.INIT,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    items: Mapped[list[Coffee]] = relationship(secondary=order_coffee, order_by=Coffee.id)
