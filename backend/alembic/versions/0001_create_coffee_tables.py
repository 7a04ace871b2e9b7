"""create coffee, coffee_order and coffee_order_coffee

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "coffee",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.BigInteger(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint("price >= 0", name=op.f("ck_coffee_price_non_negative")),
        sa.CheckConstraint("name <> ''", name=op.f("ck_coffee_name_not_empty")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_coffee")),
        sa.UniqueConstraint("name", name=op.f("uq_coffee_name")),
    )
    op.create_table(
        "coffee_order",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer", sa.String(length=255), nullable=False),
        sa.Column(
            "state",
            sa.Enum(
                "INIT",
                "PAID",
                "BREWING",
                "BREWED",
                "TAKEN",
                "CANCELLED",
                name="order_state",
                native_enum=False,
                length=16,
            ),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_coffee_order")),
    )
    op.create_table(
        "coffee_order_coffee",
        sa.Column("coffee_order_id", sa.Integer(), nullable=False),
        sa.Column("items_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["coffee_order_id"],
            ["coffee_order.id"],
            name=op.f("fk_coffee_order_coffee_coffee_order_id_coffee_order"),
        ),
        sa.ForeignKeyConstraint(
            ["items_id"],
            ["coffee.id"],
            name=op.f("fk_coffee_order_coffee_items_id_coffee"),
        ),
        sa.PrimaryKeyConstraint(
            "coffee_order_id", "items_id", name=op.f("pk_coffee_order_coffee")
        ),
    )


def downgrade() -> None:
    op.drop_table("coffee_order_coffee")
    op.drop_table("coffee_order")
    op.drop_table("coffee")
