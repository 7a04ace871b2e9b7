"""Coffee response schemas.

Rendered as ``{"id", "createTime", "updateTime", "name", "price"}``. The ORM
stores price in minor units; it becomes a two-digit decimal here, on the way
out, and nowhere else.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from coffee_shop.money import from_minor_units


class CoffeeResponse(BaseModel):
    """A persisted coffee."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    create_time: datetime = Field(
        validation_alias=AliasChoices("created_at", "createTime"),
        serialization_alias="createTime",
    )
    update_time: datetime = Field(
        validation_alias=AliasChoices("updated_at", "updateTime"),
        serialization_alias="updateTime",
    )
    name: str
    price: Decimal

    @field_validator("price", mode="before")
    @classmethod
    def _price_from_minor_units(cls, value: object) -> object:
        # Integers come from the ORM column; Decimals are already converted
        if isinstance(value, int):
            return from_minor_units(value)
        return value
