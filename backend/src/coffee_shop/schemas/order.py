"""Order request and response schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from coffee_shop.order_state import OrderState
from coffee_shop.schemas.coffee import CoffeeResponse


class NewOrderRequest(BaseModel):
    customer: str = Field(min_length=1, max_length=255)
    items: list[str] = Field(min_length=1)


class OrderStateRequest(BaseModel):
    state: OrderState


class OrderResponse(BaseModel):
    """An order with its coffees nested."""

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
    customer: str
    state: OrderState
    items: list[CoffeeResponse]
