"""Order endpoints.

Also owns the endpoint handler for rejected state changes, which reports the
current and requested state instead of the generic envelope. main.py
registers it on the handler chain under this module's scope.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from coffee_shop.dependencies import DB
from coffee_shop.exceptions import InvalidStateTransitionError
from coffee_shop.logging import get_logger
from coffee_shop.schemas.error import StateConflictResponse
from coffee_shop.schemas.order import NewOrderRequest, OrderResponse, OrderStateRequest
from coffee_shop.services.order import create_order, get_order_by_id, update_order_state

SCOPE = __name__

logger = get_logger(__name__)

router = APIRouter(prefix="/order", tags=["order"])


@router.post("/", status_code=201)
async def add_order(body: NewOrderRequest, db: DB) -> OrderResponse:
    """Create an order in state INIT from coffee names."""
    order = await create_order(db, body.customer, body.items)
    return OrderResponse.model_validate(order)


@router.get("/{order_id}", status_code=200)
async def get_order(order_id: int, db: DB) -> OrderResponse:
    order = await get_order_by_id(db, order_id)
    return OrderResponse.model_validate(order)


@router.put("/{order_id}", status_code=200)
async def change_order_state(order_id: int, body: OrderStateRequest, db: DB) -> OrderResponse:
    """Move an order to the requested state."""
    order = await update_order_state(db, order_id, body.state)
    return OrderResponse.model_validate(order)


async def state_conflict_handler(
    request: Request, exc: InvalidStateTransitionError
) -> JSONResponse:
    """Return 409 with both states so the client can see why."""
    logger.warning(
        "order_state_rejected",
        order_id=exc.order_id,
        current=exc.current,
        target=exc.target,
    )
    body = StateConflictResponse(
        message=exc.message, current_state=exc.current, target_state=exc.target
    )
    return JSONResponse(status_code=409, content=body.model_dump(by_alias=True))
