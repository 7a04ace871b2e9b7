"""Coffee endpoints.

``POST /coffee/`` accepts three body encodings on the same path:

- form-encoded ``name=..&price=..``: one coffee, failures rendered generically
- JSON ``{"name": .., "price": ..}``: one coffee, failures list every violation
- multipart with a ``file`` part: one ``<name> <price>`` coffee per line
"""

import json
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Request
from starlette.datastructures import UploadFile

from coffee_shop.dependencies import DB, BodyEncoding
from coffee_shop.exceptions import MalformedRequestError, RequestEncoding
from coffee_shop.schemas.coffee import CoffeeResponse
from coffee_shop.services.coffee import create_coffee, create_coffees, get_coffees
from coffee_shop.validation import CoffeeRequest

router = APIRouter(prefix="/coffee", tags=["coffee"])


@router.get("/", status_code=200)
async def list_coffees(db: DB) -> list[CoffeeResponse]:
    """List every coffee, ordered by id."""
    coffees = await get_coffees(db)
    return [CoffeeResponse.model_validate(coffee) for coffee in coffees]


@router.post("/", status_code=201)
async def add_coffee(
    request: Request, db: DB, encoding: BodyEncoding
) -> CoffeeResponse | list[CoffeeResponse]:
    """Create one coffee, or a batch of them from an uploaded file."""
    if encoding is RequestEncoding.MULTIPART:
        content = await _read_upload(request)
        coffees = await create_coffees(db, content)
        return [CoffeeResponse.model_validate(coffee) for coffee in coffees]

    if encoding is RequestEncoding.JSON:
        payload = await _read_json_object(request)
        coffee_request = CoffeeRequest(name=payload.get("name"), price=payload.get("price"))
    else:
        form = await request.form()
        coffee_request = CoffeeRequest(name=form.get("name"), price=form.get("price"))

    coffee = await create_coffee(db, coffee_request, encoding)
    return CoffeeResponse.model_validate(coffee)


async def _read_json_object(request: Request) -> dict[str, Any]:
    # Decimal keeps 150.00 exact instead of going through float
    try:
        payload = json.loads(await request.body(), parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedRequestError(f"JSON parse error: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedRequestError("JSON body must be an object")
    return payload


async def _read_upload(request: Request) -> str:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise MalformedRequestError("Required request part 'file' is not present")
    try:
        return (await upload.read()).decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedRequestError("Uploaded file is not UTF-8 text") from exc
