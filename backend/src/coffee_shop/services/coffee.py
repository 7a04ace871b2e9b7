"""Coffee business logic.

Validates creation requests, picks the failure variant for the request
encoding and persists through the repository. Validation always finishes
before the first insert, so a rejected request or batch writes nothing.
"""

from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coffee_shop.exceptions import (
    ConflictError,
    FormValidationError,
    RequestEncoding,
    failure_for,
)
from coffee_shop.logging import get_logger
from coffee_shop.models import Coffee
from coffee_shop.money import parse_amount, to_minor_units
from coffee_shop.repositories.coffee import find_coffees_by_names, list_coffees, save_coffees
from coffee_shop.validation import CoffeeRequest, Violation, validate

logger = get_logger(__name__)


async def get_coffees(db: AsyncSession) -> list[Coffee]:
    return await list_coffees(db)


async def create_coffee(
    db: AsyncSession, request: CoffeeRequest, encoding: RequestEncoding
) -> Coffee:
    """Validate and persist one coffee.

    Raises the validation failure variant that matches ``encoding``.
    """
    violations = validate(request)
    if violations:
        raise failure_for(encoding, violations)

    [coffee] = await _persist(db, [request])
    logger.info("coffee_created", coffee_id=coffee.id, name=coffee.name, price=coffee.price)
    return coffee


def parse_batch(content: str) -> list[tuple[int, CoffeeRequest]]:
    """Split an upload into (line number, request) pairs.

    One ``<name> <price>`` per line, whitespace separated. The last token is
    the price and everything before it the name; a single token is a name
    with no price. Blank lines are skipped but still counted.
    """
    requests: list[tuple[int, CoffeeRequest]] = []
    for line_no, line in enumerate(content.splitlines(), start=1):
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) == 1:
            requests.append((line_no, CoffeeRequest(name=tokens[0], price=None)))
        else:
            requests.append((line_no, CoffeeRequest(name=" ".join(tokens[:-1]), price=tokens[-1])))
    return requests


async def create_coffees(db: AsyncSession, content: str) -> list[Coffee]:
    """Validate every line of an upload, then persist all of them or none.

    Any violation on any line rejects the whole batch with a
    FormValidationError whose fields are prefixed with the line number.
    """
    lines = parse_batch(content)
    if not lines:
        raise FormValidationError(
            [Violation("file", "NotEmpty", "must contain at least one coffee line", None)]
        )

    violations = [
        Violation(f"line {line_no}: {v.field}", v.rule, v.message, v.rejected_value)
        for line_no, request in lines
        for v in validate(request)
    ]
    if violations:
        raise FormValidationError(violations)

    coffees = await _persist(db, [request for _, request in lines])
    logger.info("coffees_batch_created", count=len(coffees), names=[c.name for c in coffees])
    return coffees


async def _persist(db: AsyncSession, requests: Sequence[CoffeeRequest]) -> list[Coffee]:
    """Build Coffee rows from validated requests and save them."""
    names = [str(request.name).strip() for request in requests]

    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConflictError(f"Coffee names repeated in request: {', '.join(duplicates)}")

    existing = await find_coffees_by_names(db, names)
    if existing:
        taken = ", ".join(coffee.name for coffee in existing)
        raise ConflictError(f"Coffee already exists: {taken}")

    coffees = [
        Coffee(name=name, price=to_minor_units(parse_amount(request.price)))
        for name, request in zip(names, requests, strict=True)
    ]
    try:
        return await save_coffees(db, coffees)
    except IntegrityError as exc:
        # A concurrent request inserted one of the names after the lookup above
        raise ConflictError(f"Coffee already exists: {', '.join(names)}") from exc
