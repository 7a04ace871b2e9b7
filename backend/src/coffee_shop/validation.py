"""Field rules for coffee creation requests.

A rule is a predicate over one field plus the message reported when it
fails. ``validate`` runs every rule in declaration order and returns all
violations at once, so a client sees every problem in one round trip.

Rules for a field only see that field's value. A rule whose ``requires_value``
is set is skipped while the value is missing, leaving "missing" to a single
NotNull/NotEmpty violation.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from coffee_shop.money import MAX_AMOUNT, InvalidAmountError, parse_amount

MAX_NAME_LENGTH = 255


@dataclass(frozen=True)
class CoffeeRequest:
    """Transient creation request, exactly as the client sent it."""

    name: object
    price: object = None


@dataclass(frozen=True)
class Violation:
    field: str
    rule: str
    message: str
    rejected_value: object = None


@dataclass(frozen=True)
class Rule:
    field: str
    name: str
    check: Callable[[object], bool]
    message: str
    requires_value: bool = False


def is_missing(value: object) -> bool:
    """None and blank strings both count as "not supplied"."""
    return value is None or (isinstance(value, str) and not value.strip())


def _is_amount(value: object) -> bool:
    try:
        parse_amount(value)
    except InvalidAmountError:
        return False
    return True


COFFEE_RULES: tuple[Rule, ...] = (
    Rule("name", "NotEmpty", lambda value: not is_missing(value), "must not be empty"),
    Rule(
        "name",
        "Text",
        lambda value: isinstance(value, str),
        "must be a string",
        requires_value=True,
    ),
    Rule(
        "name",
        "Size",
        lambda value: not isinstance(value, str) or len(value) <= MAX_NAME_LENGTH,
        f"size must be at most {MAX_NAME_LENGTH}",
        requires_value=True,
    ),
    Rule("price", "NotNull", lambda value: not is_missing(value), "must not be null"),
    Rule(
        "price",
        "Amount",
        _is_amount,
        f"must be a non-negative amount up to {MAX_AMOUNT} with at most 2 fraction digits",
        requires_value=True,
    ),
)


def validate(request: CoffeeRequest, rules: Sequence[Rule] = COFFEE_RULES) -> list[Violation]:
    """Return every rule violation of ``request``, in rule order."""
    violations: list[Violation] = []
    for rule in rules:
        value = getattr(request, rule.field)
        if rule.requires_value and is_missing(value):
            continue
        if not rule.check(value):
            violations.append(Violation(rule.field, rule.name, rule.message, value))
    return violations


def render_violations(object_name: str, violations: Sequence[Violation]) -> str:
    """Human-readable text for a whole violation set.

    Example:
        Validation failed for coffee with 1 error(s): [Field error on field 'name':
        rejected value []; must not be empty]
    """
    details = "; ".join(
        f"[Field error on field '{v.field}': rejected value [{_show(v.rejected_value)}]; "
        f"{v.message}]"
        for v in violations
    )
    return f"Validation failed for {object_name} with {len(violations)} error(s): {details}"


def _show(value: object) -> str:
    return "null" if value is None else str(value)
