"""Failure kinds raised by services and routers.

Each kind may declare a default HTTP status as the ``status_code`` class
attribute. The exception handler chain in coffee_shop.error_handlers only
falls back to that declared status when no endpoint or global handler is
registered for the kind.

Validation failures come in two variants, picked by how the request body
was encoded (see ``failure_for``):

- FormValidationError: rendered with the generic error envelope, which never
  shows the individual violations.
- GlobalValidationError: rendered by the global handler as
  ``{"message": <violation text>}``.
"""

import enum
from collections.abc import Sequence
from typing import ClassVar

from coffee_shop.validation import Violation, render_violations


class CoffeeShopError(Exception):
    """Base class for all failures the service raises on purpose."""

    status_code: ClassVar[int | None] = None

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailure(CoffeeShopError):
    """A creation request broke one or more field rules."""

    def __init__(self, violations: Sequence[Violation], object_name: str = "coffee") -> None:
        self.violations = tuple(violations)
        self.object_name = object_name
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"Validation failed for {self.object_name}: {len(self.violations)} error(s)"


class FormValidationError(ValidationFailure):
    """Validation failure of a form-encoded or multipart request."""

    status_code = 400


class GlobalValidationError(ValidationFailure):
    """Validation failure of a JSON request; the message lists every violation."""

    def _describe(self) -> str:
        return render_violations(self.object_name, self.violations)


class MalformedRequestError(CoffeeShopError):
    """The request body could not be parsed at all."""

    status_code = 400


class UnsupportedMediaTypeError(CoffeeShopError):
    """The request body uses a content type the endpoint does not accept."""

    status_code = 415

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"Content type '{content_type or 'none'}' not supported")


class NotFoundError(CoffeeShopError):
    """Raised when a requested entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class ConflictError(CoffeeShopError):
    """Raised when an operation conflicts with existing state."""

    status_code = 409


class InvalidStateTransitionError(ConflictError):
    """Raised when an order is asked to move to a state it cannot reach."""

    def __init__(self, order_id: int, current: str, target: str) -> None:
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(f"Order {order_id} cannot move from {current} to {target}")


class RequestEncoding(enum.Enum):
    FORM = "form"
    JSON = "json"
    MULTIPART = "multipart"


def failure_for(
    encoding: RequestEncoding,
    violations: Sequence[Violation],
    object_name: str = "coffee",
) -> ValidationFailure:
    """Pick the validation failure variant for a request encoding."""
    if encoding is RequestEncoding.JSON:
        return GlobalValidationError(violations, object_name)
    return FormValidationError(violations, object_name)
