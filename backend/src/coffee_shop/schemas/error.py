"""Error response schemas.

Two envelopes:

- GenericErrorResponse: ``{"timestamp", "status", "error", "message", "path"}``,
  used for every failure that has no dedicated handler. ``errors`` and
  ``trace`` only appear when the matching config knobs are switched on.
- MessageResponse: ``{"message": ...}``, used by the global validation handler.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class FieldErrorDetail(BaseModel):
    """One violated field rule, only exposed with error_include_binding_errors."""

    field: str
    rule: str
    message: str


class GenericErrorResponse(BaseModel):
    timestamp: datetime
    status: int
    error: str
    message: str
    path: str
    errors: list[FieldErrorDetail] | None = None
    trace: str | None = None


class MessageResponse(BaseModel):
    message: str


class StateConflictResponse(BaseModel):
    """Body for a rejected order state change."""

    message: str
    current_state: str = Field(serialization_alias="currentState")
    target_state: str = Field(serialization_alias="targetState")
