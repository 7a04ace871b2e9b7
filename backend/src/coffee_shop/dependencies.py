"""Shared FastAPI dependencies.

Reusable type aliases and dependency functions that routers import.
Defined here (not in main.py) to avoid circular imports when routers
are registered in main.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from coffee_shop.db.session import get_db
from coffee_shop.exceptions import RequestEncoding, UnsupportedMediaTypeError

_MEDIA_TYPES: dict[str, RequestEncoding] = {
    "application/x-www-form-urlencoded": RequestEncoding.FORM,
    "application/json": RequestEncoding.JSON,
    "multipart/form-data": RequestEncoding.MULTIPART,
}


def request_encoding(request: Request) -> RequestEncoding:
    """Classify the request body by its Content-Type media type.

    Parameters such as ``charset`` or ``boundary`` are ignored.
    Raises UnsupportedMediaTypeError for anything else.
    """
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    try:
        return _MEDIA_TYPES[media_type]
    except KeyError:
        raise UnsupportedMediaTypeError(content_type) from None


DB = Annotated[AsyncSession, Depends(get_db)]
BodyEncoding = Annotated[RequestEncoding, Depends(request_encoding)]
