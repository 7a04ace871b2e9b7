"""Exception handler chain.

Every exception that reaches the app is routed through one ordered chain.
The first tier that has an answer wins:

1. ENDPOINT: a handler registered for the scope of the endpoint that raised
   (the router module defining it) and for the exception's kind.
2. GLOBAL: a handler registered for the kind across all endpoints.
3. DECLARED_STATUS: the ``status_code`` the kind declares on its class,
   rendered with the generic envelope.
4. FALLBACK: known client errors keep their 4xx status, anything else is a
   500. Both use the generic envelope.

Within tiers 1 and 2 the exception's MRO is walked, so a handler for a
subclass beats one for its base. The chain is built once per app by
``build_handler_chain`` and installed with ``ExceptionHandlerChain.install``.
"""

import enum
import traceback
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from coffee_shop.config import Settings
from coffee_shop.exceptions import CoffeeShopError, GlobalValidationError, ValidationFailure
from coffee_shop.logging import get_logger
from coffee_shop.schemas.error import FieldErrorDetail, GenericErrorResponse, MessageResponse

logger = get_logger(__name__)

Handler = Callable[[Request, Exception], Awaitable[Response]]
_Finder = Callable[[Exception, str | None], Handler | None]

NO_MESSAGE = "No message available"


class HandlerTier(enum.IntEnum):
    ENDPOINT = 1
    GLOBAL = 2
    DECLARED_STATUS = 3
    FALLBACK = 4


@dataclass(frozen=True)
class Resolution:
    tier: HandlerTier
    handler: Handler


def endpoint_scope(request: Request) -> str | None:
    """Scope of the endpoint that handled ``request``, if routing got that far."""
    endpoint = request.scope.get("endpoint")
    if endpoint is None:
        return None
    return getattr(endpoint, "__module__", None)


def _find_handler(handlers: dict[type[Exception], Handler], exc: Exception) -> Handler | None:
    for kind in type(exc).__mro__:
        handler = handlers.get(kind)
        if handler is not None:
            return handler
    return None


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


class ExceptionHandlerChain:
    """Ordered exception-to-response resolution.

    Usage:
        chain = ExceptionHandlerChain(settings)
        chain.add_global_handler(GlobalValidationError, validation_message_handler)
        chain.add_endpoint_handler("coffee_shop.routers.order", ConflictError, handler)
        chain.install(app)
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._endpoint_handlers: dict[str, dict[type[Exception], Handler]] = {}
        self._global_handlers: dict[type[Exception], Handler] = {}
        self._tiers: tuple[tuple[HandlerTier, _Finder], ...] = (
            (HandlerTier.ENDPOINT, self._endpoint_handler),
            (HandlerTier.GLOBAL, self._global_handler),
            (HandlerTier.DECLARED_STATUS, self._declared_status_handler),
            (HandlerTier.FALLBACK, self._fallback_handler),
        )

    def add_endpoint_handler(self, scope: str, kind: type[Exception], handler: Handler) -> None:
        self._endpoint_handlers.setdefault(scope, {})[kind] = handler

    def add_global_handler(self, kind: type[Exception], handler: Handler) -> None:
        self._global_handlers[kind] = handler

    def resolve(self, exc: Exception, scope: str | None = None) -> Resolution:
        """Pick the handler for ``exc`` raised inside endpoint ``scope``."""
        for tier, find in self._tiers:
            handler = find(exc, scope)
            if handler is not None:
                return Resolution(tier, handler)
        raise RuntimeError("fallback tier returned no handler")  # pragma: no cover

    async def handle(self, request: Request, exc: Exception) -> Response:
        resolution = self.resolve(exc, endpoint_scope(request))
        return await resolution.handler(request, exc)

    def install(self, app: FastAPI) -> None:
        """Route every exception the app can see through this chain.

        Starlette keys handlers by class, so the chain is registered for each
        root the framework treats differently. ``Exception`` ends up in the
        outermost server-error middleware, which re-raises after responding.
        """
        for kind in (CoffeeShopError, StarletteHTTPException, RequestValidationError, Exception):
            app.add_exception_handler(kind, self.handle)

    # -- tiers ---------------------------------------------------------------

    def _endpoint_handler(self, exc: Exception, scope: str | None) -> Handler | None:
        if scope is None or scope not in self._endpoint_handlers:
            return None
        return _find_handler(self._endpoint_handlers[scope], exc)

    def _global_handler(self, exc: Exception, scope: str | None) -> Handler | None:
        return _find_handler(self._global_handlers, exc)

    def _declared_status_handler(self, exc: Exception, scope: str | None) -> Handler | None:
        if isinstance(getattr(type(exc), "status_code", None), int):
            return self._render_declared_status
        return None

    def _fallback_handler(self, exc: Exception, scope: str | None) -> Handler | None:
        return self._render_fallback

    # -- generic envelope ----------------------------------------------------

    async def _render_declared_status(self, request: Request, exc: Exception) -> Response:
        status_code: int = type(exc).status_code  # type: ignore[attr-defined]
        logger.warning(
            "request_failed",
            error_kind=type(exc).__name__,
            status=status_code,
            path=request.url.path,
        )
        return self.generic_error_response(request, exc, status_code)

    async def _render_fallback(self, request: Request, exc: Exception) -> Response:
        if isinstance(exc, StarletteHTTPException):
            status_code = exc.status_code
            headers = exc.headers
        elif isinstance(exc, RequestValidationError):
            status_code = 400
            headers = None
        else:
            logger.error(
                "unhandled_exception",
                path=request.url.path,
                method=request.method,
                exc_info=exc,
            )
            return self.generic_error_response(request, exc, 500)

        logger.warning(
            "request_failed",
            error_kind=type(exc).__name__,
            status=status_code,
            path=request.url.path,
        )
        return self.generic_error_response(request, exc, status_code, headers=headers)

    def generic_error_response(
        self,
        request: Request,
        exc: Exception,
        status_code: int,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        """Render ``{timestamp, status, error, message, path}`` for ``exc``.

        The violations of a validation failure are never walked unless
        error_include_binding_errors is on.
        """
        body = GenericErrorResponse(
            timestamp=datetime.now(UTC),
            status=status_code,
            error=_reason_phrase(status_code),
            message=self._message(exc),
            path=request.url.path,
        )
        if self._settings.error_include_binding_errors and isinstance(exc, ValidationFailure):
            body.errors = [
                FieldErrorDetail(field=v.field, rule=v.rule, message=v.message)
                for v in exc.violations
            ]
        if self._settings.error_include_stacktrace:
            body.trace = "".join(traceback.format_exception(exc))
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(mode="json", exclude_none=True),
            headers=headers,
        )

    def _message(self, exc: Exception) -> str:
        if not self._settings.error_include_message:
            return NO_MESSAGE
        if isinstance(exc, CoffeeShopError):
            return exc.message
        if isinstance(exc, StarletteHTTPException):
            return str(exc.detail)
        return str(exc) or NO_MESSAGE


async def validation_message_handler(request: Request, exc: GlobalValidationError) -> Response:
    """Global handler for JSON validation failures: ``{"message": <violations>}``."""
    logger.warning(
        "validation_failed",
        path=request.url.path,
        violations=[f"{v.field}:{v.rule}" for v in exc.violations],
    )
    return JSONResponse(status_code=400, content=MessageResponse(message=exc.message).model_dump())


def build_handler_chain(settings: Settings) -> ExceptionHandlerChain:
    """Chain with the handlers shared by every endpoint."""
    chain = ExceptionHandlerChain(settings)
    chain.add_global_handler(
        GlobalValidationError,
        validation_message_handler,  # type: ignore[arg-type]
    )
    return chain
