from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from coffee_shop.config import Settings, settings
from coffee_shop.db.session import shutdown
from coffee_shop.dependencies import DB
from coffee_shop.error_handlers import ExceptionHandlerChain, build_handler_chain
from coffee_shop.exceptions import InvalidStateTransitionError
from coffee_shop.logging import get_logger
from coffee_shop.middleware import RequestIDMiddleware
from coffee_shop.routers import coffee, order

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Code before yield runs on startup, after yield on shutdown."""
    logger.info("app_started")
    yield
    await shutdown()


async def health(db: DB) -> dict[str, str]:
    """Health check endpoint, verifies database connectivity.

    Returns 200 OK only if the database responds to a ping query.
    """
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}


def create_app(
    app_settings: Settings = settings,
    handler_chain: ExceptionHandlerChain | None = None,
) -> FastAPI:
    """Build the FastAPI app around an explicitly constructed handler chain.

    Without ``handler_chain`` the default one is built from ``app_settings``.
    Endpoint handlers owned by the routers are added to whichever chain is used.
    """
    chain = handler_chain or build_handler_chain(app_settings)
    chain.add_endpoint_handler(
        order.SCOPE,
        InvalidStateTransitionError,
        order.state_conflict_handler,  # type: ignore[arg-type]
    )

    app = FastAPI(title="coffee-shop", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    chain.install(app)
    app.state.handler_chain = chain

    app.include_router(coffee.router)
    app.include_router(order.router)
    app.add_api_route("/health", health, methods=["GET"])
    return app


app = create_app()
