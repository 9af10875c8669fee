"""Storefront FastAPI application.

Builds the process-wide ``Storefront`` container in the lifespan handler and
exposes the catalogue, cart and trace log over HTTP.

Usage:
    uvicorn storefront.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from catalogue.api import product_router
from ordering.api import cart_router
from storefront.api import register_exception_handlers, trace_router
from storefront.container import Storefront
from storefront.errors import StorefrontError
from storefront.logging import add_context, clear_context, configure_logging
from storefront.settings import Settings, get_settings

logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None, storefront: Storefront | None = None) -> FastAPI:
    """Create the application.

    A prebuilt ``storefront`` is used as-is (tests inject failing stores this
    way); otherwise one is built from ``settings`` when the app starts.
    """
    settings = settings or (storefront.settings if storefront else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings)
        container = storefront or await Storefront.create(settings)
        app.state.storefront = container

        # A cart that fails to initialize leaves the catalogue usable;
        # GET /cart retries initialization.
        try:
            await container.cart.initialize()
        except StorefrontError as exc:
            logger.warning("Cart unavailable at startup", error=str(exc))

        logger.info("Storefront started", env=settings.env, database=settings.database_url)
        try:
            yield
        finally:
            await container.close()

    app = FastAPI(
        title="Storefront API",
        description="Product catalogue, session cart and the SQL trace log",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id and path to every log line emitted while handling the request."""
        clear_context()
        add_context(request_id=uuid.uuid4().hex, method=request.method, path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_context()

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(trace_router)
    register_exception_handlers(app)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health() -> dict:
        container: Storefront = app.state.storefront
        return {
            "status": "ok",
            "env": settings.env,
            "cart": container.cart.state.value,
            "trace_enabled": container.trace_log.is_enabled,
        }

    return app


app = create_app()
