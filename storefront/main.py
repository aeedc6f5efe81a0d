"""Storefront API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map StorefrontError → envelope responses
    - CORS configured from settings (not hardcoded)
    - Every request is logged once with its request id (X-Request-Id echoed)
    - Storage directories and the service container built on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: cleanup of outbound HTTP clients on shutdown
    - Services stored on app.state and injected through get_services, so tests
      override one dependency instead of patching module globals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.error_handlers import register_error_handlers
from storefront.api.routes import cart, health, orders, products, tokens, users
from storefront.config import get_settings
from storefront.infrastructure.observability import log_requests, setup_logging
from storefront.services.container import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    services = build_services(settings)
    services.store.ensure_collections()
    app.state.services = services
    logger.info("Storefront API started")
    yield
    logger.info("Storefront API shutting down")
    await services.aclose()


app = FastAPI(
    title="Storefront API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(tokens.router)
app.include_router(products.router)
app.include_router(cart.router)
app.include_router(orders.router)

register_error_handlers(app)
