"""
FastAPI application factory.

* Registers routes for auth, fares, bookings and admin.
* Maps domain errors to HTTP responses.
* Applies rate-limiting middleware.
* Releases the database and Redis pools on shutdown.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from airport_transfer.api.errors import register_exception_handlers
from airport_transfer.api.middleware import limiter
from airport_transfer.api.routes import admin, auth, bookings, fares
from airport_transfer.infrastructure import redis_client
from airport_transfer.infrastructure.database import engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Airport transfer API starting")
    yield
    await engine.dispose()
    await redis_client.close_pool()
    logger.info("Airport transfer API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Airport Transfer Booking API",
        description=(
            "Book point-to-point airport transfers at a fixed fare per "
            "vehicle class, track their status, and let administrators "
            "confirm, complete, cancel or delete trips."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(fares.router, prefix="/api/v1")
    app.include_router(bookings.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
