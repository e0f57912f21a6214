"""
FastAPI application factory.

* Registers rider routes under ``/api/v1`` and driver routes under
  ``/api/v1/driver``.
* Starts / stops the expired-code sweeper via lifespan events.
* Applies rate limiting and maps request-validation, integrity and
  rate-limit failures to 400 / 409 / 429.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError

from src.api.middleware import limiter
from src.api.routes import drivers, health, riders
from src.config import settings
from src.infrastructure.redis_client import close_redis
from src.workers import sweeper as _sweeper

logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the code sweeper on startup; stop it on shutdown."""
    await _sweeper.start_sweep_loop()
    yield
    await _sweeper.stop_sweep_loop()
    if settings.verification_backend == "redis":
        await close_redis()


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"detail": f"{field}: {message}" if field else message},
    )


async def _integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Resource already exists"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ridewave API",
        description=(
            "Ride-hailing backend: phone / email OTP onboarding for riders "
            "and drivers, session tokens, ride lifecycle updates and "
            "Haversine-based fare quotes."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)

    # Routers
    app.include_router(riders.router, prefix="/api/v1")
    app.include_router(drivers.router, prefix="/api/v1")
    app.include_router(health.router)

    return app
