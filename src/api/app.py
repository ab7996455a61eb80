"""FastAPI application factory."""

import base64
import logging
import secrets
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from config.settings import settings
from src.api.routes import router
from src.calculators.schedule_loader import load_registered_schedules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: build the schedule registry once. Shutdown: log only."""
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting up...")

    app.state.schedules = load_registered_schedules(settings.schedules_file)
    logger.info("Schedules available: %s", ", ".join(sorted(app.state.schedules)))

    yield

    logger.info("Shutting down...")


UNAUTHORIZED = Response(
    content="Unauthorized",
    status_code=401,
    headers={"WWW-Authenticate": "Basic"},
)


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Enforce HTTP Basic Auth against the configured credentials."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        auth = request.headers.get("Authorization")
        if not auth or not auth.startswith("Basic "):
            return UNAUTHORIZED
        try:
            username, password = base64.b64decode(auth[6:]).decode().split(":", 1)
        except ValueError:
            return UNAUTHORIZED

        user_ok = secrets.compare_digest(username.encode(), settings.auth_username.encode())
        pass_ok = secrets.compare_digest(password.encode(), settings.auth_password.encode())
        if user_ok and pass_ok:
            return await call_next(request)
        return UNAUTHORIZED


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="HECS Repayment Calculator", lifespan=lifespan)
    if settings.auth_enabled:
        app.add_middleware(BasicAuthMiddleware)
    app.include_router(router)
    return app
