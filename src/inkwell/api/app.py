"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from inkwell import __version__
from inkwell.api.errors import inkwell_error_handler
from inkwell.api.middleware import CsrfMiddleware, SecurityHeadersMiddleware
from inkwell.api.rate_limit import limiter, rate_limit_exceeded_handler
from inkwell.api.routes import auth, installations
from inkwell.db.connection import close_db
from inkwell.errors import InkwellError

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    log.info("Inkwell API starting", version=__version__)
    yield
    await close_db()
    log.info("Inkwell API stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="Inkwell API", version=__version__, lifespan=lifespan)

    app.state.limiter = limiter
    app.add_exception_handler(InkwellError, inkwell_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Added last runs first: headers wrap every response, CSRF included
    app.add_middleware(CsrfMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(auth.router)
    app.include_router(installations.router)

    @app.get("/health", tags=["meta"])
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return app
