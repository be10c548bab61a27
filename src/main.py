# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import settings
from src.database import SessionLocal
from src.exceptions import AccessControlError
from src.schemas.common import HealthResponse
from src.services import reconciliation_service
from src.services.menu_service import AccessCaches

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    if settings.seed_on_startup:
        logger.info("Seeding default roles and permissions...")
        db = SessionLocal()
        try:
            reconciliation_service.seed_defaults(db)
        finally:
            db.close()

    yield

    app.state.access_caches.invalidate()


def register_exception_handlers(app: FastAPI) -> None:
    """Render access-control errors as ``{"_error": code, "message": ...}``."""

    @app.exception_handler(AccessControlError)
    async def access_control_error_handler(
        request: Request, exc: AccessControlError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app = FastAPI(
    title="Scanly Access Control",
    description="Scope-based authorization core for QR codes and short URLs",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.access_caches = AccessCaches.create(settings.path_cache_ttl_seconds)
register_exception_handlers(app)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
