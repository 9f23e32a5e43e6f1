"""Boutique FastAPI application.

Usage:
    boutique serve --host 0.0.0.0 --port 8000
or:
    uvicorn boutique.infrastructure.api.app:create_app --factory
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from boutique.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    ValidationError,
)
from boutique.infrastructure.api.auth import AdminGate
from boutique.infrastructure.api.routes import router
from boutique.infrastructure.bootstrap import Services, build_services

logger = structlog.get_logger(__name__)


def create_app(services: Services | None = None) -> FastAPI:
    services = services or build_services()

    app = FastAPI(
        title="Boutique Orders API",
        description="Orders and variant stock for the boutique storefront",
    )
    app.state.services = services
    app.state.admin_gate = AdminGate(services.settings.api_tokens)

    _register_exception_handlers(app)
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------
def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def request_invalid(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ValidationError)
    async def validation_failed(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(EntityNotFoundError)
    async def not_found(request: Request, exc: EntityNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(DomainException)
    async def domain_error(request: Request, exc: DomainException):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(
            "unhandled_api_error", method=request.method, path=request.url.path
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
