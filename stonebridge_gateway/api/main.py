"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException
from starlette.responses import Response

from stonebridge_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from stonebridge_gateway.api.routes import accounts, loans, housing
from stonebridge_gateway.domain.exceptions import DomainException, OutOfRangeError
from stonebridge_gateway.infrastructure.observability.logging import setup_logging
from stonebridge_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    content = {"error": str(exc)}
    if isinstance(exc, OutOfRangeError):
        content["minAmount"] = f"{exc.min_amount:.2f}"
        content["maxAmount"] = f"{exc.max_amount:.2f}"
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.error(
        f"Unhandled error: {exc}",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", "unknown"), "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors: 400 with the first problem spelled out"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Stonebridge Trust Gateway",
        description="Accounts, transfers, loan and mortgage applications",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Every error leaves the service as {"error": message}
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(accounts.router, prefix="/api", tags=["accounts"])
    app.include_router(loans.router, prefix="/api", tags=["loans"])
    app.include_router(housing.router, prefix="/api", tags=["housing"])

    return app


app = create_app()
