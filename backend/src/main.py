"""Document Ingestion Backend - Main FastAPI Application

This module creates and configures the FastAPI application:
- Document API routers (self-service and admin) under /api/v1
- Middleware (request ID correlation, CORS)
- Exception handlers rendering {"error": kind, "message": text}
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from domain.errors import DocumentPipelineError

# Observability
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router

# Domain Routers
from documents.dependencies import get_storage
from documents.router import admin_router as documents_admin_router
from documents.router import router as documents_router

# Configure logging
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: optionally verify the documents bucket exists (fail fast)
    - Shutdown: log only; connections are pooled per process
    """
    logger.info("Document ingestion API starting up...")
    logger.info(f"Environment: {settings.ENV}")

    if settings.STORAGE_VERIFY_BUCKET_ON_STARTUP:
        await get_storage().verify_bucket_exists()

    yield

    logger.info("Document ingestion API shutting down...")


def _docs_enabled() -> bool:
    return settings.ENV != "production"


app = FastAPI(
    title="Document Ingestion API",
    description="Idempotent upload, versioning and lifecycle of user documents",
    version="0.1.0",
    docs_url="/docs" if _docs_enabled() else None,
    redoc_url="/redoc" if _docs_enabled() else None,
    openapi_url="/openapi.json" if _docs_enabled() else None,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(DocumentPipelineError)
async def document_pipeline_exception_handler(
    request: Request,
    exc: DocumentPipelineError
) -> JSONResponse:
    """Render domain errors with their own status code and kind."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{exc.kind} on {request.method} {request.url.path}: {exc.message}",
        extra={"method": request.method, "path": request.url.path, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _error_body(kind: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"error": kind, "message": message, **extra}


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Malformed body, path or query: 422 with pydantic's field errors."""
    logger.info(
        f"Rejected malformed request {request.method} {request.url.path}",
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            "validation_error",
            "Request body or parameters are malformed",
            details=jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Database failures never leak SQL or driver messages to the caller."""
    logger.error(f"Database failure on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "The document store is temporarily unavailable"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "Unexpected server error"),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics, ready)
app.include_router(observability_router)

# Documents
app.include_router(documents_router, prefix=API_PREFIX)
app.include_router(documents_admin_router, prefix=API_PREFIX)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "Document Ingestion API",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs" if _docs_enabled() else None,
    }


def create_app() -> FastAPI:
    """Application factory returning the configured instance (tests, ASGI servers)."""
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENV == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
