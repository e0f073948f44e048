"""Observability module: structured logging, request IDs, metrics, health checks."""

from .logging_config import configure_logging, get_logger
from .metrics import (
    document_operations_total,
    idempotency_requests_total,
    storage_errors_total,
    storage_reconciliation_total,
)
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "document_operations_total",
    "idempotency_requests_total",
    "storage_errors_total",
    "storage_reconciliation_total",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
