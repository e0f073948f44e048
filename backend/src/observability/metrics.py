"""Prometheus metrics for the document ingestion pipeline.

Defines operational counters for monitoring and alerting.
"""

from prometheus_client import Counter

# Document lifecycle operations
document_operations_total = Counter(
    "documents_operations_total",
    "Total document pipeline operations",
    ["operation", "outcome"]  # operation: upload_url|complete|download_url|delete|review, outcome: success|error
)

# Idempotency guard outcomes
idempotency_requests_total = Counter(
    "documents_idempotency_requests_total",
    "Idempotency guard decisions",
    ["scope", "outcome"]  # outcome: executed|replayed|race_replayed|conflict
)

# Storage gateway failures
storage_errors_total = Counter(
    "documents_storage_errors_total",
    "Object storage gateway failures",
    ["operation"]  # operation: sign_upload|sign_download|object_info|delete
)

# Reconciliation sweep
storage_reconciliation_total = Counter(
    "documents_storage_reconciliation_total",
    "Physical deletions retried by the reconciliation sweep",
    ["outcome"]  # outcome: deleted|failed
)
