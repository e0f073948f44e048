"""Operational endpoints: Prometheus scrape target, health and readiness probes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from database import get_db
from documents.dependencies import get_storage
from domain.documents.ports.object_storage_port import ObjectStoragePort
from .health import (
    ComponentHealth,
    HealthStatus,
    check_database_health,
    check_object_storage_health,
    check_redis_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


def _component_view(component: ComponentHealth) -> Dict[str, Any]:
    return {
        "status": component.status.value,
        "message": component.message,
        "latency_ms": component.latency_ms,
    }


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Prometheus text exposition of every registered counter."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", summary="Dependency health")
async def health_check(
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_storage),
):
    """Probe database, Redis and object storage.

    200 while healthy or degraded, 503 once any dependency is unhealthy.
    """
    components = {
        "database": check_database_health(db),
        "redis": check_redis_health(),
        "object_storage": await check_object_storage_health(storage),
    }
    overall = get_overall_health(components)

    return JSONResponse(
        status_code=(
            status.HTTP_503_SERVICE_UNAVAILABLE
            if overall == HealthStatus.UNHEALTHY
            else status.HTTP_200_OK
        ),
        content={
            "status": overall.value,
            "components": {name: _component_view(c) for name, c in components.items()},
        },
    )


@router.get("/ready", summary="Readiness probe")
def readiness_check(db: Session = Depends(get_db)):
    """Ready as soon as the database answers; storage and Redis are not required."""
    database = check_database_health(db)
    if database.status != HealthStatus.HEALTHY:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "message": database.message},
        )
    return {"status": "ready", "message": "Accepting traffic"}
