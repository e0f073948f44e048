"""Health check utilities for the document pipeline.

Each probe times one round trip to a dependency and reports it as a
ComponentHealth. A failing database or storage gateway makes the service
unhealthy; a failing Redis only degrades it, since Redis carries nothing but
the reconciliation sweep.
"""

import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

import redis
from sqlalchemy import text
from sqlalchemy.orm import Session

from config import get_settings
from domain.documents.ports.object_storage_port import ObjectStoragePort
from .logging_config import get_logger

logger = get_logger(__name__)

# Key probed with HEAD; absence is the expected healthy answer
STORAGE_PROBE_KEY = ".health-probe"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Outcome of one dependency probe."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def check_database_health(db: Session) -> ComponentHealth:
    """Run SELECT 1 on the request's session."""
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database probe failed: {e}", exc_info=True)
        return ComponentHealth(HealthStatus.UNHEALTHY, f"Database error: {e}")
    return ComponentHealth(HealthStatus.HEALTHY, "Database reachable", _elapsed_ms(started))


def check_redis_health() -> ComponentHealth:
    """PING the Celery broker."""
    started = time.perf_counter()
    try:
        redis.from_url(get_settings().REDIS_URL, socket_timeout=2).ping()
    except Exception as e:
        logger.warning(f"Redis probe failed: {e}")
        return ComponentHealth(HealthStatus.DEGRADED, f"Redis error: {e}")
    return ComponentHealth(HealthStatus.HEALTHY, "Redis reachable", _elapsed_ms(started))


async def check_object_storage_health(storage: ObjectStoragePort) -> ComponentHealth:
    """HEAD a probe key through the storage gateway."""
    started = time.perf_counter()
    try:
        await storage.get_object_info(STORAGE_PROBE_KEY)
    except Exception as e:
        logger.error(f"Object storage probe failed: {e}", exc_info=True)
        return ComponentHealth(HealthStatus.UNHEALTHY, f"Object storage error: {e}")
    return ComponentHealth(HealthStatus.HEALTHY, "Object storage reachable", _elapsed_ms(started))


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Worst component status wins."""
    statuses = {component.status for component in components.values()}
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
