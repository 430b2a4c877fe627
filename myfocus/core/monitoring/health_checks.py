"""
Health check endpoints' logic with timings.
"""

import time
from typing import Dict, Any, Optional
import structlog
from sqlalchemy import text

from myfocus.core.settings import settings
from myfocus.core.config import utcnow
from myfocus.db.session import engine

logger = structlog.get_logger(__name__)


class HealthCheckResult:
    """Result of a health check with timing and status information."""
    
    def __init__(self, service: str, healthy: bool, duration_ms: float, 
                 details: Optional[Dict[str, Any]] = None, error: Optional[str] = None):
        self.service = service
        self.healthy = healthy
        self.duration_ms = duration_ms
        self.details = details or {}
        self.error = error
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service,
            "healthy": self.healthy,
            "duration_ms": round(self.duration_ms, 2),
            "details": self.details,
            "error": self.error,
        }


def check_database() -> HealthCheckResult:
    """Run a trivial query against the configured database."""
    start = time.time()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return HealthCheckResult("database", True, (time.time() - start) * 1000)
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return HealthCheckResult("database", False, (time.time() - start) * 1000, error=str(e))


async def basic_health_check() -> Dict[str, Any]:
    """Liveness: the process is up."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "timestamp": utcnow().isoformat(),
    }


async def readiness_check() -> Dict[str, Any]:
    """Readiness: dependencies are reachable."""
    checks = [check_database()]
    ready = all(check.healthy for check in checks)
    return {
        "status": "ready" if ready else "not_ready",
        "checks": [check.to_dict() for check in checks],
        "timestamp": utcnow().isoformat(),
    }
