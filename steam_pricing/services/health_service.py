"""
Health check service for monitoring application status.

Provides detailed health information about all system components.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from steam_pricing.services.price_cache import PriceCache
from steam_pricing.utils.config_loader import AppConfig

logger = logging.getLogger(__name__)

# "configured" means set up but not probed; it does not degrade the report
PASSING_STATUSES = ("ok", "configured")


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: str  # "ok", "configured", "degraded", "error"
    message: Optional[str] = None
    latency_ms: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
        }
        if self.message:
            result["message"] = self.message
        if self.latency_ms is not None:
            result["latency_ms"] = round(self.latency_ms, 2)
        if self.details:
            result.update(self.details)
        return result


@dataclass
class HealthReport:
    """Complete health report for the application."""

    status: str  # "healthy", "degraded", "unhealthy"
    timestamp: str
    version: str
    components: Dict[str, ComponentHealth] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "version": self.version,
            "components": {
                name: comp.to_dict()
                for name, comp in self.components.items()
            },
        }


class HealthService:
    """Service for checking application health."""

    VERSION = "1.0.0"

    def __init__(self, config: AppConfig, price_cache: Optional[PriceCache] = None):
        self.config = config
        self.price_cache = price_cache

    def get_full_health(self) -> HealthReport:
        """
        Get complete health report for all components.

        Returns:
            HealthReport with status of all components.
        """
        components = {
            "storage": self._check_storage(),
            "catalog": self._check_upstream("catalog", self.config.catalog.store_url),
            "rates": self._check_upstream("rates", self.config.rates.base_url),
            "cache": self._check_cache(),
        }

        statuses = [c.status for c in components.values()]
        if all(s in PASSING_STATUSES for s in statuses):
            overall_status = "healthy"
        elif any(s == "error" for s in statuses):
            overall_status = "unhealthy"
        else:
            overall_status = "degraded"

        return HealthReport(
            status=overall_status,
            timestamp=datetime.utcnow().isoformat() + "Z",
            version=self.VERSION,
            components=components,
        )

    def _check_storage(self) -> ComponentHealth:
        """Check that the record store is reachable and populated."""
        if self.price_cache is None:
            return ComponentHealth(name="storage", status="error", message="Price cache not initialized")

        start = time.time()
        try:
            count = len(self.price_cache.store)
        except Exception as e:
            logger.warning(f"Storage health check failed: {e}")
            return ComponentHealth(name="storage", status="error", message=str(e))
        latency = (time.time() - start) * 1000

        if count == 0:
            return ComponentHealth(
                name="storage",
                status="degraded",
                message="No price records loaded",
                latency_ms=latency,
            )
        return ComponentHealth(
            name="storage",
            status="ok",
            latency_ms=latency,
            details={"records": count},
        )

    def _check_upstream(self, name: str, url: str) -> ComponentHealth:
        """Report upstream configuration; reachability is not probed."""
        if not url:
            return ComponentHealth(name=name, status="error", message=f"No {name} URL configured")
        return ComponentHealth(
            name=name,
            status="configured",
            message="URL configured, reachability not checked",
            details={"url": url},
        )

    def _check_cache(self) -> ComponentHealth:
        """Report price cache counters."""
        if self.price_cache is None:
            return ComponentHealth(name="cache", status="degraded", message="Price cache not initialized")

        stats = self.price_cache.get_stats()
        status = "degraded" if stats["storage_faults"] else "ok"
        return ComponentHealth(name="cache", status=status, details=stats)
