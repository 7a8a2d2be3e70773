"""
Dependency probes for the health endpoints.

A probe runs one blocking check (a database ping, a configuration lookup) in a
worker thread with a deadline and reports it as a ProbeResult. Probes never
raise: a failure or a timeout is a result like any other.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ProbeResult:
    component: str
    status: HealthStatus
    latency_ms: float
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "status": self.status.value,
            "latencyMs": round(self.latency_ms, 2),
        }
        if self.error:
            body["error"] = self.error
        body.update(self.details)
        return body


async def probe(
    component: str,
    check: Callable[[], dict[str, Any] | None],
    timeout: float = 3.0,
) -> ProbeResult:
    """Run `check` off the event loop; its returned dict becomes the details."""
    started = time.perf_counter()

    def elapsed() -> float:
        return (time.perf_counter() - started) * 1000

    try:
        details = await asyncio.wait_for(asyncio.to_thread(check), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Health probe timed out", component=component, timeout=timeout)
        return ProbeResult(component, HealthStatus.UNHEALTHY, elapsed(), error=f"timeout after {timeout}s")
    except Exception as exc:
        logger.warning("Health probe failed", component=component, error=str(exc))
        return ProbeResult(component, HealthStatus.UNHEALTHY, elapsed(), error=type(exc).__name__)

    return ProbeResult(component, HealthStatus.HEALTHY, elapsed(), details=details or {})


def overall_status(
    required: Iterable[ProbeResult],
    optional: Iterable[ProbeResult] = (),
    degraded: bool = False,
) -> HealthStatus:
    """
    Unhealthy if any required probe failed; degraded if an optional probe
    failed or the caller flags degradation (an open circuit breaker).
    """
    if not all(result.ok for result in required):
        return HealthStatus.UNHEALTHY
    if degraded or not all(result.ok for result in optional):
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
