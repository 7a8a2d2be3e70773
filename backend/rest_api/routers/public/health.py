"""
Health endpoints.

/api/health answers without touching anything (load balancer liveness).
/api/health/detailed pings the database, reports whether Paystack is
configured and exposes the gateway circuit breaker.
"""

import asyncio

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal, engine
from shared.utils.health import HealthStatus, overall_status, probe
from rest_api.services.payments.circuit_breaker import CircuitState, get_all_breaker_stats


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    return {
        "status": HealthStatus.HEALTHY.value,
        "service": "rest-api",
        "environment": settings.environment,
    }


def _ping_database() -> dict:
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
    return {"dialect": engine.dialect.name}


def _paystack_configuration() -> dict:
    if not settings.paystack_secret_key:
        raise RuntimeError("PAYSTACK_SECRET_KEY is not set")
    return {"baseUrl": settings.paystack_base_url}


@router.get("/health/detailed")
async def detailed_health_check():
    """
    503 when the database is unreachable. A missing Paystack key or an open
    breaker only degrades the service: planning keeps working.
    """
    database, paystack = await asyncio.gather(
        probe("database", _ping_database),
        probe("paystack", _paystack_configuration, timeout=1.0),
    )
    breakers = get_all_breaker_stats()
    breaker_open = any(stats["state"] != CircuitState.CLOSED.value for stats in breakers.values())

    status = overall_status([database], [paystack], degraded=breaker_open)
    body = {
        "service": "rest-api",
        "environment": settings.environment,
        "status": status.value,
        "dependencies": {result.component: result.to_dict() for result in (database, paystack)},
        "circuit_breakers": breakers,
    }

    if status == HealthStatus.UNHEALTHY:
        return JSONResponse(content=body, status_code=503)
    return body
