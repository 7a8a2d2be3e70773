"""
Startup and shutdown of the REST API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine
from shared.config.settings import settings
from shared.config.logging import setup_logging, rest_api_logger as logger
from rest_api.models import Base


def check_configuration() -> None:
    """
    Refuse to start in production with unsafe settings; elsewhere only warn.

    Raises:
        RuntimeError: production environment with configuration problems
    """
    problems = settings.validate_production_secrets()
    for problem in problems:
        logger.error("Configuration error", error=problem)

    if problems and settings.environment == "production":
        raise RuntimeError("Refusing to start: " + "; ".join(problems))

    if not settings.paystack_secret_key:
        # Verification answers 500 and webhooks are rejected until it is set
        logger.warning("PAYSTACK_SECRET_KEY is not set; payments cannot be verified")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_configuration()

    Base.metadata.create_all(bind=engine)
    logger.info(
        "REST API started",
        port=settings.rest_api_port,
        env=settings.environment,
        database=engine.dialect.name,
    )

    yield

    engine.dispose()
    logger.info("REST API stopped")
