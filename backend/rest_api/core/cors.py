"""
CORS for the web and mobile frontends.

Origins come from ALLOWED_ORIGINS (localhost dev ports when unset). Retry-After
is exposed so the checkout page can back off while the gateway circuit is open.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings


def configure_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Accept-Language", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=0 if settings.environment == "development" else 600,
    )
