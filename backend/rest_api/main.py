"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.security.rate_limit import limiter
from rest_api.core.cors import configure_cors
from rest_api.core.errors import register_exception_handlers
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.public import health_router
from rest_api.routers.payment import router as payment_router
from rest_api.routers.webhooks import router as webhooks_router
from rest_api.routers.orders import router as orders_router
from rest_api.routers.planning import router as planning_router


app = FastAPI(
    title="Talier REST API",
    description="Meal planning, checkout and Paystack payment reconciliation",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug and settings.environment != "production",
)

# Rate limiting
app.state.limiter = limiter
register_exception_handlers(app)

# Middlewares (last added is outermost)
register_middlewares(app)
app.add_middleware(CorrelationIdMiddleware)
configure_cors(app)

app.include_router(health_router)
app.include_router(payment_router)
app.include_router(webhooks_router)
app.include_router(orders_router)
app.include_router(planning_router)
