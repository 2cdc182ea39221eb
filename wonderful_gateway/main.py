"""
Wonderful Payments Gateway: open-banking checkout for a storefront.

Hands payers off to the Wonderful Payments hosted flow with an encrypted
payment request, then reconciles orders from the provider's status webhook.

Start the server:
    uvicorn wonderful_gateway.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wonderful_gateway.api.checkout import router as checkout_router
from wonderful_gateway.api.health import router as health_router
from wonderful_gateway.api.orders import router as orders_router
from wonderful_gateway.api.webhooks import router as webhooks_router
from wonderful_gateway.config import settings
from wonderful_gateway.database import init_db

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    await init_db()
    yield


app = FastAPI(
    title="Wonderful Payments Gateway",
    description=(
        "Account to account bank payments, powered by Open Banking. "
        "Builds encrypted hosted-checkout redirects and reconciles orders "
        "from provider webhooks with idempotent state transitions."
    ),
    version=settings.plugin_version,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(checkout_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
