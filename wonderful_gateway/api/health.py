"""Liveness endpoint."""

from fastapi import APIRouter

from wonderful_gateway.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "provider": settings.provider,
        "merchant_key_configured": bool(settings.merchant_key.get_secret_value()),
    }
