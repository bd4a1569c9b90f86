"""Versioned API router."""

from fastapi import APIRouter

from . import bookings, health, pricing, rooms

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(pricing.router)
router.include_router(bookings.router)
router.include_router(rooms.router)

__all__ = ["router"]
