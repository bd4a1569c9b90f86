"""HTTP surface of the lodge service."""

from fastapi import APIRouter

from lodge.api.v1 import router as v1_router
from lodge.core.config import get_settings

api_router = APIRouter()
api_router.include_router(v1_router, prefix=get_settings().api_v1_prefix)

__all__ = ["api_router"]
