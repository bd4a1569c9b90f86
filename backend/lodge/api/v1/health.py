"""Health check endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lodge.api import deps
from lodge.core.config import Settings
from lodge.core.dates import format_local_date, today

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", summary="Service health status")
async def healthcheck(
    session: deps.SessionDep,
    settings: Annotated[Settings, Depends(deps.get_app_settings)],
) -> dict[str, str]:
    """Report service metadata, the local business date and database reachability."""
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "service": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.now(UTC).isoformat(),
        "timezone": settings.local_timezone,
        "local_date": format_local_date(today(settings.local_timezone)),
        "database": database,
    }
