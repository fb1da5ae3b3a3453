"""Liveness and readiness of the API, its database and its in-memory stores."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_store_registry
from db.session import get_async_session
from services.store_registry import StoreRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Overall status plus what this process currently holds in memory."""

    status: str
    database: str
    active_stores: int
    pending_analytics: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    registry: StoreRegistry = Depends(get_store_registry),
) -> HealthResponse:
    """
    Report whether the database answers.

    An unreachable database marks the service degraded; the check itself still
    answers 200.
    """
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
        active_stores=len(registry),
        pending_analytics=registry.analytics.pending_count,
    )
