"""Analytics event listing for the dashboard."""
from fastapi import APIRouter, Depends

from api.dependencies import get_bookmark_store
from api.helpers import unwrap
from schemas.analytics import AnalyticsEventResponse
from services.bookmark_store import BookmarkStore

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/", response_model=list[AnalyticsEventResponse])
async def list_events(
    store: BookmarkStore = Depends(get_bookmark_store),
) -> list[AnalyticsEventResponse]:
    """
    List the caller's events, newest first.

    Each event carries its bookmark's category and status (null once deleted);
    aggregation is left to the client.
    """
    return unwrap(await store.fetch_analytics())
