"""URL metadata preview for the bookmark form."""
from fastapi import APIRouter, Depends, Query
from pydantic import HttpUrl

from api.dependencies import get_current_identity
from core.auth import Identity
from schemas.metadata import UrlMetadata
from services.metadata_service import fetch_url_metadata

router = APIRouter(prefix="/metadata", tags=["metadata"])


@router.get("/", response_model=UrlMetadata)
async def get_url_metadata(
    url: HttpUrl = Query(..., description="Page to preview"),
    _identity: Identity = Depends(get_current_identity),
) -> UrlMetadata:
    """
    Fetch title, description and thumbnail for a URL.

    YouTube videos use oEmbed; other pages are read from their HTML. Failures are
    reported in ``error`` with a 200 so the form can still be filled by hand.
    """
    return await fetch_url_metadata(str(url))
