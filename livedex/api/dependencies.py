"""Request dependencies - services created by the app lifespan."""

from fastapi import HTTPException, Request

from livedex.core.types import FeedKind
from livedex.services.descriptions import DescriptionService
from livedex.services.live_context import LiveContextService


def get_live_service(request: Request) -> LiveContextService:
    service = getattr(request.app.state, "live", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Live context not started")
    return service


def get_description_service(request: Request) -> DescriptionService:
    service = getattr(request.app.state, "descriptions", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Description service not started")
    return service


def parse_feed(feed: str) -> FeedKind:
    """Path parameter -> FeedKind (400 on unknown feed)."""
    try:
        return FeedKind(feed.strip().lower())
    except ValueError:
        valid = ", ".join(k.value for k in FeedKind)
        raise HTTPException(status_code=400, detail=f"Unknown feed '{feed}' (expected {valid})") from None
