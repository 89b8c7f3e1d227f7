"""Live feed endpoints.

Read-only views of what the route and battle feeds currently resolve to,
plus the controls a UI needs (resync on focus, forced reconnect, enable).
"""

import logging

from fastapi import APIRouter, Depends

from livedex.api.dependencies import get_live_service, parse_feed
from livedex.api.models import (
    FeedEnabledRequest,
    FeedStatusResponse,
    LiveBattleResponse,
    LiveRouteResponse,
    ResyncResponse,
)
from livedex.api.startup_state import get_startup_state
from livedex.services.live_context import LiveContextService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/live")


@router.get("/route", response_model=LiveRouteResponse)
def get_live_route(service: LiveContextService = Depends(get_live_service)):
    """Current route feed resolution with grouped encounters."""
    return LiveRouteResponse.from_view(service.route_view())


@router.get("/battle", response_model=LiveBattleResponse)
def get_live_battle(service: LiveContextService = Depends(get_live_service)):
    """Current battle feed resolution."""
    return LiveBattleResponse.from_view(service.battle_view())


@router.get("/{feed}/status", response_model=FeedStatusResponse)
def get_feed_status(feed: str, service: LiveContextService = Depends(get_live_service)):
    return FeedStatusResponse(**service.client(parse_feed(feed)).status())


@router.post("/resync", response_model=ResyncResponse)
def resync(service: LiveContextService = Depends(get_live_service)):
    """Consumer regained focus/visibility: reconnect feeds that are down or stale."""
    reconnected = service.notify_focus_regained()
    return ResyncResponse(reconnected=[k.value for k in reconnected])


@router.post("/{feed}/reconnect", response_model=FeedStatusResponse)
def reconnect_feed(feed: str, service: LiveContextService = Depends(get_live_service)):
    """Forced reconnect; clears the feed's cached payload and panel."""
    kind = parse_feed(feed)
    service.reconnect(kind)
    logger.info("[API] Forced reconnect of %s feed", kind.value)
    return FeedStatusResponse(**service.client(kind).status())


@router.put("/{feed}/enabled", response_model=FeedStatusResponse)
def set_feed_enabled(
    feed: str,
    request: FeedEnabledRequest,
    service: LiveContextService = Depends(get_live_service),
):
    kind = parse_feed(feed)
    service.set_feed_enabled(kind, request.enabled)
    get_startup_state().record_feeds(service.feeds_enabled())
    return FeedStatusResponse(**service.client(kind).status())
