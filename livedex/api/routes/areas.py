"""Manual area search."""

from fastapi import APIRouter, Depends, HTTPException, Query

from livedex.api.dependencies import get_live_service
from livedex.api.models import AreaMatchResponse
from livedex.services.live_context import LiveContextService

router = APIRouter(prefix="/areas")


@router.get("/match", response_model=AreaMatchResponse)
def match_area(
    q: str = Query(..., description="Area name as typed or read from the HUD"),
    region: str | None = Query(None, description="Region to show when the name exists in several"),
    service: LiveContextService = Depends(get_live_service),
):
    """Resolve a typed area name with the live matcher and group its encounters."""
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")

    match, area = service.match_area(q, region)
    if match is None or area is None:
        raise HTTPException(status_code=404, detail=f"No area matches '{q}'")

    if region and region.strip().lower() not in {r.lower() for r in area.regions}:
        raise HTTPException(
            status_code=404,
            detail=f"'{match.canonical_map_name}' does not exist in region '{region}'",
        )

    return AreaMatchResponse.from_area(q, match, area)
