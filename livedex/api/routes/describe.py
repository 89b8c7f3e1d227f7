"""Ability and move descriptions."""

from fastapi import APIRouter, Depends, HTTPException

from livedex.api.dependencies import get_description_service
from livedex.api.models import DescriptionResponse
from livedex.services.descriptions import DescriptionService

router = APIRouter(prefix="/describe")


@router.get("/{kind}/{name}", response_model=DescriptionResponse)
def describe(kind: str, name: str, service: DescriptionService = Depends(get_description_service)):
    try:
        description = service.describe(kind, name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    if description is None:
        raise HTTPException(status_code=404, detail=f"No {kind} named '{name}'")
    return DescriptionResponse.from_description(description)
