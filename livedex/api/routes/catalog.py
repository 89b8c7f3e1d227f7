"""Catalog hot reload."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from livedex.api.dependencies import get_live_service
from livedex.api.models import CatalogReloadRequest, CatalogReloadResponse
from livedex.api.startup_state import CatalogReport, get_startup_state
from livedex.core.catalog import CatalogError
from livedex.services.live_context import LiveContextService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog")


@router.post("/reload", response_model=CatalogReloadResponse)
def reload_catalog(
    request: CatalogReloadRequest | None = None,
    service: LiveContextService = Depends(get_live_service),
):
    """Swap in a freshly loaded catalog. On failure the current one stays."""
    path = request.path if request else None
    try:
        catalog = service.reload_catalog(path)
    except CatalogError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    get_startup_state().record_catalog(CatalogReport.from_store(service.store))

    return CatalogReloadResponse(
        areas=len(catalog),
        regions=catalog.regions,
        species=len(catalog.species_names()),
        generation=service.store.generation,
    )
