"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, Field

from livedex.consumers.encounters import AreaView
from livedex.consumers.matching.result import STATUS_DISPLAY, LiveStatus
from livedex.core.types import ConnectionState, GroupedEncounter, MatchResult
from livedex.services.descriptions import Description
from livedex.services.live_context import LiveBattleView, LiveRouteView

# =============================================================================
# Engine outputs
# =============================================================================


class MatchResultModel(BaseModel):
    """Best catalog map for a piece of text."""

    region: str
    canonical_map_name: str
    raw_map_name: str
    score: float

    @classmethod
    def from_result(cls, match: MatchResult | None) -> "MatchResultModel | None":
        if match is None:
            return None
        return cls(
            region=match.region,
            canonical_map_name=match.canonical_map_name,
            raw_map_name=match.raw_map_name,
            score=match.score,
        )


class EncounterSummaryModel(BaseModel):
    method_label: str
    rarities: list[str]
    min_level: int | None = None
    max_level: int | None = None
    items: list[str]


class GroupedEncounterModel(BaseModel):
    """All encounter methods for one species in an area."""

    species_id: int | str | None = None
    species_name: str
    encounters: list[EncounterSummaryModel]

    @classmethod
    def from_grouped(cls, grouped: GroupedEncounter) -> "GroupedEncounterModel":
        return cls(
            species_id=grouped.species_id,
            species_name=grouped.species_name,
            encounters=[
                EncounterSummaryModel(
                    method_label=s.method_label,
                    rarities=list(s.rarities),
                    min_level=s.min_level,
                    max_level=s.max_level,
                    items=list(s.items),
                )
                for s in grouped.encounters
            ],
        )


# =============================================================================
# Live feeds
# =============================================================================


class LiveRouteResponse(BaseModel):
    """Current live route panel state."""

    status: LiveStatus
    status_text: str
    connection: ConnectionState
    raw_text: str | None = None
    cleaned_text: str | None = None
    confidence: float | None = None
    match: MatchResultModel | None = None
    region: str | None = None
    regions: list[str] = Field(default_factory=list)
    encounters: list[GroupedEncounterModel] = Field(default_factory=list)
    debug_key: str | None = None

    @classmethod
    def from_view(cls, view: LiveRouteView) -> "LiveRouteResponse":
        return cls(
            status=view.status,
            status_text=STATUS_DISPLAY[view.status],
            connection=view.connection,
            raw_text=view.raw_text,
            cleaned_text=view.cleaned_text,
            confidence=view.confidence,
            match=MatchResultModel.from_result(view.match),
            region=view.region,
            regions=list(view.regions),
            encounters=[GroupedEncounterModel.from_grouped(g) for g in view.encounters],
            debug_key=view.debug_key,
        )


class LiveBattleResponse(BaseModel):
    """Current live battle panel state."""

    status: LiveStatus
    status_text: str
    connection: ConnectionState
    raw_text: str | None = None
    confidence: float | None = None
    species: list[str] = Field(default_factory=list)

    @classmethod
    def from_view(cls, view: LiveBattleView) -> "LiveBattleResponse":
        return cls(
            status=view.status,
            status_text=STATUS_DISPLAY[view.status],
            connection=view.connection,
            raw_text=view.raw_text,
            confidence=view.confidence,
            species=list(view.species),
        )


class FeedStatusResponse(BaseModel):
    """Connection status of one feed client."""

    feed: str
    state: ConnectionState
    enabled: bool
    url: str
    last_message_age_seconds: float | None = None
    has_cached_payload: bool = False
    listeners: int = 0


class FeedEnabledRequest(BaseModel):
    enabled: bool = Field(..., description="False closes the feed and stops reconnecting")


class ResyncResponse(BaseModel):
    """Feeds reconnected after focus/visibility was regained."""

    reconnected: list[str]


# =============================================================================
# Areas
# =============================================================================


class AreaMatchResponse(BaseModel):
    """Manual area search result."""

    query: str
    match: MatchResultModel
    region: str | None = None
    regions: list[str] = Field(default_factory=list)
    map_names: list[str] = Field(default_factory=list)
    encounters: list[GroupedEncounterModel] = Field(default_factory=list)

    @classmethod
    def from_area(cls, query: str, match: MatchResult, area: AreaView) -> "AreaMatchResponse":
        return cls(
            query=query,
            match=MatchResultModel.from_result(match),
            region=area.region,
            regions=list(area.regions),
            map_names=list(area.map_names),
            encounters=[GroupedEncounterModel.from_grouped(g) for g in area.encounters],
        )


# =============================================================================
# Catalog
# =============================================================================


class CatalogReloadRequest(BaseModel):
    path: str | None = Field(None, description="Catalog file; defaults to the configured path")


class CatalogReloadResponse(BaseModel):
    areas: int
    regions: list[str]
    species: int
    generation: int


# =============================================================================
# Descriptions
# =============================================================================


class DescriptionResponse(BaseModel):
    """Ability or move description."""

    kind: str
    name: str
    slug: str
    effect: str | None = None
    short_effect: str | None = None
    flavor_text: str | None = None
    type: str | None = None
    category: str | None = None
    power: int | None = None
    accuracy: int | None = None
    pp: int | None = None

    @classmethod
    def from_description(cls, description: Description) -> "DescriptionResponse":
        return cls(
            kind=description.kind,
            name=description.name,
            slug=description.slug,
            effect=description.effect,
            short_effect=description.short_effect,
            flavor_text=description.flavor_text,
            type=description.type,
            category=description.category,
            power=description.power,
            accuracy=description.accuracy,
            pp=description.pp,
        )
