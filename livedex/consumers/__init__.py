"""Consumer layer - matching and encounter aggregation."""

from livedex.consumers.encounters import (
    AreaView,
    EncounterAggregator,
    build_area_view,
    clean_method_label,
    group_encounters,
    list_region_candidates,
    parse_method,
)
from livedex.consumers.matching import (
    LiveOutcome,
    LiveStatus,
    MapMatcher,
    SpeciesTextResolver,
    TextMatch,
)

__all__ = [
    # Encounters
    "AreaView",
    "EncounterAggregator",
    "build_area_view",
    "clean_method_label",
    "group_encounters",
    "list_region_candidates",
    "parse_method",
    # Matching
    "LiveOutcome",
    "LiveStatus",
    "MapMatcher",
    "SpeciesTextResolver",
    "TextMatch",
]
