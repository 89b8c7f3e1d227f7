"""Core types and the read-only area catalog."""

from livedex.core.catalog import (
    AreaCatalog,
    CatalogError,
    CatalogStore,
    encounter_from_dict,
    load_catalog,
)
from livedex.core.types import (
    AreaCatalogEntry,
    ConnectionState,
    EncounterSummary,
    FeedConfig,
    FeedKind,
    FeedMessage,
    GroupedEncounter,
    MatchResult,
    MethodTag,
    RawEncounter,
)

__all__ = [
    # Catalog
    "AreaCatalog",
    "CatalogError",
    "CatalogStore",
    "encounter_from_dict",
    "load_catalog",
    # Types
    "AreaCatalogEntry",
    "ConnectionState",
    "EncounterSummary",
    "FeedConfig",
    "FeedKind",
    "FeedMessage",
    "GroupedEncounter",
    "MatchResult",
    "MethodTag",
    "RawEncounter",
]
