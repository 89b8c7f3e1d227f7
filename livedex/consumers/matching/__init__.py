"""Live text matching module.

Resolves noisy OCR text against the area catalog: normalization, alias
keys, map matching and battle species extraction.

Main entry points:
    from livedex.consumers.matching import MapMatcher, SpeciesTextResolver

    result = MapMatcher().match("Route 10 Ch 2", catalog)
    species = SpeciesTextResolver.for_catalog(catalog).resolve("Pidgey Lv.5")
"""

from livedex.consumers.matching.aliases import (
    alias_key,
    normalize_map_for_grouping,
    route_number,
    simplify_name,
)
from livedex.consumers.matching.map_matcher import (
    DEFAULT_WEIGHTS,
    MapMatcher,
    MatchWeights,
    TextMatch,
    get_map_matcher,
    is_ambiguous_query,
    score_names,
)
from livedex.consumers.matching.normalizer import (
    TextRule,
    apply_rules,
    is_dash_only,
    normalize_feed_text,
    tokenize,
    trailing_spans,
)
from livedex.consumers.matching.result import (
    STATUS_DISPLAY,
    LiveOutcome,
    LiveStatus,
)
from livedex.consumers.matching.species_resolver import (
    SpeciesTextResolver,
    normalize_battle_text,
    resolve_species,
)

__all__ = [
    # Normalizer
    "TextRule",
    "apply_rules",
    "is_dash_only",
    "normalize_feed_text",
    "tokenize",
    "trailing_spans",
    # Aliases
    "alias_key",
    "normalize_map_for_grouping",
    "route_number",
    "simplify_name",
    # MapMatcher
    "DEFAULT_WEIGHTS",
    "MapMatcher",
    "MatchWeights",
    "TextMatch",
    "get_map_matcher",
    "is_ambiguous_query",
    "score_names",
    # Species
    "SpeciesTextResolver",
    "normalize_battle_text",
    "resolve_species",
    # Results
    "LiveOutcome",
    "LiveStatus",
    "STATUS_DISPLAY",
]
