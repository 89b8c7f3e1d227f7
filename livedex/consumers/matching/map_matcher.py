"""Map matching for live route text.

Resolves normalized HUD text to a catalog map:

1. Guard rules reject ambiguous fragments ("r", "ro", "Mt. Co").
2. Route-numbered queries ("Route 10", "10") need an exact route number;
   "Route 10" never becomes "Route 110".
3. Free text compares alias keys. Equal keys score 100 (shorter raw name
   wins ties); otherwise a heuristic score must clear the threshold.

The weights are empirical. They live in MatchWeights so they can be tuned
against labeled HUD captures without touching the algorithm.
"""

import logging
import re
from dataclasses import dataclass

from livedex.consumers.matching.aliases import (
    alias_key,
    normalize_map_for_grouping,
    route_number,
)
from livedex.consumers.matching.normalizer import normalize_feed_text, tokenize, trailing_spans
from livedex.core.catalog import AreaCatalog
from livedex.core.types import AreaCatalogEntry, MatchResult
from livedex.utilities.constants import MOUNT_ABBREVIATIONS
from livedex.utilities.fuzzy_match import fold_text

logger = logging.getLogger(__name__)

SCORE_EXACT = 100
MIN_FREE_TEXT_CHARS = 3


@dataclass(frozen=True)
class MatchWeights:
    """Heuristic score weights and acceptance threshold."""

    prefix: int = 25  # either key starts with the other
    contains: int = 20  # either key contains the other
    digits: int = 30  # digit sequences identical
    length_ratio: int = 15  # scaled by shorter/longer length
    threshold: int = 35


DEFAULT_WEIGHTS = MatchWeights()


@dataclass(frozen=True)
class TextMatch:
    """Winning trailing substring of a feed line and its map match."""

    cleaned: str
    match: MatchResult


def _digit_signature(key: str) -> str:
    return ",".join(re.findall(r"\d+", key))


def score_names(a: str, b: str, weights: MatchWeights = DEFAULT_WEIGHTS) -> int:
    """Score similarity of two alias keys (0-100)."""
    if not a or not b:
        return 0
    if a == b:
        return SCORE_EXACT

    score = 0
    if a.startswith(b) or b.startswith(a):
        score += weights.prefix
    if a in b or b in a:
        score += weights.contains

    digits_a = _digit_signature(a)
    if digits_a and digits_a == _digit_signature(b):
        score += weights.digits

    ratio = min(len(a), len(b)) / max(len(a), len(b))
    # Round half up
    score += int(ratio * weights.length_ratio + 0.5)
    return score


def is_ambiguous_query(text: str) -> bool:
    """Queries too short or partial to match safely.

    - A non-numeric prefix of "route" ("r", "rou", "route")
    - Non-route text with fewer than 3 alphanumeric characters
    - "Mt. X" style text whose second word has fewer than 3 letters
    """
    folded = fold_text(text).lower()
    compact = re.sub(r"[^a-z0-9]", "", folded)
    if not compact:
        return True

    if not any(c.isdigit() for c in compact) and "route".startswith(compact):
        return True

    if route_number(text, query=True) is None and len(compact) < MIN_FREE_TEXT_CHARS:
        return True

    words = [w for w in (re.sub(r"[^a-z0-9]", "", t) for t in tokenize(folded)) if w]
    if len(words) == 2 and words[0] in MOUNT_ABBREVIATIONS:
        if len(re.sub(r"[^a-z]", "", words[1])) < 3:
            return True

    return False


def _prefer(current: AreaCatalogEntry | None, candidate: AreaCatalogEntry) -> AreaCatalogEntry:
    """Tie-break between equal matches: shorter raw name, then catalog order."""
    if current is None or len(candidate.map_name) < len(current.map_name):
        return candidate
    return current


def _result(entry: AreaCatalogEntry, score: float) -> MatchResult:
    return MatchResult(
        region=entry.region,
        canonical_map_name=normalize_map_for_grouping(entry.region, entry.map_name),
        raw_map_name=entry.map_name,
        score=score,
    )


class MapMatcher:
    """Scores text against the area catalog.

    Usage:
        matcher = MapMatcher()
        result = matcher.match("Route 10", catalog)
        found = matcher.find_best_map_in_text("xx Cerulean City Ch 2", catalog)
    """

    def __init__(self, weights: MatchWeights = DEFAULT_WEIGHTS):
        self.weights = weights

    def match(self, text: str, catalog: AreaCatalog) -> MatchResult | None:
        """Best catalog map for text, or None when nothing is safe to accept."""
        query = normalize_feed_text(text)
        if not query or is_ambiguous_query(query):
            return None

        number = route_number(query, query=True)
        if number is not None:
            return self._match_route(number, catalog)

        return self._match_free_text(query, catalog)

    def _match_route(self, number: int, catalog: AreaCatalog) -> MatchResult | None:
        best: AreaCatalogEntry | None = None
        for entry in catalog:
            if route_number(entry.map_name) == number:
                best = _prefer(best, entry)

        if best is None:
            logger.debug("[MATCH] No catalog map for route %d", number)
            return None
        return _result(best, SCORE_EXACT)

    def _match_free_text(self, query: str, catalog: AreaCatalog) -> MatchResult | None:
        needle = alias_key(query)
        if not needle:
            return None
        needle_digits = _digit_signature(needle)
        # "Route Gate", "Route Exit": structural words leave only "route"
        if not needle_digits and "route".startswith(needle):
            logger.debug("[MATCH] Bare route query after alias reduction: '%s'", query)
            return None

        exact: AreaCatalogEntry | None = None
        best: AreaCatalogEntry | None = None
        best_score = -1

        for entry in catalog:
            candidate = alias_key(entry.map_name)
            if not candidate:
                continue

            if candidate == needle:
                exact = _prefer(exact, entry)
                continue

            # A numbered route only ever matches its own number
            if route_number(entry.map_name) is not None and _digit_signature(candidate) != needle_digits:
                continue

            score = score_names(candidate, needle, self.weights)
            if score > best_score:
                best_score = score
                best = entry

        if exact is not None:
            return _result(exact, SCORE_EXACT)

        if best is not None and best_score >= self.weights.threshold:
            return _result(best, best_score)

        logger.debug("[MATCH] No map above threshold for '%s' (best=%s)", query, best_score)
        return None

    def find_best_map_in_text(self, text: str, catalog: AreaCatalog) -> TextMatch | None:
        """Locate a map name behind leading OCR garbage.

        Tries the whole text, then drops the first word, the first two
        words, and so on. The highest-scoring span wins; on equal scores
        the longer span is kept.
        """
        cleaned = normalize_feed_text(text)
        best: TextMatch | None = None

        for span in trailing_spans(cleaned):
            result = self.match(span, catalog)
            if result is None:
                continue
            if best is None or result.score > best.match.score:
                best = TextMatch(cleaned=span, match=result)

        return best


# Default instance for convenience
_default_matcher: MapMatcher | None = None


def get_map_matcher() -> MapMatcher:
    """Get the default MapMatcher instance."""
    global _default_matcher
    if _default_matcher is None:
        _default_matcher = MapMatcher()
    return _default_matcher
