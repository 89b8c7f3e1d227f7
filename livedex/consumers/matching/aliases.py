"""Alias keys for map names.

Turns arbitrary display text into a minimal comparison key so that HUD
text and catalog names can be compared directly:

    "Mt. Coronet 4F Ch 2"  -> "mountcoronet"
    "Cerulean City"        -> "cerulean"
    "Route 10 (North)"     -> "route10"

Pure and deterministic; no I/O.
"""

import re

from livedex.consumers.matching.normalizer import TextRule, apply_rules, tokenize
from livedex.utilities.constants import (
    CHANNEL_MARKER_PATTERN,
    CURRENCY_SYMBOLS,
    LIVE_ALIASES,
    ROUTE_HALF_SUFFIXES,
    STRUCTURAL_WORDS,
    UNIFIED_VICTORY_ROAD_REGIONS,
    WEEKDAY_NAMES,
)
from livedex.utilities.fuzzy_match import fold_text

# Queries: "Route 10", "route10", "10". Catalog names must spell out "Route".
ROUTE_QUERY = re.compile(r"^(?:route\s*)?(\d+)", re.IGNORECASE)
ROUTE_NAME = re.compile(r"^route\s*(\d+)", re.IGNORECASE)

_CURRENCY = re.escape(CURRENCY_SYMBOLS)
_WEEKDAYS = "|".join(sorted(WEEKDAY_NAMES, key=len, reverse=True))

# Applied to the raw text, before accent folding (currency symbols don't survive it)
PRE_FOLD_RULES: tuple[TextRule, ...] = (
    TextRule("channel_marker", CHANNEL_MARKER_PATTERN, ""),
    TextRule("currency_prefix", rf"[{_CURRENCY}]\s*[\d,.]+"),
    TextRule("currency_suffix", rf"\b[\d,.]+\s*[{_CURRENCY}]"),
)

# Applied to the folded, lowercased text
KEY_RULES: tuple[TextRule, ...] = (
    TextRule("brackets", r"\[[^\]]*\]"),
    TextRule("parentheticals", r"\([^)]*\)"),
    TextRule("weekdays", rf"\b(?:{_WEEKDAYS})\b"),
    TextRule("timestamps", r"\b\d{1,2}:\d{2}\b"),
    TextRule("mount", r"\bmt\b\.?", " mount "),
    TextRule("floors", r"\b(?:b\d+f|\d+f)\b"),
    TextRule("non_alnum", r"[^a-z0-9]+"),
)


def simplify_name(text: str) -> str:
    """Reduce text to its compact key, before the manual alias table."""
    if not text:
        return ""

    result = apply_rules(str(text), PRE_FOLD_RULES)
    result = fold_text(result).lower()
    result = apply_rules(result, KEY_RULES)

    words = [w for w in tokenize(result) if w not in STRUCTURAL_WORDS]
    return "".join(words)


def alias_key(text: str) -> str:
    """Canonical comparison key for a map name.

    Consults the manual alias table for known problematic names.
    """
    key = simplify_name(text)
    return LIVE_ALIASES.get(key, key)


_ROUTE_HALF = re.compile(
    rf"\s*\((?:{'|'.join(ROUTE_HALF_SUFFIXES)})\)\s*",
    re.IGNORECASE,
)


def normalize_map_for_grouping(region: str, map_name: str) -> str:
    """Display name under which catalog maps are grouped into one area.

    Merges split route halves ("Route 212 (North)" -> "Route 212") and
    unifies Victory Road sections in regions that show them as one area.
    """
    name = str(map_name).strip()

    if ROUTE_NAME.match(name):
        name = " ".join(_ROUTE_HALF.sub(" ", name).split())

    if str(region).strip().lower() in UNIFIED_VICTORY_ROAD_REGIONS and re.search(
        r"victory\s*road", name, re.IGNORECASE
    ):
        return "Victory Road"

    return name


def route_number(text: str, query: bool = False) -> int | None:
    """Route number of a route-numbered name ("Route 10 (North)" -> 10).

    With query=True a bare leading number ("10") also counts.
    """
    pattern = ROUTE_QUERY if query else ROUTE_NAME
    match = pattern.match(str(text).strip())
    return int(match.group(1)) if match else None
