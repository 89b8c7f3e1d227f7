"""Species extraction from battle HUD text.

Battle OCR carries one or more health-bar labels ("Pidgey Lv.5 HP 12/20"),
often run together when two bars overlap in a horde/double battle
("PidgeyLv.5Rattata"). The resolver:

1. Splits run-together names at lowercase->uppercase and digit->letter
   boundaries, then strips level/HP/party-count markers.
2. Searches two precompiled alternations of catalog species names,
   longest first so "Mewtwo" is never reported as "Mew":
   - spaced: text as-is, hyphens optionally a space ("Ho Oh" == "Ho-Oh")
   - compact: text and names with every non-alphanumeric removed
3. Falls back to line-by-line edit-distance similarity (>= 0.8).
"""

import logging
import re
from collections.abc import Iterable
from re import Pattern

from livedex.core.catalog import AreaCatalog
from livedex.utilities.constants import BATTLE_MARKER_PATTERNS, SPECIES_FALLBACK_SIMILARITY
from livedex.utilities.fuzzy_match import best_similarity, compact_text, fold_text

logger = logging.getLogger(__name__)

_MARKERS: tuple[Pattern, ...] = tuple(re.compile(p, re.IGNORECASE) for p in BATTLE_MARKER_PATTERNS)


def split_run_together(text: str) -> str:
    """Insert spaces where OCR merged two labels.

    "PidgeyRattata" -> "Pidgey Rattata", "Lv.5Rattata" -> "Lv.5 Rattata"
    """
    text = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    text = re.sub(r"(\d)([A-Za-z])", r"\1 \2", text)
    return text


def strip_battle_markers(text: str) -> str:
    """Remove level, HP and party-count markers with their numbers."""
    for pattern in _MARKERS:
        text = pattern.sub(" ", text)
    return " ".join(text.split())


def normalize_battle_text(text: str) -> str:
    """Full cleanup of one battle text block (line structure is not kept)."""
    if not text:
        return ""
    text = fold_text(str(text))
    text = split_run_together(text)
    return strip_battle_markers(text)


def _spaced_fragment(name: str) -> str:
    parts = []
    for char in fold_text(name):
        if char == "-":
            parts.append(r"[-\s]?")
        elif char.isspace():
            parts.append(r"\s+")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


class SpeciesTextResolver:
    """Extracts species names from battle text.

    Patterns are compiled once per species list; build one resolver per
    catalog snapshot.

    Usage:
        resolver = SpeciesTextResolver.for_catalog(catalog)
        names = resolver.resolve("Pidgey Lv.5 HP 12/20")
    """

    def __init__(self, species_names: Iterable[str]):
        names = [n for n in dict.fromkeys(str(n).strip() for n in species_names) if n]
        # Longest first: a short name must not shadow a longer one containing it
        ordered = sorted(names, key=lambda n: (-len(compact_text(n)), n))

        self._spaced_lookup: dict[str, str] = {}
        self._compact_lookup: dict[str, str] = {}
        for name in ordered:
            self._spaced_lookup.setdefault(self._spaced_key(name), name)
            key = compact_text(name)
            if key:
                self._compact_lookup.setdefault(key, name)

        self._spaced_pattern: Pattern | None = None
        self._compact_pattern: Pattern | None = None
        if ordered:
            spaced = "|".join(_spaced_fragment(n) for n in ordered)
            self._spaced_pattern = re.compile(
                rf"(?<![A-Za-z0-9])(?:{spaced})(?![A-Za-z0-9])",
                re.IGNORECASE,
            )
        if self._compact_lookup:
            compact = "|".join(re.escape(k) for k in self._compact_lookup)
            self._compact_pattern = re.compile(compact)

    @classmethod
    def for_catalog(cls, catalog: AreaCatalog) -> "SpeciesTextResolver":
        return cls(catalog.species_names())

    @staticmethod
    def _spaced_key(text: str) -> str:
        return " ".join(re.sub(r"[-\s]+", " ", fold_text(text).lower()).split())

    @property
    def species_count(self) -> int:
        return len(self._compact_lookup)

    def resolve(self, battle_text: str) -> list[str]:
        """Species names present in battle text, in order of appearance.

        Returns zero, one, or several names (several only in group battles).
        """
        if not battle_text or self._spaced_pattern is None:
            return []

        cleaned = normalize_battle_text(battle_text)
        found: list[str] = []

        def add(name: str | None) -> None:
            if name and name not in found:
                found.append(name)

        for m in self._spaced_pattern.finditer(cleaned):
            text = m.group(0)
            add(self._spaced_lookup.get(self._spaced_key(text)) or self._compact_lookup.get(compact_text(text)))

        if self._compact_pattern is not None:
            for m in self._compact_pattern.finditer(compact_text(cleaned)):
                add(self._compact_lookup.get(m.group(0)))

        if found:
            return found

        return self._resolve_fallback(battle_text)

    def _resolve_fallback(self, battle_text: str) -> list[str]:
        """Line-by-line similarity against every species name."""
        found: list[str] = []
        for line in str(battle_text).splitlines():
            key = compact_text(normalize_battle_text(line))
            if not key:
                continue
            name, score = best_similarity(key, self._compact_lookup, SPECIES_FALLBACK_SIMILARITY)
            if name and name not in found:
                logger.debug("[BATTLE] Fuzzy species '%s' -> %s (%.2f)", line.strip(), name, score)
                found.append(name)
        return found


def resolve_species(battle_text: str, catalog: AreaCatalog) -> list[str]:
    """Convenience wrapper: build a resolver for catalog and resolve once."""
    return SpeciesTextResolver.for_catalog(catalog).resolve(battle_text)
