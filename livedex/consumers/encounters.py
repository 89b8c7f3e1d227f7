"""Encounter aggregation for an area.

Merges raw per-area encounter rows into one GroupedEncounter per species:

1. Partition rows by species.
2. Split each method into base + time tags ("Grass (Night)" -> Grass, Night).
3. Bucket by base method, then by time (time-less rows are their own bucket).
4. A time-less bucket applies at every time: it is merged into each timed
   bucket of the same base method and then dropped.
5. Several timed buckets of one base method collapse into a single summary
   labeled with every time tag ("Grass (Morning/Day)").
6. A species with a single summary keeps only its rarest tier label
   (non-tier labels such as "15%" are kept alongside).

Every merge is a set union or a min/max, and output order is sorted, so
the result does not depend on row order.

Usage:
    grouped = EncounterAggregator().group(entry.raw_encounters)
    view = build_area_view(catalog, "Route 212", region="Sinnoh")
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from livedex.consumers.matching.aliases import normalize_map_for_grouping
from livedex.core.catalog import AreaCatalog
from livedex.core.types import EncounterSummary, GroupedEncounter, MethodTag, RawEncounter
from livedex.utilities.constants import (
    RARITY_TIER_RANK,
    RARITY_TIERS,
    TIME_TAG_ALIASES,
    TIME_TAGS,
)

logger = logging.getLogger(__name__)

UNKNOWN_METHOD = "Unknown"

_TRAILING_PARENTHETICAL = re.compile(r"^(.*?)\s*\(([^()]*)\)\s*$")
_TIME_SEPARATORS = re.compile(r"\s*(?:/|,|&|\band\b)\s*", re.IGNORECASE)


# =============================================================================
# METHOD PARSING
# =============================================================================


def clean_method_label(method: str | None) -> str:
    """Repair method labels from scraped sources.

    - "Lure (Water"   -> "Lure (Water)"
    - "Grass))"       -> "Grass"
    - "hordes"        -> "Horde"
    """
    label = str(method or "").strip()
    label = re.sub(r"\)+$", "", label)
    if label.count("(") > label.count(")"):
        label += ")"
    if re.match(r"^hordes?\b", label, re.IGNORECASE):
        label = "Horde"
    return label


def _order_times(times: Iterable[str]) -> tuple[str, ...]:
    present = set(times)
    return tuple(t for t in TIME_TAGS if t in present)


def parse_method(method: str | None) -> MethodTag:
    """Split a method into base and time tags.

    Only a trailing parenthetical made entirely of time tags counts as a
    time qualifier; "Lure (Water)" keeps its parenthetical in the base.
    """
    label = clean_method_label(method)
    match = _TRAILING_PARENTHETICAL.match(label)
    if match:
        parts = [p for p in _TIME_SEPARATORS.split(match.group(2)) if p]
        times = [TIME_TAG_ALIASES.get(p.strip().lower()) for p in parts]
        if times and all(times):
            base = match.group(1).strip() or UNKNOWN_METHOD
            return MethodTag(base=base, times=_order_times(times))
    return MethodTag(base=label or UNKNOWN_METHOD)


def format_method_label(base: str, times: Iterable[str]) -> str:
    ordered = _order_times(times)
    return f"{base} ({'/'.join(ordered)})" if ordered else base


# =============================================================================
# RARITY
# =============================================================================


def canonical_rarity(rarity: str) -> str:
    """Tier labels in canonical casing ("very rare" -> "Very Rare")."""
    label = " ".join(str(rarity).split())
    rank = RARITY_TIER_RANK.get(label.lower())
    return RARITY_TIERS[rank] if rank is not None else label


def is_rarity_tier(rarity: str) -> bool:
    return str(rarity).strip().lower() in RARITY_TIER_RANK


def sort_rarities(rarities: Iterable[str]) -> list[str]:
    """Tiers most common first, then other labels alphabetically."""
    return sorted(
        rarities,
        key=lambda r: (0, RARITY_TIER_RANK[r.lower()], "") if is_rarity_tier(r) else (1, 0, r.lower()),
    )


def collapse_to_rarest(rarities: Iterable[str]) -> list[str]:
    """Keep only the rarest tier; non-tier labels are preserved."""
    rarities = list(rarities)
    tiers = [r for r in rarities if is_rarity_tier(r)]
    if len(tiers) <= 1:
        return sort_rarities(rarities)
    rarest = max(tiers, key=lambda r: RARITY_TIER_RANK[r.lower()])
    return sort_rarities([rarest] + [r for r in rarities if not is_rarity_tier(r)])


# =============================================================================
# BUCKETS
# =============================================================================


@dataclass
class _Bucket:
    """Accumulated data for one species + base method + time key."""

    rarities: dict[str, str] = field(default_factory=dict)  # lower -> display
    items: set[str] = field(default_factory=set)
    min_level: int | None = None
    max_level: int | None = None

    def add_rarity(self, rarity: str) -> None:
        label = canonical_rarity(rarity)
        if not label:
            return
        key = label.lower()
        current = self.rarities.get(key)
        self.rarities[key] = label if current is None else min(current, label)

    def add_levels(self, low: int | None, high: int | None) -> None:
        if low is not None:
            self.min_level = low if self.min_level is None else min(self.min_level, low)
        if high is not None:
            self.max_level = high if self.max_level is None else max(self.max_level, high)

    def add_row(self, row: RawEncounter) -> None:
        if row.rarity:
            self.add_rarity(row.rarity)
        self.add_levels(row.min_level, row.max_level)
        self.items.update(i for i in row.items if i)

    def merge(self, other: "_Bucket") -> None:
        for label in other.rarities.values():
            self.add_rarity(label)
        self.add_levels(other.min_level, other.max_level)
        self.items.update(other.items)

    def summary(self, label: str) -> EncounterSummary:
        return EncounterSummary(
            method_label=label,
            rarities=sort_rarities(self.rarities.values()),
            min_level=self.min_level,
            max_level=self.max_level,
            items=sorted(self.items),
        )


@dataclass
class _SpeciesGroup:
    species_id: int | str | None
    names: set[str] = field(default_factory=set)
    # base key -> display variants seen
    base_labels: dict[str, set[str]] = field(default_factory=dict)
    # base key -> time tuple -> bucket
    buckets: dict[str, dict[tuple[str, ...], _Bucket]] = field(default_factory=dict)


def _has_id(row: RawEncounter) -> bool:
    return row.species_id not in (None, "")


def _name_key(row: RawEncounter) -> str:
    return row.species_name.strip().lower()


def _species_id(row: RawEncounter, ids_by_name: dict[str, int | str]) -> int | str | None:
    """Row id, or the id another row of the same species carries."""
    if _has_id(row):
        return row.species_id
    return ids_by_name.get(_name_key(row))


# =============================================================================
# AGGREGATOR
# =============================================================================


class EncounterAggregator:
    """Groups raw encounter rows into per-species summaries."""

    def group(self, rows: Iterable[RawEncounter]) -> list[GroupedEncounter]:
        rows = list(rows)
        species: dict[str, _SpeciesGroup] = {}

        ids_by_name: dict[str, int | str] = {}
        for row in rows:
            if _has_id(row):
                ids_by_name.setdefault(_name_key(row), row.species_id)

        for row in rows:
            species_id = _species_id(row, ids_by_name)
            key = f"id:{species_id}" if species_id is not None else f"name:{_name_key(row)}"
            group = species.setdefault(key, _SpeciesGroup(species_id=species_id))
            group.names.add(row.species_name.strip())

            tag = parse_method(row.method)
            base_key = tag.base.lower()
            group.base_labels.setdefault(base_key, set()).add(tag.base)
            bucket = group.buckets.setdefault(base_key, {}).setdefault(tag.times, _Bucket())
            bucket.add_row(row)

        grouped = [self._finish(group) for group in species.values()]
        grouped.sort(key=lambda g: (g.species_name.lower(), str(g.species_id)))
        return grouped

    def _finish(self, group: _SpeciesGroup) -> GroupedEncounter:
        summaries: list[EncounterSummary] = []

        for base_key, by_time in group.buckets.items():
            base = min(group.base_labels[base_key])
            untimed = by_time.get(())
            timed = {times: b for times, b in by_time.items() if times}

            if not timed:
                summaries.append(untimed.summary(base))
                continue

            if untimed is not None:
                for bucket in timed.values():
                    bucket.merge(untimed)

            if len(timed) == 1:
                ((times, bucket),) = timed.items()
                summaries.append(bucket.summary(format_method_label(base, times)))
                continue

            combined = _Bucket()
            all_times: set[str] = set()
            for times, bucket in timed.items():
                combined.merge(bucket)
                all_times.update(times)
            summaries.append(combined.summary(format_method_label(base, all_times)))

        summaries.sort(key=lambda s: s.method_label.lower())

        if len(summaries) == 1 and len(summaries[0].rarities) > 1:
            summaries[0].rarities = collapse_to_rarest(summaries[0].rarities)

        return GroupedEncounter(
            species_id=group.species_id,
            species_name=min(group.names),
            encounters=summaries,
        )


def group_encounters(rows: Iterable[RawEncounter]) -> list[GroupedEncounter]:
    """Group rows with a default EncounterAggregator."""
    return EncounterAggregator().group(rows)


# =============================================================================
# AREA VIEWS
# =============================================================================


@dataclass
class AreaView:
    """Grouped encounters for one grouping map name."""

    canonical_map_name: str
    region: str | None
    regions: list[str] = field(default_factory=list)
    map_names: list[str] = field(default_factory=list)
    encounters: list[GroupedEncounter] = field(default_factory=list)


def _same_area(region: str, map_name: str, canonical: str) -> bool:
    return normalize_map_for_grouping(region, map_name).lower() == canonical.strip().lower()


def list_region_candidates(catalog: AreaCatalog, canonical_map_name: str) -> list[str]:
    """Regions having a map with this grouping name (catalog order).

    More than one entry means a cross-region name collision the user can
    pick from ("Route 10" in Kanto and Johto).
    """
    regions = (e.region for e in catalog if _same_area(e.region, e.map_name, canonical_map_name))
    return list(dict.fromkeys(regions))


def build_area_view(
    catalog: AreaCatalog,
    canonical_map_name: str,
    region: str | None = None,
    aggregator: EncounterAggregator | None = None,
) -> AreaView:
    """Merge every map sharing the grouping name and group its rows.

    Args:
        catalog: Catalog snapshot
        canonical_map_name: Grouping name (MatchResult.canonical_map_name)
        region: Restrict to one region (case-insensitive); None merges all

    Returns:
        AreaView (empty encounters when nothing matches)
    """
    aggregator = aggregator or EncounterAggregator()
    wanted = region.strip().lower() if region else None

    map_names: list[str] = []
    rows: list[RawEncounter] = []
    for entry in catalog:
        if not _same_area(entry.region, entry.map_name, canonical_map_name):
            continue
        if wanted and entry.region.strip().lower() != wanted:
            continue
        map_names.append(entry.map_name)
        rows.extend(entry.raw_encounters)

    encounters = aggregator.group(rows)
    logger.debug(
        "[AREA] %s (%s): %d maps, %d rows -> %d species",
        canonical_map_name,
        region or "all regions",
        len(map_names),
        len(rows),
        len(encounters),
    )

    return AreaView(
        canonical_map_name=canonical_map_name,
        region=region,
        regions=list_region_candidates(catalog, canonical_map_name),
        map_names=map_names,
        encounters=encounters,
    )
