"""Area catalog snapshot.

The catalog (region -> map display name -> encounter rows) is built once by
external ingestion tooling and is read-only for the engine. A hot reload
swaps the whole snapshot atomically through CatalogStore; readers holding
the previous snapshot keep a consistent view.
"""

import json
import logging
import re
import threading
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from livedex.core.types import AreaCatalogEntry, RawEncounter
from livedex.utilities.fuzzy_match import fix_mojibake

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Catalog file missing or structurally invalid."""


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_level(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_items(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(item).strip() for item in value if str(item).strip())


def encounter_from_dict(row: Mapping[str, Any]) -> RawEncounter | None:
    """Build a RawEncounter from an ingested row.

    Accepts camelCase ingestion fields (speciesName, minLevel) and the
    legacy names (pokemon, monId, min, max). Rows without a species name
    are dropped (returns None).
    """
    name = _first(row, "speciesName", "species_name", "monName", "pokemon", "species")
    if not name or not str(name).strip():
        return None

    rarity = _first(row, "rarity")
    return RawEncounter(
        species_id=_first(row, "speciesId", "species_id", "monId", "id"),
        species_name=str(name).strip(),
        method=str(_first(row, "method", "type") or "").strip(),
        rarity=str(rarity).strip() if rarity else None,
        min_level=_as_level(_first(row, "minLevel", "min_level", "min")),
        max_level=_as_level(_first(row, "maxLevel", "max_level", "max")),
        items=_as_items(_first(row, "items", "item")),
    )


class AreaCatalog:
    """Immutable snapshot of every area and its encounter rows.

    Iteration order is the ingestion order (region, then map), which is
    the order tie-breaks fall back to.
    """

    def __init__(self, entries: Iterable[AreaCatalogEntry] = ()):
        self._entries: tuple[AreaCatalogEntry, ...] = tuple(entries)
        self._by_key: dict[tuple[str, str], AreaCatalogEntry] = {
            (e.region, e.map_name): e for e in self._entries
        }
        self._species_names: tuple[str, ...] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Iterable[Mapping[str, Any]]]]) -> "AreaCatalog":
        """Build a catalog from the ingestion structure.

        Maps named only with dashes are placeholders and are skipped.
        """
        if not isinstance(data, Mapping):
            raise CatalogError("Catalog root must be an object of regions")

        entries: list[AreaCatalogEntry] = []
        for region, maps in data.items():
            if not isinstance(maps, Mapping):
                raise CatalogError(f"Region '{region}' must map names to encounter lists")
            for map_name, rows in maps.items():
                map_name = fix_mojibake(str(map_name)).strip()
                if not map_name or re.fullmatch(r"-+", map_name):
                    continue
                encounters = []
                for row in rows or []:
                    if isinstance(row, RawEncounter):
                        encounters.append(row)
                    elif isinstance(row, Mapping):
                        encounter = encounter_from_dict(row)
                        if encounter:
                            encounters.append(encounter)
                entries.append(AreaCatalogEntry(str(region), map_name, tuple(encounters)))
        return cls(entries)

    def __iter__(self) -> Iterator[AreaCatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[AreaCatalogEntry, ...]:
        return self._entries

    @property
    def regions(self) -> list[str]:
        return list(dict.fromkeys(e.region for e in self._entries))

    def get(self, region: str, map_name: str) -> AreaCatalogEntry | None:
        return self._by_key.get((region, map_name))

    def species_names(self) -> tuple[str, ...]:
        """Distinct species display names across every area (ingestion order)."""
        if self._species_names is None:
            names = (enc.species_name for e in self._entries for enc in e.raw_encounters)
            self._species_names = tuple(dict.fromkeys(names))
        return self._species_names


def load_catalog(path: str | Path) -> AreaCatalog:
    """Load a catalog JSON file.

    Raises:
        CatalogError: File missing, unreadable or not a region mapping
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Catalog file unreadable: {path}: {e}") from e

    catalog = AreaCatalog.from_mapping(data)
    logger.info(
        "[CATALOG] Loaded %d areas across %d regions from %s",
        len(catalog),
        len(catalog.regions),
        path,
    )
    return catalog


class CatalogStore:
    """Holds the current catalog snapshot; replace() swaps it atomically."""

    def __init__(self, catalog: AreaCatalog | None = None, path: str | Path | None = None):
        self._catalog = catalog if catalog is not None else AreaCatalog()
        self._path = Path(path) if path else None
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def catalog(self) -> AreaCatalog:
        return self._catalog

    @property
    def generation(self) -> int:
        """Incremented on every successful replace."""
        return self._generation

    @property
    def path(self) -> Path | None:
        return self._path

    def replace(self, catalog: AreaCatalog) -> None:
        with self._lock:
            self._catalog = catalog
            self._generation += 1

    def reload(self, path: str | Path | None = None) -> AreaCatalog:
        """Reload from disk. On failure the previous snapshot stays in place.

        Raises:
            CatalogError: No path configured, or load failed
        """
        target = Path(path) if path else self._path
        if target is None:
            raise CatalogError("No catalog path configured")
        try:
            catalog = load_catalog(target)
        except CatalogError:
            logger.warning("[CATALOG] Reload failed, keeping previous snapshot (%d areas)", len(self._catalog))
            raise
        self._path = target
        self.replace(catalog)
        return catalog
