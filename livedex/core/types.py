"""Core data types for the live context engine.

All data structures are dataclasses with attribute access.
Catalog-side types are frozen: the catalog is read-only for the engine.
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RawEncounter:
    """One ingested encounter row for a species in an area.

    Several rows may exist for the same species/area with different
    methods or partial data (missing rarity or levels).
    """

    species_id: int | str | None
    species_name: str
    method: str
    rarity: str | None = None
    min_level: int | None = None
    max_level: int | None = None
    items: tuple[str, ...] = ()


@dataclass(frozen=True)
class AreaCatalogEntry:
    """A map within a region, with its raw encounter rows."""

    region: str
    map_name: str
    raw_encounters: tuple[RawEncounter, ...] = ()


@dataclass(frozen=True)
class MethodTag:
    """Encounter method split into base method and time tags.

    "Grass (Morning/Day)" -> base="Grass", times=("Morning", "Day")
    """

    base: str
    times: tuple[str, ...] = ()

    @property
    def time(self) -> str | None:
        """Joined time label ("Morning/Day"), or None for a time-less method."""
        return "/".join(self.times) if self.times else None


@dataclass
class EncounterSummary:
    """Merged encounter data for one method of one species."""

    method_label: str
    rarities: list[str] = field(default_factory=list)
    min_level: int | None = None
    max_level: int | None = None
    items: list[str] = field(default_factory=list)


@dataclass
class GroupedEncounter:
    """All encounter methods for one species in an area.

    method_label values are unique within one GroupedEncounter.
    """

    species_id: int | str | None
    species_name: str
    encounters: list[EncounterSummary] = field(default_factory=list)


@dataclass(frozen=True)
class MatchResult:
    """Best catalog map for a piece of text. Produced fresh per query."""

    region: str
    canonical_map_name: str
    raw_map_name: str
    score: float


@dataclass(frozen=True)
class FeedMessage:
    """Decoded feed message.

    text == "" is the explicit "no information" signal (NO_ROUTE / NO_MON).
    text is None only when nothing could be extracted.
    """

    text: str | None = None
    confidence: float | None = None

    @property
    def is_empty_signal(self) -> bool:
        return self.text == ""


class ConnectionState(str, Enum):
    """Connection state of a StreamingClient."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    STALE = "stale"  # Open, but no message inside the feed's timeout window


class FeedKind(str, Enum):
    """The two live feeds produced by the OCR process."""

    ROUTE = "route"
    BATTLE = "battle"


@dataclass(frozen=True)
class FeedConfig:
    """Injected configuration for one StreamingClient."""

    kind: FeedKind
    url: str
    stale_after_seconds: float
    reconnect_delay_seconds: float = 1.5
    enabled: bool = True

    @property
    def path_variants(self) -> tuple[str, str]:
        """The two equivalent endpoint forms (without / with trailing slash)."""
        base = self.url.rstrip("/")
        return base, base + "/"
