"""Live resolution outcomes.

Four discrete states a live panel can show, kept distinct so the user can
tell "nothing to show yet" from "text we couldn't place":
- NOT_CONNECTED: Feed not open (producer not running, or feed disabled)
- NO_DATA: Feed sent the explicit "no information" signal (NO_ROUTE / NO_MON)
- NO_MATCH: Text arrived but nothing in the catalog cleared the threshold
- MATCHED: Text resolved to a map (route feed) or species (battle feed)

A malformed frame is not an outcome: it leaves the previous one in place.
"""

from dataclasses import dataclass, field
from enum import Enum

from livedex.core.types import MatchResult

# =============================================================================
# STATUS
# =============================================================================


class LiveStatus(str, Enum):
    """Top-level state of a live feed view."""

    NOT_CONNECTED = "not_connected"
    NO_DATA = "no_data"
    NO_MATCH = "no_match"
    MATCHED = "matched"


# =============================================================================
# OUTCOME
# =============================================================================


@dataclass
class LiveOutcome:
    """Result of resolving one feed message.

    Use the factory methods to create instances:
        LiveOutcome.no_data()
        LiveOutcome.no_match("xx qq", cleaned="xx qq", confidence=0.4)
        LiveOutcome.matched("Route 10", cleaned="Route 10", match=result)
    """

    status: LiveStatus
    raw_text: str | None = None
    cleaned_text: str | None = None
    confidence: float | None = None

    # Route feed
    match: MatchResult | None = None

    # Battle feed
    species: list[str] = field(default_factory=list)

    @classmethod
    def not_connected(cls) -> "LiveOutcome":
        return cls(status=LiveStatus.NOT_CONNECTED)

    @classmethod
    def no_data(cls, *, confidence: float | None = None) -> "LiveOutcome":
        return cls(status=LiveStatus.NO_DATA, raw_text="", cleaned_text="", confidence=confidence)

    @classmethod
    def no_match(
        cls,
        raw_text: str,
        *,
        cleaned: str | None = None,
        confidence: float | None = None,
    ) -> "LiveOutcome":
        return cls(
            status=LiveStatus.NO_MATCH,
            raw_text=raw_text,
            cleaned_text=cleaned,
            confidence=confidence,
        )

    @classmethod
    def matched(
        cls,
        raw_text: str,
        *,
        cleaned: str | None = None,
        confidence: float | None = None,
        match: MatchResult | None = None,
        species: list[str] | None = None,
    ) -> "LiveOutcome":
        """Create a MATCHED outcome.

        Args:
            raw_text: Text as received from the feed
            cleaned: Normalized text (route feed: the winning trailing span)
            confidence: OCR confidence sent with the message, if any
            match: Map match (route feed)
            species: Resolved species names (battle feed)
        """
        return cls(
            status=LiveStatus.MATCHED,
            raw_text=raw_text,
            cleaned_text=cleaned,
            confidence=confidence,
            match=match,
            species=list(species or []),
        )


# =============================================================================
# DISPLAY TEXT
# =============================================================================

STATUS_DISPLAY: dict[LiveStatus, str] = {
    LiveStatus.NOT_CONNECTED: "Not connected",
    LiveStatus.NO_DATA: "No data",
    LiveStatus.NO_MATCH: "No usable match",
    LiveStatus.MATCHED: "Matched",
}
