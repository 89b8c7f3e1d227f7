"""Feed text normalization.

Cleans up noisy OCR lines before any matching:
- Joins multi-line text into one logical line
- Strips channel markers ("Route 10 Ch 2" -> "Route 10")
- Collapses repeated whitespace
- Maps dash-only lines to the empty "no information" signal

Text rules are data (TextRule rows applied in order), shared by the alias
key builder. normalize_feed_text() never raises and is idempotent.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from re import Pattern

from livedex.utilities.constants import CHANNEL_MARKER_PATTERN, DASH_CHARACTERS

logger = logging.getLogger(__name__)


# =============================================================================
# RULE TABLE
# =============================================================================


@dataclass(frozen=True)
class TextRule:
    """One rewrite rule: every match of pattern is replaced."""

    name: str
    pattern: str
    replacement: str = " "
    flags: int = re.IGNORECASE
    _compiled: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern, self.flags))

    def apply(self, text: str) -> str:
        return self._compiled.sub(self.replacement, text)


def apply_rules(text: str, rules: Iterable[TextRule]) -> str:
    """Apply rules in order."""
    for rule in rules:
        text = rule.apply(text)
    return text


FEED_TEXT_RULES: tuple[TextRule, ...] = (
    TextRule("newlines", r"[\r\n]+", " "),
    TextRule("channel_marker", CHANNEL_MARKER_PATTERN, ""),
    TextRule("whitespace", r"\s+", " "),
)

_DASH_ONLY = re.compile(rf"^[{re.escape(DASH_CHARACTERS)}\s]+$")


# =============================================================================
# TOKENIZER
# =============================================================================

_TOKEN_PATTERN = re.compile(r"\S+")


def tokenize(text: str) -> list[str]:
    """Split text into whitespace-delimited words."""
    if not text:
        return []
    return _TOKEN_PATTERN.findall(text)


def trailing_spans(text: str) -> list[str]:
    """Progressively shorter trailing word sequences.

    "xx Route 10" -> ["xx Route 10", "Route 10", "10"]
    """
    words = tokenize(text)
    return [" ".join(words[i:]) for i in range(len(words))]


# =============================================================================
# MAIN NORMALIZATION
# =============================================================================


def is_dash_only(text: str) -> bool:
    return bool(text) and bool(_DASH_ONLY.match(text))


def normalize_feed_text(text: str | None) -> str:
    """Normalize raw feed text.

    Args:
        text: Raw OCR text (possibly multi-line, possibly None)

    Returns:
        Cleaned single-line text; "" when there is no information
    """
    if not text:
        return ""

    cleaned = apply_rules(str(text), FEED_TEXT_RULES).strip()

    # OCR of an empty HUD slot renders as a run of dashes
    if is_dash_only(cleaned):
        return ""

    if cleaned != text:
        logger.debug("[NORMALIZE] '%s' -> '%s'", str(text)[:60], cleaned[:60])

    return cleaned
