"""Feed wire decoding.

The OCR producer sends either a bare string or a JSON object. Both are
coerced into a FeedMessage before any matching runs.

String forms:
    "NO_ROUTE" / "NO_MON"          explicit "no information" (text "")
    'GUESS: "Route 10"'            quoted guess
    "ROUTE|Route 10"               tagged (route feed)
    "ROUTE|route:Route 10"         tagged, inner tag optional
    "MON|Pidgey"                   tagged (battle feed)
    "MON|mon:Pidgey"               tagged, inner tag optional
    "Route 10"                     plain text

Object forms (optionally wrapped in "payload" or "data"):
    {"text": ..., "confidence": 0.92}
    {"route": ...} / {"mon": ...} / {"name": ...} / {"guess": ...}
    {"type": "no_route"} / {"type": "no_mon"}
    {"line": 'GUESS: "..."'} / {"message": 'GUESS: "..."'}
Confidence comes from "confidence", "conf" or "c" and may be a numeric
string.

Anything that yields no text decodes to None ("absent"); the caller keeps
its previous state.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from livedex.core.types import FeedKind, FeedMessage

logger = logging.getLogger(__name__)

# =============================================================================
# WIRE CONSTANTS
# =============================================================================

SENTINELS: dict[FeedKind, str] = {
    FeedKind.ROUTE: "NO_ROUTE",
    FeedKind.BATTLE: "NO_MON",
}

EMPTY_TYPES: dict[FeedKind, str] = {
    FeedKind.ROUTE: "no_route",
    FeedKind.BATTLE: "no_mon",
}

TEXT_FIELDS: dict[FeedKind, tuple[str, ...]] = {
    FeedKind.ROUTE: ("text", "route", "name", "guess"),
    FeedKind.BATTLE: ("text", "mon", "name", "guess"),
}

GUESS_FIELDS: tuple[str, ...] = ("line", "message")
CONFIDENCE_FIELDS: tuple[str, ...] = ("confidence", "conf", "c")
WRAPPER_FIELDS: tuple[str, ...] = ("payload", "data")

GUESS_PATTERN = re.compile(r'GUESS:\s*"?([^"]+?)"?\s*$', re.IGNORECASE)

_TAGGED_PATTERNS: dict[FeedKind, re.Pattern] = {
    FeedKind.ROUTE: re.compile(r"^ROUTE\|(?:route:)?\s*(.*)$", re.IGNORECASE | re.DOTALL),
    FeedKind.BATTLE: re.compile(r"^MON\|(?:mon:)?\s*(.*)$", re.IGNORECASE | re.DOTALL),
}


# =============================================================================
# DECODING
# =============================================================================


def decode_payload(raw: str | bytes | None) -> Any:
    """Parse a raw frame as JSON, falling back to the bare string.

    Bare numbers stay strings ("10" is a route query, not a JSON number).
    A JSON null frame is absent.
    """
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return raw
    if decoded is None:
        return None
    return decoded if isinstance(decoded, dict | list | str) else raw


def parse_confidence(value: Any) -> float | None:
    """Numeric confidence, or None. Numeric strings are accepted."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _guess_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    match = GUESS_PATTERN.search(value)
    return match.group(1) if match else None


def _coerce_string(message: str, kind: FeedKind) -> FeedMessage | None:
    stripped = message.strip()
    if not stripped:
        return None

    if stripped.upper() == SENTINELS[kind]:
        return FeedMessage(text="", confidence=0.0)

    guess = _guess_text(stripped)
    if guess is not None:
        return FeedMessage(text=guess)

    tagged = _TAGGED_PATTERNS[kind].match(stripped)
    if tagged:
        text = tagged.group(1).strip()
        return FeedMessage(text=text) if text else None

    return FeedMessage(text=stripped)


def _coerce_mapping(message: Mapping[str, Any], kind: FeedKind) -> FeedMessage | None:
    source: Mapping[str, Any] = message
    for wrapper in WRAPPER_FIELDS:
        inner = message.get(wrapper)
        if isinstance(inner, Mapping):
            source = inner
            break

    text: str | None = None
    for key in TEXT_FIELDS[kind]:
        value = source.get(key)
        if isinstance(value, str | int | float) and not isinstance(value, bool) and str(value).strip():
            text = str(value)
            break

    if text is None and str(source.get("type", "")).lower() == EMPTY_TYPES[kind]:
        text = ""

    if text is None:
        for key in GUESS_FIELDS:
            text = _guess_text(source.get(key))
            if text is not None:
                break

    if text is None:
        return None

    confidence = None
    for key in CONFIDENCE_FIELDS:
        if source.get(key) is not None:
            confidence = parse_confidence(source[key])
            break

    if text == "" and confidence is None:
        confidence = 0.0

    return FeedMessage(text=text, confidence=confidence)


def coerce_feed_message(payload: Any, kind: FeedKind = FeedKind.ROUTE) -> FeedMessage | None:
    """Coerce a decoded payload into a FeedMessage.

    Args:
        payload: Output of decode_payload (str, dict, or anything JSON gives)
        kind: Feed the payload came from (selects sentinel and field names)

    Returns:
        FeedMessage, or None when nothing usable was found
    """
    if payload is None:
        return None
    if isinstance(payload, str):
        return _coerce_string(payload, kind)
    if isinstance(payload, Mapping):
        return _coerce_mapping(payload, kind)

    logger.debug("[FEED] Ignoring %s payload on %s feed", type(payload).__name__, kind.value)
    return None
