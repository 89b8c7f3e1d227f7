"""Fuzzy string helpers for OCR text.

Uses rapidfuzz for edit-distance similarity and unidecode for accent folding.
"""

import re

from rapidfuzz.distance import Levenshtein
from unidecode import unidecode

from livedex.utilities.constants import GENDER_SYMBOLS, MOJIBAKE_PATTERNS


def fix_mojibake(text: str) -> str:
    """Fix common mojibake patterns from double-encoded UTF-8."""
    if not text:
        return text

    result = text
    for pattern, replacement in MOJIBAKE_PATTERNS:
        result = result.replace(pattern, replacement)
    return result


def fold_text(value: str) -> str:
    """Fix mojibake and fold accents (é→e). Case and punctuation are kept.

    Gender glyphs become letter suffixes ("Nidoran♀" -> "Nidoran-F").
    """
    result = fix_mojibake(value)
    for glyph, token in GENDER_SYMBOLS:
        result = result.replace(glyph, token)
    return unidecode(result)


def compact_text(value: str) -> str:
    """Lowercase alphanumeric-only form ("Mr. Mime" -> "mrmime")."""
    return re.sub(r"[^a-z0-9]+", "", fold_text(value).lower())


def similarity(a: str, b: str) -> float:
    """Normalized edit-distance similarity in [0, 1].

    1.0 for identical strings, 0.0 when either side is empty.
    """
    if not a or not b:
        return 0.0
    return Levenshtein.normalized_similarity(a, b)


def best_similarity(
    value: str,
    candidates: dict[str, str],
    threshold: float,
) -> tuple[str | None, float]:
    """Find the most similar candidate.

    Args:
        value: Compact text to compare
        candidates: compact key -> display value
        threshold: Minimum similarity to accept (0-1)

    Returns:
        Tuple of (display value, score) or (None, 0.0) if nothing clears threshold
    """
    best_value = None
    best_score = 0.0

    for key, display in candidates.items():
        score = similarity(value, key)
        if score > best_score:
            best_score = score
            best_value = display

    if best_value is not None and best_score >= threshold:
        return best_value, best_score

    return None, 0.0
