"""Ability and move descriptions.

Fetched once from PokeAPI and kept for the process lifetime
(EvictionPolicy.NEVER): game text doesn't change while the app runs.
Failed lookups are not cached, so a later request retries.
"""

import logging
from dataclasses import dataclass
from typing import Any

from livedex.providers.pokeapi.client import PokeAPIClient, resource_slug
from livedex.utilities.cache import EvictionPolicy, LookupCache, make_cache_key

logger = logging.getLogger(__name__)

DESCRIPTION_KINDS = ("ability", "move")


@dataclass
class Description:
    """Display data for an ability or move."""

    kind: str
    name: str
    slug: str
    effect: str | None = None
    short_effect: str | None = None
    flavor_text: str | None = None
    # Moves only
    type: str | None = None
    category: str | None = None
    power: int | None = None
    accuracy: int | None = None
    pp: int | None = None


def _english(entries: list[dict[str, Any]] | None, key: str) -> str | None:
    """Last English entry's text (PokeAPI lists newest versions last)."""
    text = None
    for entry in entries or []:
        if (entry.get("language") or {}).get("name") == "en" and entry.get(key):
            text = entry[key]
    return " ".join(str(text).split()) if text else None


def _display_name(data: dict[str, Any], fallback: str) -> str:
    return _english(data.get("names"), "name") or fallback


def parse_description(kind: str, data: dict[str, Any], requested: str) -> Description:
    """Build a Description from a raw PokeAPI resource."""
    effect = _english(data.get("effect_entries"), "effect")
    short_effect = _english(data.get("effect_entries"), "short_effect")

    # Move effects carry a "$effect_chance" placeholder
    chance = data.get("effect_chance")
    if chance is not None:
        effect = effect.replace("$effect_chance", str(chance)) if effect else effect
        short_effect = short_effect.replace("$effect_chance", str(chance)) if short_effect else short_effect

    description = Description(
        kind=kind,
        name=_display_name(data, requested),
        slug=data.get("name") or resource_slug(requested),
        effect=effect,
        short_effect=short_effect,
        flavor_text=_english(data.get("flavor_text_entries"), "flavor_text"),
    )
    if kind == "move":
        description.type = (data.get("type") or {}).get("name")
        description.category = (data.get("damage_class") or {}).get("name")
        description.power = data.get("power")
        description.accuracy = data.get("accuracy")
        description.pp = data.get("pp")
    return description


class DescriptionService:
    """Cached ability/move lookups.

    Usage:
        service = DescriptionService(PokeAPIClient())
        info = service.describe("move", "Thunder Punch")
    """

    def __init__(self, client: PokeAPIClient, cache: LookupCache | None = None):
        self._client = client
        self._cache = cache or LookupCache(policy=EvictionPolicy.NEVER)

    @property
    def cache(self) -> LookupCache:
        return self._cache

    def close(self) -> None:
        self._client.close()

    def describe(self, kind: str, name: str) -> Description | None:
        """Look up a description.

        Raises:
            ValueError: Unknown kind

        Returns:
            Description, or None when PokeAPI has no such resource
        """
        kind = kind.strip().lower()
        if kind not in DESCRIPTION_KINDS:
            raise ValueError(f"Unknown description kind '{kind}' (expected one of {DESCRIPTION_KINDS})")

        slug = resource_slug(name)
        if not slug:
            return None

        key = make_cache_key(kind, slug)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        fetch = self._client.get_ability if kind == "ability" else self._client.get_move
        data = fetch(slug)
        if not data:
            logger.info("[DESCRIBE] No %s found for '%s'", kind, name)
            return None

        description = parse_description(kind, data, name)
        self._cache.set(key, description)
        return description


def create_description_service() -> DescriptionService:
    """Build a DescriptionService from Config."""
    from livedex.config import Config

    return DescriptionService(PokeAPIClient(base_url=Config.POKEAPI_BASE))
