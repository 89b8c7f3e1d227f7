"""PokeAPI provider (ability and move descriptions)."""

from livedex.providers.pokeapi.client import POKEAPI_BASE_URL, PokeAPIClient, resource_slug

__all__ = ["POKEAPI_BASE_URL", "PokeAPIClient", "resource_slug"]
