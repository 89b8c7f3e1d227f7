"""Provider layer - external data sources.

Only auxiliary lookups live here; the area catalog is a local file.
"""

from livedex.providers.pokeapi import PokeAPIClient

__all__ = ["PokeAPIClient"]
