"""Shared utilities (caching, logging, fuzzy matching, constants)."""
