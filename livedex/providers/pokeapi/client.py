"""PokeAPI HTTP client.

Handles raw HTTP requests to PokeAPI endpoints.
No data transformation - just fetch and return JSON.
"""

import logging
import re
import threading
import time

import httpx

logger = logging.getLogger(__name__)

POKEAPI_BASE_URL = "https://pokeapi.co/api/v2"


def resource_slug(name: str) -> str:
    """PokeAPI resource slug ("Thunder Punch" -> "thunder-punch")."""
    return re.sub(r"[^a-z0-9]+", "-", str(name).lower()).strip("-")


class PokeAPIClient:
    """Low-level PokeAPI client."""

    def __init__(
        self,
        base_url: str = POKEAPI_BASE_URL,
        timeout: float = 10.0,
        retry_count: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retry_count = retry_count
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.Client | None = None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            with self._lock:
                # Double-check after acquiring lock
                if self._client is None:
                    self._client = httpx.Client(
                        timeout=self._timeout,
                        transport=self._transport,
                        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                    )
        return self._client

    def _request(self, url: str) -> dict | None:
        """Make HTTP request with retry logic. A 404 is final."""
        for attempt in range(self._retry_count):
            try:
                client = self._get_client()
                response = client.get(url)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 404:
                    logger.debug("[POKEAPI] Not found: %s", url)
                    return None
                logger.warning("[POKEAPI] HTTP %s for %s", status, url)
                if attempt < self._retry_count - 1:
                    time.sleep(self._retry_delay * (attempt + 1))
                    continue
                return None
            except (httpx.RequestError, ValueError) as e:
                # ValueError: body was not JSON
                logger.warning("[POKEAPI] Request failed for %s: %s", url, e)
                if attempt < self._retry_count - 1:
                    time.sleep(self._retry_delay * (attempt + 1))
                    continue
                return None

        return None

    def close(self) -> None:
        with self._lock:
            if self._client:
                self._client.close()
                self._client = None

    def get_ability(self, name: str) -> dict | None:
        """Fetch an ability resource.

        Returns:
            Raw PokeAPI response or None on error
        """
        slug = resource_slug(name)
        if not slug:
            return None
        return self._request(f"{self._base_url}/ability/{slug}")

    def get_move(self, name: str) -> dict | None:
        """Fetch a move resource.

        Returns:
            Raw PokeAPI response or None on error
        """
        slug = resource_slug(name)
        if not slug:
            return None
        return self._request(f"{self._base_url}/move/{slug}")
