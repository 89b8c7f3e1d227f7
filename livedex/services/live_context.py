"""Live context service.

Wires the two feed clients to the engine:

    route feed  -> decode -> normalize -> MapMatcher -> area view
    battle feed -> decode -> SpeciesTextResolver -> species list

and keeps the latest outcome of each feed for readers (the HTTP layer).
A watchdog thread checks both clients every heartbeat and force-reconnects
any that went stale.

Layer hierarchy:
    API -> LiveContextService -> consumers (matching, encounters) + feeds
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from livedex.consumers.encounters import AreaView, EncounterAggregator, build_area_view
from livedex.consumers.matching.aliases import alias_key
from livedex.consumers.matching.map_matcher import MapMatcher
from livedex.consumers.matching.normalizer import normalize_feed_text
from livedex.consumers.matching.result import LiveOutcome, LiveStatus
from livedex.consumers.matching.species_resolver import SpeciesTextResolver
from livedex.core.catalog import AreaCatalog, CatalogStore
from livedex.core.types import (
    ConnectionState,
    FeedKind,
    GroupedEncounter,
    MatchResult,
)
from livedex.feeds.client import StreamingClient
from livedex.feeds.protocol import coerce_feed_message
from livedex.utilities.logging import feed_logger

logger = logging.getLogger(__name__)
route_log = feed_logger(__name__, FeedKind.ROUTE)
battle_log = feed_logger(__name__, FeedKind.BATTLE)


# =============================================================================
# VIEWS
# =============================================================================


@dataclass
class LiveRouteView:
    """What the live route panel shows."""

    status: LiveStatus
    connection: ConnectionState
    raw_text: str | None = None
    cleaned_text: str | None = None
    confidence: float | None = None
    match: MatchResult | None = None
    region: str | None = None
    regions: list[str] = field(default_factory=list)
    encounters: list[GroupedEncounter] = field(default_factory=list)
    debug_key: str | None = None


@dataclass
class LiveBattleView:
    """What the live battle panel shows."""

    status: LiveStatus
    connection: ConnectionState
    raw_text: str | None = None
    confidence: float | None = None
    species: list[str] = field(default_factory=list)


# =============================================================================
# SERVICE
# =============================================================================


class LiveContextService:
    """Owns the feed clients and the latest resolution of each feed.

    Usage:
        service = create_live_context_service()
        service.start()
        view = service.route_view()
        service.stop()
    """

    def __init__(
        self,
        store: CatalogStore,
        route_client: StreamingClient,
        battle_client: StreamingClient,
        matcher: MapMatcher | None = None,
        aggregator: EncounterAggregator | None = None,
        heartbeat_seconds: float = 1.0,
    ):
        self.store = store
        self.clients: dict[FeedKind, StreamingClient] = {
            FeedKind.ROUTE: route_client,
            FeedKind.BATTLE: battle_client,
        }
        self.matcher = matcher or MapMatcher()
        self.aggregator = aggregator or EncounterAggregator()
        self.heartbeat_seconds = heartbeat_seconds

        self._lock = threading.Lock()
        self._route_outcome: LiveOutcome | None = None
        self._route_area: AreaView | None = None
        self._battle_outcome: LiveOutcome | None = None

        self._resolver: SpeciesTextResolver | None = None
        self._resolver_generation = -1

        self._unsubscribers: list[Callable[[], None]] = []
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def catalog(self) -> AreaCatalog:
        return self.store.catalog

    def client(self, kind: FeedKind) -> StreamingClient:
        return self.clients[kind]

    def feeds_enabled(self) -> dict[str, bool]:
        return {kind.value: client.enabled for kind, client in self.clients.items()}

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to both feeds, start them, and start the watchdog."""
        if not self._unsubscribers:
            self._unsubscribers = [
                self.clients[FeedKind.ROUTE].subscribe(self.handle_route_payload),
                self.clients[FeedKind.BATTLE].subscribe(self.handle_battle_payload),
            ]
        for client in self.clients.values():
            client.start()

        if self._thread is None or not self._thread.is_alive():
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._watchdog_loop, name="live-watchdog", daemon=True)
            self._thread.start()
        logger.info("[LIVE] Live context started (heartbeat %.1fs)", self.heartbeat_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("[LIVE] Watchdog thread did not stop in time")
            self._thread = None

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

        for client in self.clients.values():
            client.stop()
        logger.info("[LIVE] Live context stopped")

    def _watchdog_loop(self) -> None:
        while not self._stop_event.wait(self.heartbeat_seconds):
            try:
                self.run_watchdog_once()
            except Exception as e:
                logger.exception("[LIVE] Watchdog check failed: %s", e)

    def run_watchdog_once(self) -> list[FeedKind]:
        """Force-reconnect every stale client.

        Returns:
            Feeds that were reconnected
        """
        reconnected = []
        for kind, client in self.clients.items():
            if client.enabled and client.is_stale():
                logger.info("[LIVE] %s feed stale, forcing reconnect", kind.value, extra={"feed": kind.value})
                client.force_reconnect()
                reconnected.append(kind)
        return reconnected

    def notify_focus_regained(self) -> list[FeedKind]:
        """Resync after the consuming surface was hidden or unfocused.

        Returns:
            Feeds that were reconnected
        """
        resynced = [kind for kind, client in self.clients.items() if client.resync_if_needed()]
        if resynced:
            logger.info("[LIVE] Focus regained, resynced: %s", ", ".join(k.value for k in resynced))
        return resynced

    def reconnect(self, kind: FeedKind) -> None:
        """Forced reconnect of one feed; its panel is cleared."""
        self._clear(kind)
        self.clients[kind].force_reconnect()

    def set_feed_enabled(self, kind: FeedKind, enabled: bool) -> None:
        self.clients[kind].set_enabled(enabled)
        if not enabled:
            self._clear(kind)

    def _clear(self, kind: FeedKind) -> None:
        with self._lock:
            if kind == FeedKind.ROUTE:
                self._route_outcome = None
                self._route_area = None
            else:
                self._battle_outcome = None

    # -------------------------------------------------------------------------
    # Route feed
    # -------------------------------------------------------------------------

    def handle_route_payload(self, payload: Any) -> None:
        """Resolve one route feed payload and publish the outcome.

        Malformed payloads are ignored and the previous outcome stays.
        """
        message = coerce_feed_message(payload, FeedKind.ROUTE)
        if message is None:
            route_log.debug("[ROUTE] Ignoring undecodable payload")
            return

        cleaned = normalize_feed_text(message.text)
        if message.is_empty_signal or not cleaned:
            self._set_route(LiveOutcome.no_data(confidence=message.confidence), None)
            return

        catalog = self.catalog
        context = {"catalog_generation": self.store.generation}
        found = self.matcher.find_best_map_in_text(cleaned, catalog)
        if found is None:
            route_log.debug("[ROUTE] No map for '%s'", cleaned, extra=context)
            self._set_route(
                LiveOutcome.no_match(message.text, cleaned=cleaned, confidence=message.confidence),
                None,
            )
            return

        match = found.match
        area = build_area_view(catalog, match.canonical_map_name, match.region, self.aggregator)
        route_log.debug(
            "[ROUTE] '%s' -> %s / %s (score %s)",
            cleaned,
            match.region,
            match.canonical_map_name,
            match.score,
            extra=context,
        )
        self._set_route(
            LiveOutcome.matched(
                message.text,
                cleaned=found.cleaned,
                confidence=message.confidence,
                match=match,
            ),
            area,
        )

    def _set_route(self, outcome: LiveOutcome, area: AreaView | None) -> None:
        with self._lock:
            self._route_outcome = outcome
            self._route_area = area

    def route_view(self) -> LiveRouteView:
        client = self.clients[FeedKind.ROUTE]
        with self._lock:
            outcome = self._route_outcome
            area = self._route_area

        connection = client.state
        if outcome is None or not client.enabled:
            return LiveRouteView(status=LiveStatus.NOT_CONNECTED, connection=connection)

        return LiveRouteView(
            status=outcome.status,
            connection=connection,
            raw_text=outcome.raw_text,
            cleaned_text=outcome.cleaned_text,
            confidence=outcome.confidence,
            match=outcome.match,
            region=area.region if area else None,
            regions=list(area.regions) if area else [],
            encounters=list(area.encounters) if area else [],
            debug_key=alias_key(outcome.raw_text) if outcome.raw_text else None,
        )

    # -------------------------------------------------------------------------
    # Battle feed
    # -------------------------------------------------------------------------

    def species_resolver(self) -> SpeciesTextResolver:
        """Resolver for the current catalog snapshot (rebuilt after reload)."""
        generation = self.store.generation
        if self._resolver is None or self._resolver_generation != generation:
            self._resolver = SpeciesTextResolver.for_catalog(self.catalog)
            self._resolver_generation = generation
            battle_log.debug(
                "[BATTLE] Species patterns built (%d species)",
                self._resolver.species_count,
                extra={"catalog_generation": generation},
            )
        return self._resolver

    def handle_battle_payload(self, payload: Any) -> None:
        message = coerce_feed_message(payload, FeedKind.BATTLE)
        if message is None:
            battle_log.debug("[BATTLE] Ignoring undecodable payload")
            return

        if message.is_empty_signal or not normalize_feed_text(message.text):
            outcome = LiveOutcome.no_data(confidence=message.confidence)
        else:
            species = self.species_resolver().resolve(message.text)
            if species:
                outcome = LiveOutcome.matched(message.text, confidence=message.confidence, species=species)
            else:
                outcome = LiveOutcome.no_match(message.text, confidence=message.confidence)

        with self._lock:
            self._battle_outcome = outcome

    def battle_view(self) -> LiveBattleView:
        client = self.clients[FeedKind.BATTLE]
        with self._lock:
            outcome = self._battle_outcome

        connection = client.state
        if outcome is None or not client.enabled:
            return LiveBattleView(status=LiveStatus.NOT_CONNECTED, connection=connection)

        return LiveBattleView(
            status=outcome.status,
            connection=connection,
            raw_text=outcome.raw_text,
            confidence=outcome.confidence,
            species=list(outcome.species),
        )

    # -------------------------------------------------------------------------
    # Manual queries and catalog
    # -------------------------------------------------------------------------

    def match_area(self, query: str, region: str | None = None) -> tuple[MatchResult | None, AreaView | None]:
        """Typed area search, using the same matcher as the live feed.

        Args:
            query: User-typed area name
            region: Region to show (defaults to the matched entry's region)
        """
        catalog = self.catalog
        match = self.matcher.match(query, catalog)
        if match is None:
            return None, None
        area = build_area_view(catalog, match.canonical_map_name, region or match.region, self.aggregator)
        return match, area

    def reload_catalog(self, path: str | Path | None = None) -> AreaCatalog:
        """Hot-reload the catalog and re-resolve the cached feed payloads.

        Raises:
            CatalogError: Load failed (previous snapshot kept)
        """
        catalog = self.store.reload(path)
        for kind, handler in (
            (FeedKind.ROUTE, self.handle_route_payload),
            (FeedKind.BATTLE, self.handle_battle_payload),
        ):
            cached = self.clients[kind].last_payload
            if cached is not None:
                handler(cached)
        return catalog


def create_live_context_service(
    store: CatalogStore | None = None,
    route_client: StreamingClient | None = None,
    battle_client: StreamingClient | None = None,
) -> LiveContextService:
    """Build a LiveContextService from Config.

    The catalog is not loaded here; call store.reload() (the API lifespan
    does this during startup).
    """
    from livedex.config import Config

    return LiveContextService(
        store=store or CatalogStore(path=Config.CATALOG_PATH),
        route_client=route_client or StreamingClient(Config.route_feed_config()),
        battle_client=battle_client or StreamingClient(Config.battle_feed_config()),
        heartbeat_seconds=Config.HEARTBEAT_SECONDS,
    )
