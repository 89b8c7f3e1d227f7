"""Shared fixtures: a small multi-region catalog and feed fakes.

The feed fakes stand in for the socket and timer seams of StreamingClient
so the state machine runs synchronously, without threads or a network.
"""

import httpx
import pytest

from livedex.core.catalog import AreaCatalog, CatalogStore
from livedex.core.types import FeedConfig, FeedKind
from livedex.feeds.client import StreamingClient
from livedex.providers.pokeapi.client import PokeAPIClient


def row(species_id, name, method, rarity=None, lo=None, hi=None, **extra):
    data = {"speciesId": species_id, "speciesName": name, "method": method}
    if rarity is not None:
        data["rarity"] = rarity
    if lo is not None:
        data["minLevel"] = lo
    if hi is not None:
        data["maxLevel"] = hi
    data.update(extra)
    return data


SAMPLE_AREAS = {
    "Kanto": {
        "Route 1": [
            row(16, "Pidgey", "Grass", "Common", 2, 4),
            row(19, "Rattata", "Grass", "Common", 2, 4),
        ],
        "Route 10": [
            row(100, "Voltorb", "Grass", "Uncommon", 14, 17),
            row(21, "Spearow", "Grass", "Common", 13, 17),
        ],
        "Cerulean City": [
            row(54, "Psyduck", "Surfing", "Common", 15, 20),
        ],
        "Viridian Forest": [
            row(10, "Caterpie", "Grass", "Common", 3, 5),
        ],
        "Mt. Moon": [
            row(41, "Zubat", "Cave", "Very Common", 7, 10),
            row(41, "Zubat", "Horde", "Rare", 7, 10),
            row(35, "Clefairy", "Cave", "Rare", 8, 12),
        ],
        "---": [
            row(1, "Bulbasaur", "Gift"),
        ],
    },
    "Johto": {
        "Route 10": [
            row(100, "Voltorb", "Grass", "Common", 15, 18),
        ],
        "Route 29": [
            row(16, "Pidgey", "Grass (Morning/Day)", "Common", 2, 4),
            row(163, "Hoothoot", "Grass (Night)", "Common", 2, 4),
        ],
    },
    "Hoenn": {
        "Route 110": [
            row(309, "Electrike", "Grass", "Common", 12, 14),
        ],
    },
    "Sinnoh": {
        "Route 212 (North)": [
            row(315, "Roselia", "Grass", "Common", 22, 24),
        ],
        "Route 212 (South)": [
            row(315, "Roselia", "Grass", "Rare", 23, 25),
            row(453, "Croagunk", "Grass", "Uncommon", 22, 24),
        ],
        "Mt. Coronet": [
            row(74, "Geodude", "Cave", "Common", 30, 33),
        ],
        "Victory Road 1F": [
            row(75, "Graveler", "Cave", "Common", 40, 43),
        ],
        "Victory Road 2F": [
            row(95, "Onix", "Cave", "Uncommon", 41, 44),
        ],
    },
}


@pytest.fixture
def catalog() -> AreaCatalog:
    return AreaCatalog.from_mapping(SAMPLE_AREAS)


@pytest.fixture
def store(catalog) -> CatalogStore:
    return CatalogStore(catalog)


# =============================================================================
# FEED FAKES
# =============================================================================


class FakeConnection:
    """Connection handle that lets a test play the server side."""

    def __init__(self, url, callbacks):
        self.url = url
        self.callbacks = callbacks
        self.closed = False

    def open(self):
        self.callbacks.on_open()

    def message(self, raw):
        self.callbacks.on_message(raw)

    def drop(self, reason="closed"):
        self.callbacks.on_close(reason)

    def close(self):
        self.closed = True


class FakeConnectionFactory:
    def __init__(self):
        self.connections: list[FakeConnection] = []

    def __call__(self, url, callbacks):
        connection = FakeConnection(url, callbacks)
        self.connections.append(connection)
        return connection

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback()


class FakeTimerFactory:
    def __init__(self):
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]


class ManualClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


ROUTE_CONFIG = FeedConfig(
    kind=FeedKind.ROUTE,
    url="ws://127.0.0.1:8765/live",
    stale_after_seconds=6.0,
    reconnect_delay_seconds=1.5,
)

BATTLE_CONFIG = FeedConfig(
    kind=FeedKind.BATTLE,
    url="ws://127.0.0.1:8765/battle",
    stale_after_seconds=2.0,
    reconnect_delay_seconds=1.5,
)


class FeedHarness:
    """A StreamingClient wired to fakes."""

    def __init__(self, config: FeedConfig, clock: ManualClock):
        self.connections = FakeConnectionFactory()
        self.timers = FakeTimerFactory()
        self.clock = clock
        self.client = StreamingClient(
            config,
            connection_factory=self.connections,
            timer_factory=self.timers,
            clock=clock,
        )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def route_feed(clock) -> FeedHarness:
    return FeedHarness(ROUTE_CONFIG, clock)


@pytest.fixture
def battle_feed(clock) -> FeedHarness:
    return FeedHarness(BATTLE_CONFIG, clock)


@pytest.fixture
def connection_factory() -> FakeConnectionFactory:
    return FakeConnectionFactory()


@pytest.fixture
def timer_factory() -> FakeTimerFactory:
    return FakeTimerFactory()


# =============================================================================
# POKEAPI FAKES
# =============================================================================

ABILITY_STATIC = {
    "id": 9,
    "name": "static",
    "names": [
        {"language": {"name": "ja"}, "name": "せいでんき"},
        {"language": {"name": "en"}, "name": "Static"},
    ],
    "effect_entries": [
        {"language": {"name": "de"}, "effect": "Kann bei Berührung paralysieren.", "short_effect": "Paralyse."},
        {
            "language": {"name": "en"},
            "effect": "Whenever a move makes contact with this Pokémon, the move's user has a 30% chance of being paralyzed.",
            "short_effect": "Has a 30% chance of paralyzing attacking Pokémon on contact.",
        },
    ],
    "flavor_text_entries": [
        {"language": {"name": "en"}, "flavor_text": "Contact with the\nPOKéMON may cause\nparalysis."},
        {"language": {"name": "en"}, "flavor_text": "The Pokémon is charged with static\nelectricity and may paralyze attackers."},
    ],
}

MOVE_THUNDER_PUNCH = {
    "id": 9,
    "name": "thunder-punch",
    "names": [{"language": {"name": "en"}, "name": "Thunder Punch"}],
    "effect_chance": 10,
    "effect_entries": [
        {
            "language": {"name": "en"},
            "effect": "Inflicts regular damage. Has a $effect_chance% chance to paralyze the target.",
            "short_effect": "Has a $effect_chance% chance to paralyze the target.",
        }
    ],
    "flavor_text_entries": [],
    "type": {"name": "electric"},
    "damage_class": {"name": "physical"},
    "power": 75,
    "accuracy": 100,
    "pp": 15,
}

POKEAPI_RESOURCES = {
    "/api/v2/ability/static": ABILITY_STATIC,
    "/api/v2/move/thunder-punch": MOVE_THUNDER_PUNCH,
}


class FakePokeAPI:
    """httpx handler serving canned PokeAPI resources."""

    def __init__(self):
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        if path in POKEAPI_RESOURCES:
            return httpx.Response(200, json=POKEAPI_RESOURCES[path])
        if path.endswith("/flaky"):
            return httpx.Response(500, text="upstream error")
        return httpx.Response(404, json={"detail": "Not found."})


@pytest.fixture
def fake_pokeapi() -> FakePokeAPI:
    return FakePokeAPI()


@pytest.fixture
def pokeapi_client(fake_pokeapi) -> PokeAPIClient:
    client = PokeAPIClient(transport=httpx.MockTransport(fake_pokeapi), retry_delay=0)
    yield client
    client.close()
