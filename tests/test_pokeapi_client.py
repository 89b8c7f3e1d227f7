"""Tests for the PokeAPI client and cached description lookups."""

import httpx
import pytest

from livedex.providers.pokeapi.client import PokeAPIClient, resource_slug
from livedex.services.descriptions import DescriptionService, parse_description
from livedex.utilities.cache import EvictionPolicy

# =============================================================================
# CLIENT
# =============================================================================


class TestResourceSlug:
    @pytest.mark.parametrize(
        "name,slug",
        [
            ("Thunder Punch", "thunder-punch"),
            ("thunder-punch", "thunder-punch"),
            ("King's Shield", "king-s-shield"),
            ("  Static ", "static"),
            ("", ""),
        ],
    )
    def test_slug(self, name, slug):
        assert resource_slug(name) == slug


class TestPokeAPIClient:
    def test_get_ability(self, pokeapi_client, fake_pokeapi):
        data = pokeapi_client.get_ability("Static")
        assert data["name"] == "static"
        assert fake_pokeapi.requests == ["/api/v2/ability/static"]

    def test_get_move(self, pokeapi_client):
        assert pokeapi_client.get_move("Thunder Punch")["power"] == 75

    def test_not_found_is_not_retried(self, pokeapi_client, fake_pokeapi):
        assert pokeapi_client.get_move("Not A Move") is None
        assert len(fake_pokeapi.requests) == 1

    def test_server_error_retried_then_none(self, pokeapi_client, fake_pokeapi):
        assert pokeapi_client.get_move("flaky") is None
        assert fake_pokeapi.requests == ["/api/v2/move/flaky"] * 3

    def test_connection_error_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request.url.path)
            if len(attempts) < 2:
                raise httpx.ConnectError("boom", request=request)
            return httpx.Response(200, json={"name": "static"})

        client = PokeAPIClient(transport=httpx.MockTransport(handler), retry_delay=0)
        try:
            assert client.get_ability("static") == {"name": "static"}
        finally:
            client.close()
        assert len(attempts) == 2

    def test_invalid_json(self):
        client = PokeAPIClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
            retry_count=2,
            retry_delay=0,
        )
        try:
            assert client.get_ability("static") is None
        finally:
            client.close()

    def test_empty_name_skips_request(self, pokeapi_client, fake_pokeapi):
        assert pokeapi_client.get_ability("  ") is None
        assert fake_pokeapi.requests == []

    def test_custom_base_url(self, fake_pokeapi):
        client = PokeAPIClient(
            base_url="https://mirror.example/api/v2/",
            transport=httpx.MockTransport(fake_pokeapi),
            retry_delay=0,
        )
        try:
            assert client.get_ability("static") is not None
        finally:
            client.close()


# =============================================================================
# DESCRIPTIONS
# =============================================================================


class TestParseDescription:
    def test_ability(self, pokeapi_client):
        description = parse_description("ability", pokeapi_client.get_ability("static"), "static")

        assert description.name == "Static"
        assert description.slug == "static"
        assert description.short_effect == "Has a 30% chance of paralyzing attacking Pokémon on contact."
        # Newest English entry, line breaks collapsed
        assert description.flavor_text == "The Pokémon is charged with static electricity and may paralyze attackers."
        assert description.power is None

    def test_move(self, pokeapi_client):
        description = parse_description("move", pokeapi_client.get_move("thunder-punch"), "Thunder Punch")

        assert description.name == "Thunder Punch"
        assert description.short_effect == "Has a 10% chance to paralyze the target."
        assert description.effect == "Inflicts regular damage. Has a 10% chance to paralyze the target."
        assert (description.type, description.category) == ("electric", "physical")
        assert (description.power, description.accuracy, description.pp) == (75, 100, 15)
        assert description.flavor_text is None

    def test_missing_fields(self):
        description = parse_description("move", {}, "Splash")
        assert description.name == "Splash"
        assert description.slug == "splash"
        assert description.effect is None


class TestDescriptionService:
    def test_describe_is_cached_forever(self, pokeapi_client, fake_pokeapi):
        service = DescriptionService(pokeapi_client)

        first = service.describe("ability", "Static")
        second = service.describe("Ability", "static")

        assert first is second
        assert fake_pokeapi.requests == ["/api/v2/ability/static"]
        assert service.cache.policy == EvictionPolicy.NEVER

    def test_misses_are_not_cached(self, pokeapi_client, fake_pokeapi):
        service = DescriptionService(pokeapi_client)

        assert service.describe("move", "Not A Move") is None
        assert service.describe("move", "Not A Move") is None

        assert len(fake_pokeapi.requests) == 2
        assert service.cache.size == 0

    def test_unknown_kind(self, pokeapi_client):
        with pytest.raises(ValueError, match="Unknown description kind"):
            DescriptionService(pokeapi_client).describe("item", "Potion")

    def test_empty_name(self, pokeapi_client, fake_pokeapi):
        assert DescriptionService(pokeapi_client).describe("move", "!!") is None
        assert fake_pokeapi.requests == []

    def test_close(self, fake_pokeapi):
        client = PokeAPIClient(transport=httpx.MockTransport(fake_pokeapi), retry_delay=0)
        service = DescriptionService(client)
        service.describe("move", "Thunder Punch")

        service.close()
        # A closed client reopens on demand
        assert service.describe("ability", "static") is not None
        service.close()
