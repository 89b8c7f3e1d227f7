"""Tests for map matching against the area catalog."""

import pytest

from livedex.consumers.matching.map_matcher import (
    MapMatcher,
    MatchWeights,
    get_map_matcher,
    is_ambiguous_query,
    score_names,
)
from livedex.core.catalog import AreaCatalog


@pytest.fixture
def matcher():
    return MapMatcher()


# =============================================================================
# AMBIGUITY GUARDS
# =============================================================================


class TestAmbiguousQueries:
    @pytest.mark.parametrize("text", ["r", "ro", "rou", "route", "Ce", "Mt. Mo", "Mt Co", "--"])
    def test_rejected(self, text):
        assert is_ambiguous_query(text)

    @pytest.mark.parametrize("text", ["Route 10", "10", "Mt. Moon", "Cerulean", "Mt. Cor"])
    def test_accepted(self, text):
        assert not is_ambiguous_query(text)

    @pytest.mark.parametrize("text", ["r", "ro", "route", "Ce", "Mt. Mo"])
    def test_matcher_returns_none(self, matcher, catalog, text):
        assert matcher.match(text, catalog) is None


# =============================================================================
# ROUTE NUMBERS
# =============================================================================


class TestRouteMatching:
    def test_exact_route(self, matcher, catalog):
        result = matcher.match("Route 10", catalog)
        assert result.raw_map_name == "Route 10"
        assert result.region == "Kanto"  # first in catalog order
        assert result.score == 100

    def test_channel_marker_ignored(self, matcher, catalog):
        result = matcher.match("Route 10 Ch 2", catalog)
        assert result.raw_map_name == "Route 10"

    def test_bare_number(self, matcher, catalog):
        assert matcher.match("10", catalog).raw_map_name == "Route 10"

    def test_never_matches_a_longer_number(self, matcher, catalog):
        assert matcher.match("Route 110", catalog).region == "Hoenn"
        assert matcher.match("Route 11", catalog) is None

    def test_route_halves_use_grouping_name(self, matcher, catalog):
        result = matcher.match("Route 212", catalog)
        assert result.raw_map_name == "Route 212 (North)"
        assert result.canonical_map_name == "Route 212"
        assert result.region == "Sinnoh"


# =============================================================================
# FREE TEXT
# =============================================================================


class TestFreeTextMatching:
    def test_exact_alias(self, matcher, catalog):
        result = matcher.match("Mt. Moon", catalog)
        assert result.raw_map_name == "Mt. Moon"
        assert result.score == 100

    def test_structural_word_dropped(self, matcher, catalog):
        result = matcher.match("Cerulean", catalog)
        assert result.raw_map_name == "Cerulean City"
        assert result.score == 100

    def test_mount_spellings(self, matcher, catalog):
        result = matcher.match("Mount Coronet 4F Ch 2", catalog)
        assert result.raw_map_name == "Mt. Coronet"
        assert result.region == "Sinnoh"

    def test_sinnoh_victory_road(self, matcher, catalog):
        result = matcher.match("Victory Road", catalog)
        assert result.raw_map_name == "Victory Road 1F"
        assert result.canonical_map_name == "Victory Road"

    def test_partial_name_scored(self, matcher, catalog):
        result = matcher.match("Viridian Fores", catalog)
        assert result.raw_map_name == "Viridian Forest"
        assert result.score == 59

    def test_threshold_is_tunable(self, catalog):
        strict = MapMatcher(MatchWeights(threshold=60))
        assert strict.match("Viridian Fores", catalog) is None

    def test_nothing_above_threshold(self, matcher, catalog):
        assert matcher.match("qq zz", catalog) is None

    def test_shorter_name_wins_tie(self, matcher):
        catalog = AreaCatalog.from_mapping(
            {
                "Kanto": {
                    "Cerulean City Outside": [],
                    "Cerulean City": [],
                }
            }
        )
        result = matcher.match("Cerulean", catalog)
        assert result.raw_map_name == "Cerulean City"

    def test_empty_catalog(self, matcher):
        assert matcher.match("Route 10", AreaCatalog()) is None

    @pytest.mark.parametrize("text", ["Route Gate", "Route Entrance", "Route Exit"])
    def test_structural_words_never_pick_a_route_number(self, matcher, text):
        catalog = AreaCatalog.from_mapping({"Kanto": {"Route 10": [], "Route 8": [], "Lavender Town": []}})
        assert matcher.match(text, catalog) is None

    def test_numberless_text_skips_numbered_routes(self, matcher):
        catalog = AreaCatalog.from_mapping({"Kanto": {"Route 8": [], "Lavender Town": []}})
        result = matcher.match("Lavender Tow", catalog)
        assert result.raw_map_name == "Lavender Town"


class TestScoreNames:
    def test_identical(self):
        assert score_names("route10", "route10") == 100

    def test_empty(self):
        assert score_names("", "route10") == 0

    def test_route_numbers_share_no_bonus(self):
        assert score_names("route10", "route110") == 13

    def test_prefix_and_contains(self):
        # 25 + 20 + round(13/14 * 15)
        assert score_names("viridianforest", "viridianfores") == 59


# =============================================================================
# SUBSTRING SEARCH
# =============================================================================


class TestFindBestMapInText:
    def test_leading_garbage_dropped(self, matcher, catalog):
        found = matcher.find_best_map_in_text("xx qq Route 10", catalog)
        assert found.cleaned == "Route 10"
        assert found.match.raw_map_name == "Route 10"
        assert found.match.score == 100

    def test_longer_span_kept_on_ties(self, matcher, catalog):
        found = matcher.find_best_map_in_text("Route 10 Ch 2", catalog)
        assert found.cleaned == "Route 10"

    def test_no_match(self, matcher, catalog):
        assert matcher.find_best_map_in_text("qq zz", catalog) is None

    def test_empty_text(self, matcher, catalog):
        assert matcher.find_best_map_in_text("", catalog) is None
        assert matcher.find_best_map_in_text("----", catalog) is None


def test_default_matcher_is_shared():
    assert get_map_matcher() is get_map_matcher()
