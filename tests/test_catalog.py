"""Tests for catalog loading and atomic reload."""

import json

import pytest

from livedex.core.catalog import AreaCatalog, CatalogError, CatalogStore, encounter_from_dict, load_catalog
from livedex.core.types import RawEncounter


class TestEncounterFromDict:
    def test_camel_case_fields(self):
        encounter = encounter_from_dict(
            {
                "speciesId": 16,
                "speciesName": " Pidgey ",
                "method": "Grass",
                "rarity": "Common",
                "minLevel": 2,
                "maxLevel": "4",
                "items": ["Oran Berry"],
            }
        )
        assert encounter == RawEncounter(
            species_id=16,
            species_name="Pidgey",
            method="Grass",
            rarity="Common",
            min_level=2,
            max_level=4,
            items=("Oran Berry",),
        )

    def test_legacy_fields(self):
        encounter = encounter_from_dict({"monId": 19, "pokemon": "Rattata", "type": "Grass", "min": 3, "max": 5})
        assert encounter.species_id == 19
        assert encounter.species_name == "Rattata"
        assert encounter.method == "Grass"
        assert (encounter.min_level, encounter.max_level) == (3, 5)

    def test_items_from_string(self):
        encounter = encounter_from_dict({"speciesName": "Pikachu", "item": "Light Ball, Oran Berry"})
        assert encounter.items == ("Light Ball", "Oran Berry")

    def test_bad_levels_dropped(self):
        encounter = encounter_from_dict({"speciesName": "Ditto", "minLevel": "??", "maxLevel": True})
        assert encounter.min_level is None
        assert encounter.max_level is None

    def test_row_without_species(self):
        assert encounter_from_dict({"method": "Grass"}) is None
        assert encounter_from_dict({"speciesName": "  "}) is None


class TestAreaCatalog:
    def test_from_mapping(self, catalog):
        assert catalog.regions == ["Kanto", "Johto", "Hoenn", "Sinnoh"]
        assert catalog.get("Kanto", "Route 10") is not None
        assert catalog.get("Kanto", "Route 99") is None

    def test_dash_only_maps_skipped(self, catalog):
        assert catalog.get("Kanto", "---") is None
        assert all(entry.map_name != "---" for entry in catalog)

    def test_mojibake_map_names_fixed(self):
        catalog = AreaCatalog.from_mapping({"Kanto": {"PokÃ©mon League": []}})
        assert catalog.get("Kanto", "Pokémon League") is not None

    def test_species_names_distinct_in_order(self, catalog):
        names = catalog.species_names()
        assert names[:3] == ("Pidgey", "Rattata", "Voltorb")
        assert names.count("Zubat") == 1

    def test_invalid_structure(self):
        with pytest.raises(CatalogError):
            AreaCatalog.from_mapping(["Route 1"])
        with pytest.raises(CatalogError):
            AreaCatalog.from_mapping({"Kanto": ["Route 1"]})


class TestLoadCatalog:
    def test_load(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps({"Kanto": {"Route 1": [{"speciesName": "Pidgey", "method": "Grass"}]}}))

        catalog = load_catalog(path)

        assert len(catalog) == 1
        assert catalog.species_names() == ("Pidgey",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text("{not json")
        with pytest.raises(CatalogError, match="unreadable"):
            load_catalog(path)


class TestCatalogStore:
    def test_replace_bumps_generation(self, store, catalog):
        assert store.generation == 0
        store.replace(AreaCatalog())
        assert store.generation == 1
        assert len(store.catalog) == 0

    def test_reload_from_configured_path(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps({"Johto": {"Route 29": []}}))
        store = CatalogStore(path=path)

        store.reload()

        assert store.catalog.regions == ["Johto"]
        assert store.generation == 1

    def test_failed_reload_keeps_snapshot(self, store, catalog, tmp_path):
        with pytest.raises(CatalogError):
            store.reload(tmp_path / "missing.json")

        assert store.catalog is catalog
        assert store.generation == 0
        assert store.path is None

    def test_reload_without_path(self):
        with pytest.raises(CatalogError, match="No catalog path"):
            CatalogStore().reload()
