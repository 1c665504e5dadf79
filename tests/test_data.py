"""Tests for the data loading module and the bundled map and plant catalog."""

import json
import tempfile
from pathlib import Path

import pytest

from core.constants import PlantType
from data.loader import (
    CityGraphLoader,
    DataLoadError,
    get_map_stats,
    load_city_graph,
    load_default_map,
    load_default_power_plants,
    load_power_plants,
    parse_power_plant,
    resource_path,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def minimal_map() -> dict:
    return {
        "cities": [
            {"id": "a", "name": "Alpha", "region": "north"},
            {"id": "b", "name": "Bravo", "region": "north"},
            {"id": "c", "name": "Charlie", "region": "south"},
        ],
        "edges": [["a", "b", 3], ["b", "c", 4]],
    }


def _write_json(data) -> Path:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(data, f)
        return Path(f.name)


# =============================================================================
# CityGraphLoader Tests
# =============================================================================


class TestCityGraphLoader:
    """Test CityGraphLoader class."""

    def test_load_minimal_map(self, minimal_map: dict):
        graph = CityGraphLoader().load_from_dict(minimal_map)
        assert len(graph) == 3
        assert graph.shortest_path_cost("a", "c") == 7

    def test_load_from_file(self, minimal_map: dict):
        path = _write_json(minimal_map)
        try:
            graph = load_city_graph(path)
            assert graph.has_city("b")
        finally:
            path.unlink()

    def test_missing_file(self):
        with pytest.raises(DataLoadError, match="not found"):
            load_city_graph("/nonexistent/map.json")

    def test_invalid_json(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("{not json")
            path = Path(f.name)
        try:
            with pytest.raises(DataLoadError, match="Invalid JSON"):
                load_city_graph(path)
        finally:
            path.unlink()

    def test_missing_key(self):
        with pytest.raises(DataLoadError, match="edges"):
            CityGraphLoader().load_from_dict({"cities": []})

    def test_empty_map(self):
        with pytest.raises(DataLoadError):
            CityGraphLoader().load_from_dict({"cities": [], "edges": []})

    def test_city_missing_field(self, minimal_map: dict):
        del minimal_map["cities"][0]["region"]
        with pytest.raises(DataLoadError, match="region"):
            CityGraphLoader().load_from_dict(minimal_map)

    def test_duplicate_edge(self, minimal_map: dict):
        minimal_map["edges"].append(["b", "a", 3])
        with pytest.raises(DataLoadError, match="Duplicate edge"):
            CityGraphLoader().load_from_dict(minimal_map)

    def test_negative_cost(self, minimal_map: dict):
        minimal_map["edges"][0] = ["a", "b", -2]
        with pytest.raises(DataLoadError, match="Invalid cost"):
            CityGraphLoader().load_from_dict(minimal_map)

    def test_unknown_city_in_edge(self, minimal_map: dict):
        minimal_map["edges"].append(["a", "zzz", 5])
        with pytest.raises(DataLoadError, match="unknown city"):
            CityGraphLoader().load_from_dict(minimal_map)

    def test_disconnected_map(self, minimal_map: dict):
        minimal_map["cities"].append({"id": "d", "name": "Delta", "region": "south"})
        with pytest.raises(DataLoadError, match="not connected"):
            CityGraphLoader().load_from_dict(minimal_map)

    def test_disconnected_map_allowed(self, minimal_map: dict):
        minimal_map["cities"].append({"id": "d", "name": "Delta", "region": "south"})
        graph = CityGraphLoader(require_connected=False).load_from_dict(minimal_map)
        assert len(graph) == 4


# =============================================================================
# Power Plant Catalog Tests
# =============================================================================


class TestPowerPlantLoading:
    """Test plant catalog parsing."""

    def test_parse_defaults_storage(self):
        plant = parse_power_plant(
            {"number": 4, "type": "coal", "resource_cost": 2, "cities_powered": 1}
        )
        assert plant.plant_type == PlantType.COAL
        assert plant.resource_storage == 4

    def test_parse_invalid_type(self):
        with pytest.raises(DataLoadError, match="Invalid plant type"):
            parse_power_plant(
                {"number": 4, "type": "wind", "resource_cost": 0, "cities_powered": 1}
            )

    def test_parse_missing_field(self):
        with pytest.raises(DataLoadError, match="cities_powered"):
            parse_power_plant({"number": 4, "type": "coal", "resource_cost": 2})

    def test_reserved_number(self):
        with pytest.raises(DataLoadError, match="reserved"):
            parse_power_plant(
                {"number": 999, "type": "eco", "resource_cost": 0, "cities_powered": 0}
            )

    def test_duplicate_numbers(self):
        entry = {"number": 4, "type": "coal", "resource_cost": 2, "cities_powered": 1}
        path = _write_json({"plants": [entry, entry]})
        try:
            with pytest.raises(DataLoadError, match="Duplicate"):
                load_power_plants(path)
        finally:
            path.unlink()

    def test_catalog_is_sorted(self):
        entries = [
            {"number": n, "type": "coal", "resource_cost": 1, "cities_powered": 1}
            for n in (9, 3, 5)
        ]
        path = _write_json({"plants": entries})
        try:
            assert [p.number for p in load_power_plants(path)] == [3, 5, 9]
        finally:
            path.unlink()


# =============================================================================
# Bundled Data Tests
# =============================================================================


class TestDefaultData:
    """Test the bundled USA map and plant catalog."""

    def test_default_map_loads(self):
        graph = load_default_map()
        assert len(graph) == 33
        assert graph.is_connected()

    def test_resource_path_is_beside_loader(self):
        path = resource_path("usa_map.json")
        assert path.is_file()
        assert path.parent.name == "data"

    def test_default_map_is_symmetric(self):
        graph = load_default_map()
        for city in graph.all_cities():
            for conn in city.connections:
                back = [c for c in graph.get_city(conn.city_id).connections
                        if c.city_id == city.city_id]
                assert back and back[0].cost == conn.cost

    def test_zero_cost_connections(self):
        graph = load_default_map()
        assert graph.shortest_path_cost("philadelphia", "new-york") == 0
        assert graph.shortest_path_cost("savannah", "jacksonville") == 0

    def test_map_stats(self):
        stats = get_map_stats(load_default_map())
        assert stats["num_cities"] == 33
        assert stats["num_edges"] == 55
        assert sum(stats["cities_by_region"].values()) == 33

    def test_default_plants(self):
        plants = load_default_power_plants()
        numbers = [p.number for p in plants]
        assert numbers == sorted(numbers)
        assert numbers[0] == 3
        assert numbers[-1] == 50
        assert 13 in numbers
        assert 999 not in numbers

    def test_plant_thirteen_is_eco(self):
        plant = next(p for p in load_default_power_plants() if p.number == 13)
        assert plant.plant_type == PlantType.ECO
        assert plant.resource_cost == 0
