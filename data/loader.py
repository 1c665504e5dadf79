"""Static data loader for the Power Grid rules engine.

Loads and validates the city map and the power plant catalog from JSON
files, converting them into CityGraph and PowerPlant instances ready for
use in the game.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core.constants import PlantType, STEP_3_CARD_NUMBER
from core.city_graph import CityGraph, CityGraphError
from core.power_plant import PowerPlant, sort_plants

logger = logging.getLogger(__name__)


def resource_path(relative_path: str) -> Path:
    """Get the absolute path to a bundled data file."""
    return Path(__file__).parent / relative_path


class DataLoadError(Exception):
    """Raised when a data file cannot be loaded or fails validation."""
    pass


def _read_json(file_path: str | Path) -> Any:
    path = Path(file_path)

    if not path.exists():
        raise DataLoadError(f"Data file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in data file {path}: {e}")
    except IOError as e:
        raise DataLoadError(f"Error reading data file {path}: {e}")


class CityGraphLoader:
    """Loads and validates city maps from JSON files."""

    def __init__(self, require_connected: bool = True):
        """Initialize the loader.

        Args:
            require_connected: If True, reject maps where some city cannot
                reach another. Set to False for partial test maps.
        """
        self.require_connected = require_connected

    def load_from_file(self, file_path: str | Path) -> CityGraph:
        """Load a map from a JSON file.

        Raises:
            DataLoadError: If the file cannot be read or validation fails.
        """
        return self.load_from_dict(_read_json(file_path))

    def load_from_dict(self, data: dict[str, Any]) -> CityGraph:
        """Load a map from a dictionary with 'cities' and 'edges' keys.

        Cities are objects with ``id``, ``name`` and ``region``; edges are
        ``[city_a, city_b, cost]`` triples recorded on both endpoints.

        Raises:
            DataLoadError: If validation fails.
        """
        self._validate_structure(data)

        rows = []
        for city_data in data["cities"]:
            for required in ("id", "name", "region"):
                if required not in city_data:
                    raise DataLoadError(f"City missing required field: {required}")
            rows.append((city_data["id"], city_data["name"], city_data["region"]))

        edges = []
        seen: set[frozenset[str]] = set()
        for edge_data in data["edges"]:
            if not isinstance(edge_data, list) or len(edge_data) != 3:
                raise DataLoadError(f"Edge must be [city_a, city_b, cost]: {edge_data}")
            city_a, city_b, cost = edge_data
            if not isinstance(cost, int) or cost < 0:
                raise DataLoadError(f"Invalid cost on edge {city_a}-{city_b}: {cost}")

            key = frozenset((city_a, city_b))
            if key in seen:
                raise DataLoadError(f"Duplicate edge: {city_a}-{city_b}")
            seen.add(key)
            edges.append((city_a, city_b, cost))

        try:
            graph = CityGraph.from_edges(rows, edges)
        except CityGraphError as e:
            raise DataLoadError(str(e))

        if self.require_connected and not graph.is_connected():
            raise DataLoadError("City map is not connected")

        logger.debug("Loaded map with %d cities and %d edges", len(graph), len(edges))
        return graph

    def _validate_structure(self, data: dict[str, Any]) -> None:
        """Validate the basic structure of the map data."""
        if not isinstance(data, dict):
            raise DataLoadError("Map data must be a dictionary")

        for key in ("cities", "edges"):
            if key not in data:
                raise DataLoadError(f"Map data missing '{key}' key")
            if not isinstance(data[key], list):
                raise DataLoadError(f"'{key}' must be a list")

        if len(data["cities"]) == 0:
            raise DataLoadError("Map must have at least one city")


def load_city_graph(file_path: str | Path, require_connected: bool = True) -> CityGraph:
    """Convenience function to load a map from a file."""
    loader = CityGraphLoader(require_connected=require_connected)
    return loader.load_from_file(file_path)


def load_default_map() -> CityGraph:
    """Load the bundled USA map.

    Raises:
        DataLoadError: If the default map file is missing or invalid.
    """
    return load_city_graph(resource_path("usa_map.json"))


def parse_power_plant(plant_data: dict[str, Any]) -> PowerPlant:
    """Create a PowerPlant from a catalog entry.

    Raises:
        DataLoadError: If a field is missing or invalid.
    """
    for required in ("number", "type", "resource_cost", "cities_powered"):
        if required not in plant_data:
            raise DataLoadError(f"Power plant missing required field: {required}")

    try:
        plant_type = PlantType(plant_data["type"])
    except ValueError:
        raise DataLoadError(
            f"Invalid plant type '{plant_data['type']}' on plant {plant_data['number']}"
        )

    number = plant_data["number"]
    if number == STEP_3_CARD_NUMBER:
        raise DataLoadError(f"Plant number {STEP_3_CARD_NUMBER} is reserved for the step 3 card")

    resource_cost = plant_data["resource_cost"]
    return PowerPlant(
        number=number,
        plant_type=plant_type,
        resource_cost=resource_cost,
        cities_powered=plant_data["cities_powered"],
        resource_storage=plant_data.get("resource_storage", 2 * resource_cost),
    )


def load_power_plants(file_path: str | Path) -> tuple[PowerPlant, ...]:
    """Load a power plant catalog, sorted by number.

    Raises:
        DataLoadError: If the file is invalid or plant numbers repeat.
    """
    data = _read_json(file_path)
    if not isinstance(data, dict) or not isinstance(data.get("plants"), list):
        raise DataLoadError("Plant data must be a dictionary with a 'plants' list")

    plants = [parse_power_plant(entry) for entry in data["plants"]]
    numbers = [p.number for p in plants]
    if len(set(numbers)) != len(numbers):
        raise DataLoadError("Duplicate power plant numbers in catalog")

    return sort_plants(plants)


def load_default_power_plants() -> tuple[PowerPlant, ...]:
    """Load the bundled power plant catalog."""
    return load_power_plants(resource_path("power_plants.json"))


def get_map_stats(graph: CityGraph) -> dict[str, Any]:
    """Get statistics about a city map."""
    region_counts: dict[str, int] = {}
    for city in graph.all_cities():
        region_counts[city.region] = region_counts.get(city.region, 0) + 1

    return {
        "num_cities": len(graph),
        "num_edges": graph.graph.number_of_edges(),
        "cities_by_region": region_counts,
    }
