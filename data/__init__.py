"""Static data loading for the Power Grid rules engine."""

from .loader import (
    CityGraphLoader,
    DataLoadError,
    load_city_graph,
    load_default_map,
    load_power_plants,
    load_default_power_plants,
    parse_power_plant,
    get_map_stats,
)

__all__ = [
    "CityGraphLoader",
    "DataLoadError",
    "load_city_graph",
    "load_default_map",
    "load_power_plants",
    "load_default_power_plants",
    "parse_power_plant",
    "get_map_stats",
]
