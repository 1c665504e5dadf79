"""City graph for the Power Grid rules engine.

The map is a static weighted graph:
- Cities are nodes, tagged with a region
- Connections are undirected edges with a non-negative integer cost
- Topology never changes; ownership is derived from the players' networks

Shortest-path queries are delegated to NetworkX.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Iterable

import networkx as nx

# Type alias for clarity
CityId = str


class CityGraphError(Exception):
    """Raised when a city graph is malformed."""
    pass


@dataclass(frozen=True)
class Connection:
    """A weighted edge from one city to a neighbour."""

    city_id: CityId
    cost: int


@dataclass(frozen=True)
class City:
    """A city on the map.

    Attributes:
        city_id: Unique identifier (e.g. "new-york").
        name: Display name.
        region: Region tag.
        connections: Edges to neighbouring cities. Each edge is listed on
            both endpoints with the same cost.
    """

    city_id: CityId
    name: str
    region: str
    connections: tuple[Connection, ...] = ()

    def get_neighbors(self) -> set[CityId]:
        """Return ids of all adjacent cities."""
        return {c.city_id for c in self.connections}


@dataclass(frozen=True)
class CityGraph:
    """The full map.

    Attributes:
        cities: Mapping from city id to city, in map order.
    """

    cities: dict[CityId, City] = field(default_factory=dict)

    @classmethod
    def from_cities(cls, cities: Iterable[City]) -> CityGraph:
        """Build a graph from cities, validating ids and edge symmetry.

        Raises:
            CityGraphError: If ids repeat, an edge points to an unknown city,
                a cost is negative, or an edge is not mirrored with the same
                cost on the other endpoint.
        """
        by_id: dict[CityId, City] = {}
        for city in cities:
            if city.city_id in by_id:
                raise CityGraphError(f"Duplicate city ID: {city.city_id}")
            by_id[city.city_id] = city

        for city in by_id.values():
            for conn in city.connections:
                if conn.city_id not in by_id:
                    raise CityGraphError(
                        f"City {city.city_id} connects to unknown city {conn.city_id}"
                    )
                if conn.city_id == city.city_id:
                    raise CityGraphError(f"Self-loop connection at {city.city_id}")
                if conn.cost < 0:
                    raise CityGraphError(
                        f"Negative cost {conn.cost} on {city.city_id}-{conn.city_id}"
                    )
                mirrored = [
                    c for c in by_id[conn.city_id].connections
                    if c.city_id == city.city_id
                ]
                if not mirrored or mirrored[0].cost != conn.cost:
                    raise CityGraphError(
                        f"Connection {city.city_id}-{conn.city_id} (cost {conn.cost}) "
                        f"is not mirrored by {conn.city_id}"
                    )

        return cls(cities=by_id)

    @classmethod
    def from_edges(
        cls,
        cities: Iterable[tuple[CityId, str, str]],
        edges: Iterable[tuple[CityId, CityId, int]],
    ) -> CityGraph:
        """Build a graph from (id, name, region) rows and (a, b, cost) edges.

        Both directions of every edge are recorded, so the result is
        symmetric by construction.
        """
        rows = list(cities)
        connections: dict[CityId, list[Connection]] = {row[0]: [] for row in rows}
        for city_a, city_b, cost in edges:
            for source, target in ((city_a, city_b), (city_b, city_a)):
                if source not in connections:
                    raise CityGraphError(f"Edge references unknown city: {source}")
                connections[source].append(Connection(city_id=target, cost=cost))

        return cls.from_cities(
            City(
                city_id=city_id,
                name=name,
                region=region,
                connections=tuple(connections[city_id]),
            )
            for city_id, name, region in rows
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_city(self, city_id: CityId) -> City | None:
        """Get a city by id, or None if it is not on the map."""
        return self.cities.get(city_id)

    def has_city(self, city_id: CityId) -> bool:
        """Check if a city is on the map."""
        return city_id in self.cities

    def all_cities(self) -> list[City]:
        """Return all cities in map order."""
        return list(self.cities.values())

    def get_regions(self) -> set[str]:
        """Return every region tag used on the map."""
        return {city.region for city in self.cities.values()}

    # -------------------------------------------------------------------------
    # Shortest paths
    # -------------------------------------------------------------------------

    @cached_property
    def graph(self) -> nx.Graph:
        """NetworkX view of the map, with edge attribute ``cost``."""
        G = nx.Graph()
        for city_id, city in self.cities.items():
            G.add_node(city_id, name=city.name, region=city.region)
        for city_id, city in self.cities.items():
            for conn in city.connections:
                G.add_edge(city_id, conn.city_id, cost=conn.cost)
        return G

    def shortest_path_cost(self, source: CityId, target: CityId) -> float:
        """Cheapest connection cost between two cities.

        Returns:
            The path cost, or ``math.inf`` if no path exists or either city
            is unknown.
        """
        return self.cheapest_connection_cost([source], target)

    def cheapest_connection_cost(
        self, sources: Iterable[CityId], target: CityId
    ) -> float:
        """Cheapest connection cost from any of ``sources`` to ``target``.

        Runs a multi-source Dijkstra search, equivalent to the minimum over
        one search per source.

        Returns:
            The cost, or ``math.inf`` when the target is unreachable.
        """
        known_sources = {s for s in sources if s in self.cities}
        if not known_sources or target not in self.cities:
            return math.inf
        if target in known_sources:
            return 0

        distances = nx.multi_source_dijkstra_path_length(
            self.graph, known_sources, weight="cost"
        )
        return distances.get(target, math.inf)

    def shortest_path(self, source: CityId, target: CityId) -> list[CityId]:
        """City ids along the cheapest route, or [] if unreachable."""
        try:
            return nx.dijkstra_path(self.graph, source, target, weight="cost")
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return []

    def is_connected(self) -> bool:
        """Check that every city can reach every other city."""
        if len(self.cities) <= 1:
            return True
        return nx.is_connected(self.graph)

    def __len__(self) -> int:
        return len(self.cities)

    def __hash__(self) -> int:
        """Hash by the set of cities, consistent with field equality."""
        return hash(frozenset(self.cities.items()))
