"""Network building for the Power Grid rules engine.

Building a house in a city costs:
- A house cost that rises with the number of houses already in the city
- A connection cost: the cheapest path over the map from any city the
  player already owns (free for a player's first city)

A city holds at most ``step`` houses and at most one per player.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from core.constants import HOUSE_COSTS
from core.city_graph import City
from core.game_state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildCost:
    """Cost breakdown for building in one city.

    Attributes:
        house_cost: Price of the house slot.
        connection_cost: Price of linking the city to the player's network.
        total_cost: Sum of the two.
    """

    house_cost: int
    connection_cost: int
    total_cost: int


def get_house_cost(houses_in_city: int) -> int:
    """House price given how many houses the city already holds."""
    return HOUSE_COSTS[min(houses_in_city, len(HOUSE_COSTS) - 1)]


def should_skip_building_phase(state: GameState) -> bool:
    """Nobody builds in the first round."""
    return state.round_number == 1


class NetworkBuilder:
    """Validates and executes house placement.

    The builder wraps a single snapshot; ``build_in_city`` returns a new
    GameState and leaves the wrapped one untouched.
    """

    def __init__(self, state: GameState):
        """Initialize the builder with the game state.

        Args:
            state: The current game state.
        """
        self.state = state

    def get_buildable_cities(self, player_id: str) -> list[City]:
        """Cities where a player may place a house now.

        Excludes cities the player is already in and cities whose house
        count has reached the current step.

        Returns:
            Buildable cities in map order; [] for an unknown player.
        """
        player = self.state.get_player(player_id)
        if player is None:
            return []

        max_houses = self.state.step
        return [
            city for city in self.state.city_graph.all_cities()
            if not player.owns_city(city.city_id)
            and self.state.count_houses(city.city_id) < max_houses
        ]

    def is_buildable(self, player_id: str, city_id: str) -> bool:
        return any(c.city_id == city_id for c in self.get_buildable_cities(player_id))

    def get_connection_cost(self, player_id: str, city_id: str) -> float:
        """Cheapest link from the player's network to a city.

        Returns:
            0 for a player with no cities, ``math.inf`` when unreachable.
        """
        player = self.state.get_player(player_id)
        if player is None:
            return math.inf
        if not player.cities:
            return 0
        return self.state.city_graph.cheapest_connection_cost(player.cities, city_id)

    def calculate_build_cost(self, player_id: str, city_id: str) -> Optional[BuildCost]:
        """Price a house in a city for a player.

        Returns:
            The cost breakdown, or None if the player or city is unknown or
            the city cannot be reached from the player's network.
        """
        player = self.state.get_player(player_id)
        if player is None or not self.state.city_graph.has_city(city_id):
            return None

        house_cost = get_house_cost(self.state.count_houses(city_id))
        connection_cost = self.get_connection_cost(player_id, city_id)
        if math.isinf(connection_cost):
            logger.debug("%s cannot reach %s", player_id, city_id)
            return None

        connection_cost = int(connection_cost)
        return BuildCost(
            house_cost=house_cost,
            connection_cost=connection_cost,
            total_cost=house_cost + connection_cost,
        )

    def can_afford_to_build(self, player_id: str, city_id: str) -> bool:
        player = self.state.get_player(player_id)
        if player is None:
            return False
        cost = self.calculate_build_cost(player_id, city_id)
        return cost is not None and player.can_afford(cost.total_cost)

    def build_in_city(self, player_id: str, city_id: str) -> Optional[GameState]:
        """Place a house for a player.

        Buildability and cost are recomputed from the wrapped state.

        Returns:
            The new state, or None if the city is not buildable, not
            reachable, or the player cannot pay.
        """
        player = self.state.get_player(player_id)
        if player is None:
            return None

        if not self.is_buildable(player_id, city_id):
            logger.debug("%s cannot build in %s", player_id, city_id)
            return None

        cost = self.calculate_build_cost(player_id, city_id)
        if cost is None or not player.can_afford(cost.total_cost):
            return None

        logger.info(
            "%s built in %s for %d (house %d + connection %d)",
            player_id, city_id, cost.total_cost, cost.house_cost, cost.connection_cost,
        )
        return self.state.replace_player(player.pay(cost.total_cost).add_city(city_id))
