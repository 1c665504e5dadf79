"""Initial game setup for the Power Grid rules engine.

Setup follows the official rules, keyed by player count:
1. Every player gets starting money and a colour
2. Plants 3 to 10 form the visible market (4 current, 4 future)
3. Plant 13 is set aside; a fixed number of the lowest remaining plants are
   removed; the rest are shuffled, plant 13 goes on top and the step 3 card
   on the bottom
4. The resource market is laid out with its starting distribution

After setup the game is in the SETUP phase of round 1, step 1.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from core.city_graph import CityGraph
from core.config import get_player_config, is_valid_player_count
from core.constants import (
    Phase,
    MIN_PLAYERS,
    MAX_PLAYERS,
    STARTING_MONEY,
    PLAYER_COLORS,
    MARKET_TIER_SIZE,
    STARTING_MARKET_PLANTS,
    DECK_TOP_PLANT,
)
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlant, PowerPlantMarket, STEP_3_CARD, sort_plants
from data.loader import load_default_map, load_default_power_plants

from .market import create_starting_market

logger = logging.getLogger(__name__)


def create_players(player_names: Sequence[str]) -> tuple[Player, ...]:
    """Create players in seating order with ids ``player-<index>``."""
    return tuple(
        Player(
            player_id=f"player-{i}",
            name=name,
            color=PLAYER_COLORS[i % len(PLAYER_COLORS)],
            money=STARTING_MONEY,
        )
        for i, name in enumerate(player_names)
    )


def build_power_plant_market(
    plants: Sequence[PowerPlant],
    num_players: int,
    rng: random.Random,
) -> PowerPlantMarket:
    """Lay out the plant market for a new game.

    Args:
        plants: The full plant catalog (without the step 3 card).
        num_players: Number of players; sets how many plants are removed.
        rng: Random source for the deck shuffle.

    Returns:
        The market with plants 3-10 visible and the prepared deck.
    """
    starting = sort_plants(p for p in plants if p.number in STARTING_MARKET_PLANTS)
    top = [p for p in plants if p.number == DECK_TOP_PLANT]
    rest = list(sort_plants(
        p for p in plants
        if p.number not in STARTING_MARKET_PLANTS and p.number != DECK_TOP_PLANT
    ))

    removed = get_player_config(num_players).removed_plants
    if removed:
        logger.debug(
            "Removing plants %s for %d players", [p.number for p in rest[:removed]], num_players
        )
    rest = rest[removed:]
    rng.shuffle(rest)

    return PowerPlantMarket(
        current=starting[:MARKET_TIER_SIZE],
        future=starting[MARKET_TIER_SIZE:2 * MARKET_TIER_SIZE],
        deck=tuple(top + rest + [STEP_3_CARD]),
    )


def initialize_game(
    player_names: Sequence[str],
    rng: Optional[random.Random] = None,
    city_graph: Optional[CityGraph] = None,
    plants: Optional[Sequence[PowerPlant]] = None,
) -> GameState:
    """Create a new game.

    Args:
        player_names: Names in seating order (2-6).
        rng: Random source for the deck shuffle; a fresh one if omitted.
        city_graph: Map to play on; the bundled USA map if omitted.
        plants: Plant catalog; the bundled catalog if omitted.

    Returns:
        A GameState in the SETUP phase.

    Raises:
        ValueError: If the number of players is out of range.
    """
    num_players = len(player_names)
    if not is_valid_player_count(num_players):
        raise ValueError(
            f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
            f"got {num_players}"
        )

    if rng is None:
        rng = random.Random()
    if city_graph is None:
        city_graph = load_default_map()
    if plants is None:
        plants = load_default_power_plants()

    state = GameState(
        players=create_players(player_names),
        city_graph=city_graph,
        power_plant_market=build_power_plant_market(plants, num_players, rng),
        resource_market=create_starting_market(),
        phase=Phase.SETUP,
        round_number=1,
        current_player_idx=0,
        step=1,
    )
    logger.info("New game with %d players on a %d-city map", num_players, len(city_graph))
    return state
