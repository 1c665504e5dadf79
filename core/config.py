"""Per-player-count rule configuration.

Several rules scale with the number of players: when step 2 begins, when the
game ends, how many plants are removed from the deck at setup, and how many
plants a player may hold. They are kept here as explicit lookup tables keyed
by player count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .constants import MIN_PLAYERS, MAX_PLAYERS

logger = logging.getLogger(__name__)

# Unknown player counts use this configuration
FALLBACK_PLAYER_COUNT = 4


@dataclass(frozen=True)
class PlayerCountConfig:
    """Rules that depend on the number of players.

    Attributes:
        step2_trigger: Connected cities that start step 2 at bureaucracy.
        game_end_trigger: Connected cities that end the game.
        removed_plants: Plants removed from the deck at setup.
        max_plants: Plants a player may hold before discarding.
    """

    step2_trigger: int
    game_end_trigger: int
    removed_plants: int
    max_plants: int


PLAYER_COUNT_CONFIGS: dict[int, PlayerCountConfig] = {
    2: PlayerCountConfig(step2_trigger=10, game_end_trigger=21, removed_plants=8, max_plants=4),
    3: PlayerCountConfig(step2_trigger=7, game_end_trigger=17, removed_plants=8, max_plants=3),
    4: PlayerCountConfig(step2_trigger=7, game_end_trigger=17, removed_plants=4, max_plants=3),
    5: PlayerCountConfig(step2_trigger=7, game_end_trigger=15, removed_plants=0, max_plants=3),
    6: PlayerCountConfig(step2_trigger=6, game_end_trigger=14, removed_plants=0, max_plants=3),
}


def is_valid_player_count(num_players: int) -> bool:
    """Check if a player count is supported by the rules."""
    return MIN_PLAYERS <= num_players <= MAX_PLAYERS


def get_player_config(num_players: int) -> PlayerCountConfig:
    """Look up the configuration for a player count.

    Args:
        num_players: Number of players in the game.

    Returns:
        The matching configuration, or the 4-player configuration when the
        count is not one the rules cover.
    """
    config = PLAYER_COUNT_CONFIGS.get(num_players)
    if config is None:
        logger.warning(
            "No rules for %d players, using %d-player configuration",
            num_players,
            FALLBACK_PLAYER_COUNT,
        )
        return PLAYER_COUNT_CONFIGS[FALLBACK_PLAYER_COUNT]
    return config
