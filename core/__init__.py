"""Core data models for the Power Grid rules engine."""

from .constants import (
    ResourceType,
    PlantType,
    Phase,
    MIN_PLAYERS,
    MAX_PLAYERS,
    STARTING_MONEY,
    PLAYER_COLORS,
    MARKET_TIER_SIZE,
    STARTING_MARKET_PLANTS,
    DECK_TOP_PLANT,
    STEP_3_CARD_NUMBER,
    HOUSE_COSTS,
    MAX_STEP,
    RESOURCE_RUNGS,
    RESOURCE_SUPPLY,
    REFILL_TABLE,
    INCOME_TABLE,
    REVERSE_ORDER_PHASES,
)

from .config import (
    PlayerCountConfig,
    PLAYER_COUNT_CONFIGS,
    get_player_config,
    is_valid_player_count,
)

from .power_plant import PowerPlant, PowerPlantMarket, STEP_3_CARD, sort_plants

from .city_graph import CityId, CityGraphError, Connection, City, CityGraph

from .resources import ResourceInventory, ResourceMarket

from .player import Player

from .game_state import GameState

__all__ = [
    # Constants
    "ResourceType",
    "PlantType",
    "Phase",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "STARTING_MONEY",
    "PLAYER_COLORS",
    "MARKET_TIER_SIZE",
    "STARTING_MARKET_PLANTS",
    "DECK_TOP_PLANT",
    "STEP_3_CARD_NUMBER",
    "HOUSE_COSTS",
    "MAX_STEP",
    "RESOURCE_RUNGS",
    "RESOURCE_SUPPLY",
    "REFILL_TABLE",
    "INCOME_TABLE",
    "REVERSE_ORDER_PHASES",
    # Config
    "PlayerCountConfig",
    "PLAYER_COUNT_CONFIGS",
    "get_player_config",
    "is_valid_player_count",
    # Power plants
    "PowerPlant",
    "PowerPlantMarket",
    "STEP_3_CARD",
    "sort_plants",
    # City graph
    "CityId",
    "CityGraphError",
    "Connection",
    "City",
    "CityGraph",
    # Resources
    "ResourceInventory",
    "ResourceMarket",
    # Player
    "Player",
    # Game State
    "GameState",
]
