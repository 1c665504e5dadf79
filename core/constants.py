"""Constants and enums for the Power Grid rules engine."""

from enum import Enum


class ResourceType(Enum):
    """Fuel resources sold on the resource market."""

    COAL = "coal"
    OIL = "oil"
    GARBAGE = "garbage"
    URANIUM = "uranium"


class PlantType(Enum):
    """What a power plant burns. Hybrid burns coal or oil, eco burns nothing."""

    COAL = "coal"
    OIL = "oil"
    GARBAGE = "garbage"
    URANIUM = "uranium"
    HYBRID = "hybrid"
    ECO = "eco"


class Phase(Enum):
    """Game phases. SETUP runs once, GAME_OVER is terminal."""

    SETUP = "setup"

    # Main game loop phases
    DETERMINE_PLAYER_ORDER = "determine-player-order"
    AUCTION_POWER_PLANTS = "auction-power-plants"
    BUY_RESOURCES = "buy-resources"
    BUILD_NETWORK = "build-network"
    BUREAUCRACY = "bureaucracy"

    GAME_OVER = "game-over"


# Player limits
MIN_PLAYERS = 2
MAX_PLAYERS = 6

STARTING_MONEY = 50
PLAYER_COLORS = ["#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A", "#98D8C8", "#F7DC6F"]

# Power plant market
MARKET_TIER_SIZE = 4  # current and future tiers each show 4 plants
STARTING_MARKET_PLANTS = (3, 4, 5, 6, 7, 8, 9, 10)
DECK_TOP_PLANT = 13  # first eco plant, always on top of the deck
STEP_3_CARD_NUMBER = 999

# House cost by number of houses already in the city (1st, 2nd, 3rd)
HOUSE_COSTS = (10, 15, 20)
MAX_STEP = 3

# Resource market price rungs (price -> units the rung holds)
COMMON_RESOURCE_RUNGS = {price: 3 for price in range(1, 9)}
URANIUM_RUNGS = {
    **{price: 1 for price in range(1, 9)},
    10: 1,
    12: 1,
    14: 1,
    16: 1,
}
RESOURCE_RUNGS = {
    ResourceType.COAL: COMMON_RESOURCE_RUNGS,
    ResourceType.OIL: COMMON_RESOURCE_RUNGS,
    ResourceType.GARBAGE: COMMON_RESOURCE_RUNGS,
    ResourceType.URANIUM: URANIUM_RUNGS,
}

# Total components in the box; units in the market plus player storage never exceed these
RESOURCE_SUPPLY = {
    ResourceType.COAL: 24,
    ResourceType.OIL: 24,
    ResourceType.GARBAGE: 24,
    ResourceType.URANIUM: 12,
}

# Lowest price rung filled at game start, per resource
STARTING_RESOURCE_LOWEST_PRICE = {
    ResourceType.COAL: 1,
    ResourceType.OIL: 3,
    ResourceType.GARBAGE: 7,
    ResourceType.URANIUM: 14,
}

# Refill amounts: resource -> player count -> (step 1, step 2, step 3)
REFILL_TABLE = {
    ResourceType.COAL: {
        2: (3, 4, 3),
        3: (4, 5, 3),
        4: (5, 6, 4),
        5: (5, 7, 5),
        6: (7, 9, 6),
    },
    ResourceType.OIL: {
        2: (2, 2, 4),
        3: (2, 3, 4),
        4: (3, 4, 5),
        5: (4, 5, 6),
        6: (5, 6, 7),
    },
    ResourceType.GARBAGE: {
        2: (1, 2, 3),
        3: (1, 2, 3),
        4: (2, 3, 4),
        5: (3, 3, 5),
        6: (3, 5, 6),
    },
    ResourceType.URANIUM: {
        2: (1, 1, 1),
        3: (1, 1, 1),
        4: (1, 2, 2),
        5: (2, 3, 2),
        6: (2, 3, 3),
    },
}

# Income paid in bureaucracy, indexed by number of cities powered (capped at 20)
INCOME_TABLE = (
    10, 22, 33, 44, 54, 64, 73, 82, 90, 98,
    105, 112, 118, 124, 129, 134, 138, 142, 145, 148,
    150,
)

# Phases where players act last-place first
REVERSE_ORDER_PHASES = (Phase.BUY_RESOURCES, Phase.BUILD_NETWORK)
