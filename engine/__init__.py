"""Game engine for the Power Grid board game.

This module provides the game logic including:
- Phase state machine for round flow and turn order
- Rule modules for auctions, resources, network building and bureaucracy
- Game engine for coordinating game play
"""

from .phase_machine import (
    PhaseMachine,
    PHASE_ORDER,
    PHASE_TRANSITIONS,
    advance_phase,
    advance_to_next_player,
    is_phase_complete,
    check_game_end,
    determine_winner,
    end_game,
)

from .auction import (
    AuctionState,
    start_auction,
    place_bid,
    pass_auction,
    is_auction_complete,
    get_auction_winner,
    get_final_price,
    get_next_auction_player,
    can_pass_auction,
    complete_auction,
)

from .network import (
    BuildCost,
    NetworkBuilder,
    get_house_cost,
)

from .market import (
    ResourcePurchaseOption,
    purchase_resource,
    get_available_storage,
    refill_resource_market,
)

from .bureaucracy import (
    PoweringPlan,
    get_income,
    collect_income,
)

from .setup import initialize_game

from .game_engine import (
    GameEngine,
    Action,
    ActionType,
    StepResult,
)

__all__ = [
    # Phase machine
    "PhaseMachine",
    "PHASE_ORDER",
    "PHASE_TRANSITIONS",
    "advance_phase",
    "advance_to_next_player",
    "is_phase_complete",
    "check_game_end",
    "determine_winner",
    "end_game",
    # Auction
    "AuctionState",
    "start_auction",
    "place_bid",
    "pass_auction",
    "is_auction_complete",
    "get_auction_winner",
    "get_final_price",
    "get_next_auction_player",
    "can_pass_auction",
    "complete_auction",
    # Network
    "BuildCost",
    "NetworkBuilder",
    "get_house_cost",
    # Resources
    "ResourcePurchaseOption",
    "purchase_resource",
    "get_available_storage",
    "refill_resource_market",
    # Bureaucracy
    "PoweringPlan",
    "get_income",
    "collect_income",
    # Setup
    "initialize_game",
    # Game engine
    "GameEngine",
    "Action",
    "ActionType",
    "StepResult",
]
