"""Main game engine for the Power Grid rules engine.

The GameEngine is the primary interface for playing a game. It provides:
- reset(): Start a new game
- step(): Execute an action and advance game state
- get_valid_actions(): Return legal actions for the acting player

The engine owns the single authoritative GameState and the auction in
progress. It checks every precondition before calling the pure rule
functions, so illegal actions are rejected and never change state.
Instant phases (player order, bureaucracy) and the skipped first-round
build phase are advanced automatically.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Sequence

from core.city_graph import CityGraph
from core.constants import Phase, ResourceType
from core.game_state import GameState
from core.power_plant import PowerPlant

from .auction import (
    AuctionState,
    can_afford_bid,
    can_pass_auction,
    complete_auction,
    get_next_auction_player,
    get_next_player_for_auction,
    is_auction_complete,
    is_first_round,
    is_plant_purchasable,
    mark_player_as_bought,
    minimum_bid,
    pass_auction,
    place_bid,
    should_auction_phase_end,
    start_auction,
)
from .market import get_resource_purchase_options, purchase_resource
from .network import NetworkBuilder, should_skip_building_phase
from .phase_machine import PhaseMachine
from .setup import initialize_game

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Types of actions a player can take."""

    # Setup
    ADVANCE_PHASE = "advance_phase"

    # Auction phase
    START_AUCTION = "start_auction"
    DECLINE_AUCTION = "decline_auction"
    BID = "bid"
    PASS_AUCTION = "pass_auction"

    # Buy resources / build network phases
    BUY_RESOURCE = "buy_resource"
    BUILD = "build"
    END_TURN = "end_turn"


@dataclass
class Action:
    """Represents an action to be executed.

    Attributes:
        action_type: The type of action.
        player_id: The player taking the action.
        params: Additional parameters for the action (context-dependent):
            ``plant_number`` for START_AUCTION, ``amount`` for BID,
            ``resource`` (a ResourceType) for BUY_RESOURCE, ``city_id``
            for BUILD.
    """

    action_type: ActionType
    player_id: str
    params: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"Action({self.action_type.value}, player={self.player_id}, params={self.params})"


@dataclass
class StepResult:
    """Result of executing a step in the game.

    Attributes:
        success: Whether the action was executed.
        state: The game state after the action (unchanged on failure).
        done: Whether the game has ended.
        info: Additional information, e.g. ``reason`` on failure and
            ``winner`` once the game is over.
    """

    success: bool
    state: GameState
    done: bool
    info: dict[str, Any] = field(default_factory=dict)


class GameEngine:
    """Main engine for playing Power Grid.

    Usage:
        engine = GameEngine()
        engine.reset(["Ann", "Ben", "Cat"], seed=7)

        while not engine.is_game_over():
            actions = engine.get_valid_actions()
            action = select_action(actions)  # Player selects
            result = engine.step(action)
    """

    def __init__(self):
        """Initialize the game engine."""
        self._state: Optional[GameState] = None
        self._auction: Optional[AuctionState] = None
        self._auction_turn: Optional[str] = None

    @property
    def state(self) -> GameState:
        """Get the current game state.

        Raises:
            RuntimeError: If the game has not been initialized.
        """
        if self._state is None:
            raise RuntimeError("Game not initialized. Call reset() first.")
        return self._state

    @property
    def phase(self) -> Phase:
        """Get the current game phase."""
        return self.state.phase

    @property
    def current_auction(self) -> Optional[AuctionState]:
        """The auction in progress, if any."""
        return self._auction

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self._state is not None and self._state.is_game_over()

    # -------------------------------------------------------------------------
    # Game Initialization
    # -------------------------------------------------------------------------

    def reset(
        self,
        player_names: Sequence[str],
        seed: Optional[int] = None,
        city_graph: Optional[CityGraph] = None,
        plants: Optional[Sequence[PowerPlant]] = None,
    ) -> GameState:
        """Start a new game in the SETUP phase.

        Args:
            player_names: Player names in seating order.
            seed: Seed for the deck shuffle.
            city_graph: Map to play on (bundled USA map if omitted).
            plants: Plant catalog (bundled catalog if omitted).

        Returns:
            The initial game state.
        """
        rng = random.Random(seed)
        self._state = initialize_game(player_names, rng=rng, city_graph=city_graph, plants=plants)
        self._auction = None
        self._auction_turn = None
        return self._state

    def load_state(self, state: GameState) -> None:
        """Adopt an existing snapshot, e.g. to replay from a saved value."""
        self._state = state
        self._auction = None
        self._auction_turn = None

    # -------------------------------------------------------------------------
    # Whose turn
    # -------------------------------------------------------------------------

    def get_acting_player_id(self) -> Optional[str]:
        """Id of the player expected to act next, or None."""
        state = self.state
        if state.phase == Phase.AUCTION_POWER_PLANTS:
            if self._auction is not None:
                return self._auction_turn
            return get_next_player_for_auction(state)
        if state.phase in (Phase.BUY_RESOURCES, Phase.BUILD_NETWORK):
            return state.get_current_player().player_id
        if state.phase == Phase.SETUP:
            return state.players[0].player_id
        return None

    def get_valid_actions(self) -> list[Action]:
        """Get all legal actions for the acting player."""
        if self.is_game_over():
            return []

        state = self.state
        player_id = self.get_acting_player_id()
        if player_id is None:
            return []
        player = state.get_player(player_id)

        if state.phase == Phase.SETUP:
            return [Action(ActionType.ADVANCE_PHASE, player_id)]

        actions: list[Action] = []
        if state.phase == Phase.AUCTION_POWER_PLANTS:
            if self._auction is None:
                for plant in state.power_plant_market.current:
                    if is_plant_purchasable(state, plant) and can_afford_bid(player, plant.number):
                        actions.append(Action(
                            ActionType.START_AUCTION, player_id, {"plant_number": plant.number}
                        ))
                if not is_first_round(state):
                    actions.append(Action(ActionType.DECLINE_AUCTION, player_id))
            else:
                for amount in range(minimum_bid(self._auction), player.money + 1):
                    actions.append(Action(ActionType.BID, player_id, {"amount": amount}))
                if can_pass_auction(state, self._auction, player_id):
                    actions.append(Action(ActionType.PASS_AUCTION, player_id))

        elif state.phase == Phase.BUY_RESOURCES:
            for option in get_resource_purchase_options(state, player_id):
                if option.can_purchase:
                    actions.append(Action(
                        ActionType.BUY_RESOURCE, player_id, {"resource": option.kind}
                    ))
            actions.append(Action(ActionType.END_TURN, player_id))

        elif state.phase == Phase.BUILD_NETWORK:
            builder = NetworkBuilder(state)
            for city in builder.get_buildable_cities(player_id):
                if builder.can_afford_to_build(player_id, city.city_id):
                    actions.append(Action(ActionType.BUILD, player_id, {"city_id": city.city_id}))
            actions.append(Action(ActionType.END_TURN, player_id))

        return actions

    # -------------------------------------------------------------------------
    # Step
    # -------------------------------------------------------------------------

    def step(self, action: Action) -> StepResult:
        """Execute an action.

        Returns:
            StepResult; on failure the state is unchanged and
            ``info["reason"]`` explains why.
        """
        if self.is_game_over():
            return self._fail("Game is over")

        if action.player_id != self.get_acting_player_id():
            return self._fail(f"It is not {action.player_id}'s turn")

        handlers = {
            ActionType.ADVANCE_PHASE: self._handle_advance_phase,
            ActionType.START_AUCTION: self._handle_start_auction,
            ActionType.DECLINE_AUCTION: self._handle_decline_auction,
            ActionType.BID: self._handle_bid,
            ActionType.PASS_AUCTION: self._handle_pass_auction,
            ActionType.BUY_RESOURCE: self._handle_buy_resource,
            ActionType.BUILD: self._handle_build,
            ActionType.END_TURN: self._handle_end_turn,
        }
        reason = handlers[action.action_type](action)
        if reason is not None:
            logger.warning("Rejected %s: %s", action, reason)
            return self._fail(reason)

        logger.debug("Applied %s", action)
        info: dict[str, Any] = {}
        if self.is_game_over():
            info["winner"] = PhaseMachine(self.state).determine_winner()
        return StepResult(success=True, state=self.state, done=self.is_game_over(), info=info)

    def _fail(self, reason: str) -> StepResult:
        return StepResult(
            success=False,
            state=self.state,
            done=self.is_game_over(),
            info={"reason": reason},
        )

    # Handlers return None on success, or a reason string on rejection.

    def _handle_advance_phase(self, action: Action) -> Optional[str]:
        if self.phase != Phase.SETUP:
            return "Phases advance automatically once the game has started"
        self._state = PhaseMachine(self.state).advance_phase()
        self._advance_instant_phases()
        return None

    def _handle_start_auction(self, action: Action) -> Optional[str]:
        if self.phase != Phase.AUCTION_POWER_PLANTS:
            return "Not in the auction phase"
        if self._auction is not None:
            return "An auction is already running"

        state = self.state
        plant = state.power_plant_market.find_current(action.params.get("plant_number"))
        if plant is None or not is_plant_purchasable(state, plant):
            return f"Plant {action.params.get('plant_number')} is not for sale"
        if not can_afford_bid(state.get_player(action.player_id), plant.number):
            return f"Cannot afford plant {plant.number}"

        self._state = replace(
            state, current_player_idx=state.player_ids().index(action.player_id)
        )
        auction = start_auction(self._state, plant, action.player_id)

        # Players who cannot pay face value take no part
        for player_id in auction.active_players:
            player = self._state.get_player(player_id)
            if player_id != action.player_id and not can_afford_bid(player, plant.number):
                logger.info("%s cannot afford plant %d and sits out", player_id, plant.number)
                auction = pass_auction(auction, player_id)

        self._auction = auction
        self._auction_turn = action.player_id
        if is_auction_complete(self._auction):
            self._finish_auction()
        return None

    def _handle_decline_auction(self, action: Action) -> Optional[str]:
        if self.phase != Phase.AUCTION_POWER_PLANTS or self._auction is not None:
            return "Cannot decline now"
        if is_first_round(self.state):
            return "Every player must buy a plant in the first round"

        self._state = mark_player_as_bought(self.state, action.player_id)
        self._end_auction_turn()
        return None

    def _handle_bid(self, action: Action) -> Optional[str]:
        if self._auction is None:
            return "No auction is running"

        amount = action.params.get("amount")
        if not isinstance(amount, int) or amount < minimum_bid(self._auction):
            return f"Bid must be at least {minimum_bid(self._auction)}"
        if not can_afford_bid(self.state.get_player(action.player_id), amount):
            return f"Cannot afford a bid of {amount}"

        self._auction = place_bid(self._auction, action.player_id, amount)
        self._auction_turn = get_next_auction_player(
            self._auction, action.player_id, self.state.players
        )
        return None

    def _handle_pass_auction(self, action: Action) -> Optional[str]:
        if self._auction is None:
            return "No auction is running"
        if not can_pass_auction(self.state, self._auction, action.player_id):
            return "The player who picked the plant must open the bidding"

        self._auction = pass_auction(self._auction, action.player_id)
        if is_auction_complete(self._auction):
            self._finish_auction()
        else:
            self._auction_turn = get_next_auction_player(
                self._auction, action.player_id, self.state.players
            )
        return None

    def _handle_buy_resource(self, action: Action) -> Optional[str]:
        if self.phase != Phase.BUY_RESOURCES:
            return "Not in the buy resources phase"
        kind = action.params.get("resource")
        if not isinstance(kind, ResourceType):
            return f"Unknown resource: {kind}"

        new_state = purchase_resource(self.state, action.player_id, kind)
        if new_state is None:
            return f"Cannot buy {kind.value}"
        self._state = new_state
        return None

    def _handle_build(self, action: Action) -> Optional[str]:
        if self.phase != Phase.BUILD_NETWORK:
            return "Not in the build network phase"
        city_id = action.params.get("city_id")

        new_state = NetworkBuilder(self.state).build_in_city(action.player_id, city_id)
        if new_state is None:
            return f"Cannot build in {city_id}"
        self._state = new_state
        return None

    def _handle_end_turn(self, action: Action) -> Optional[str]:
        if self.phase not in (Phase.BUY_RESOURCES, Phase.BUILD_NETWORK):
            return "Nothing to end"

        machine = PhaseMachine(self.state)
        if machine.is_phase_complete():
            self._state = machine.advance_phase()
            self._advance_instant_phases()
        else:
            self._state = machine.advance_to_next_player()
        return None

    # -------------------------------------------------------------------------
    # Internal flow
    # -------------------------------------------------------------------------

    def _finish_auction(self) -> None:
        new_state = complete_auction(self.state, self._auction)
        if new_state is not None:
            self._state = new_state
        self._auction = None
        self._auction_turn = None
        self._end_auction_turn()

    def _end_auction_turn(self) -> None:
        """Leave the auction phase once everyone has had their turn."""
        if should_auction_phase_end(self.state):
            self._state = PhaseMachine(self.state).advance_phase()
            self._advance_instant_phases()

    def _advance_instant_phases(self) -> None:
        """Advance past phases that need no player input."""
        while True:
            state = self.state
            machine = PhaseMachine(state)

            if state.phase == Phase.DETERMINE_PLAYER_ORDER:
                self._state = machine.advance_phase()
            elif state.phase == Phase.BUILD_NETWORK and should_skip_building_phase(state):
                self._state = machine.advance_phase()
            elif state.phase == Phase.BUREAUCRACY:
                if machine.check_game_end():
                    self._state = machine.end_game()
                    return
                self._state = machine.advance_phase()
            elif state.phase == Phase.AUCTION_POWER_PLANTS and should_auction_phase_end(state):
                self._state = machine.advance_phase()
            else:
                return
