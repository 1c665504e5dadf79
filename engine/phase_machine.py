"""Phase state machine for the Power Grid rules engine.

Manages phase transitions including:
- The one-off setup phase
- The five-phase round loop
- Per-phase turn order (forward or last-place first)
- End game detection and winner selection

Every method returns a new GameState; the wrapped state is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from core.config import get_player_config
from core.constants import Phase
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlantMarket

from .auction import should_auction_phase_end
from .bureaucracy import collect_income
from .market import refill_resource_market

logger = logging.getLogger(__name__)


# Order of phases within a round
PHASE_ORDER: list[Phase] = [
    Phase.DETERMINE_PLAYER_ORDER,
    Phase.AUCTION_POWER_PLANTS,
    Phase.BUY_RESOURCES,
    Phase.BUILD_NETWORK,
    Phase.BUREAUCRACY,
]

# Valid phase transitions
PHASE_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.SETUP: [Phase.DETERMINE_PLAYER_ORDER],
    # Main game loop
    Phase.DETERMINE_PLAYER_ORDER: [Phase.AUCTION_POWER_PLANTS],
    Phase.AUCTION_POWER_PLANTS: [Phase.BUY_RESOURCES],
    Phase.BUY_RESOURCES: [Phase.BUILD_NETWORK],
    Phase.BUILD_NETWORK: [Phase.BUREAUCRACY],
    Phase.BUREAUCRACY: [Phase.DETERMINE_PLAYER_ORDER, Phase.GAME_OVER],
    # Terminal
    Phase.GAME_OVER: [],
}


def get_next_phase(current: Phase) -> Phase:
    """Phase that follows ``current`` in the normal cycle.

    Setup leads into the round loop, bureaucracy wraps around to a new
    round, and game over stays put.
    """
    if current == Phase.SETUP:
        return Phase.DETERMINE_PLAYER_ORDER
    if current == Phase.GAME_OVER:
        return Phase.GAME_OVER

    idx = PHASE_ORDER.index(current)
    return PHASE_ORDER[(idx + 1) % len(PHASE_ORDER)]


def determine_player_order(players: tuple[Player, ...]) -> tuple[Player, ...]:
    """Sort players for a new round.

    Most connected cities first; ties go to the player with the highest
    numbered plant.
    """
    return tuple(
        sorted(
            players,
            key=lambda p: (p.num_cities(), p.highest_plant_number()),
            reverse=True,
        )
    )


class PhaseMachine:
    """Drives the round loop over a game state snapshot.

    Phases (after setup):
        - DETERMINE_PLAYER_ORDER: re-seat players (kept as is in round 1)
        - AUCTION_POWER_PLANTS: players start auctions in seating order
        - BUY_RESOURCES: last place buys first
        - BUILD_NETWORK: last place builds first
        - BUREAUCRACY: income, step 2 check, market refill
        - GAME_OVER: terminal, entered via ``end_game``
    """

    def __init__(self, state: GameState):
        """Initialize the phase machine.

        Args:
            state: The game state to advance.
        """
        self.state = state

    @property
    def phase(self) -> Phase:
        """Get the current phase."""
        return self.state.phase

    def get_valid_transitions(self) -> list[Phase]:
        """Get the list of valid next phases from the current phase."""
        return PHASE_TRANSITIONS.get(self.phase, [])

    def can_transition_to(self, target_phase: Phase) -> bool:
        """Check if a transition to the target phase is valid."""
        return target_phase in self.get_valid_transitions()

    def is_game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    # -------------------------------------------------------------------------
    # Phase advancement
    # -------------------------------------------------------------------------

    def advance_phase(self) -> GameState:
        """Move to the next phase and apply its entry effects.

        Returns:
            The new state. Game over returns the state unchanged.
        """
        current = self.phase
        if current == Phase.GAME_OVER:
            return self.state

        next_phase = get_next_phase(current)
        new_round = current == Phase.BUREAUCRACY
        state = replace(
            self.state,
            phase=next_phase,
            round_number=self.state.round_number + 1 if new_round else self.state.round_number,
        )
        logger.info("Round %d: %s -> %s", state.round_number, current.value, next_phase.value)

        handlers = {
            Phase.DETERMINE_PLAYER_ORDER: self._enter_determine_player_order,
            Phase.AUCTION_POWER_PLANTS: self._enter_auction,
            Phase.BUY_RESOURCES: self._enter_buy_resources,
            Phase.BUILD_NETWORK: self._enter_build_network,
            Phase.BUREAUCRACY: self._enter_bureaucracy,
        }
        return handlers[next_phase](state)

    def _enter_determine_player_order(self, state: GameState) -> GameState:
        if state.round_number == 1:
            return replace(state, current_player_idx=0)

        players = determine_player_order(state.players)
        logger.debug("Player order: %s", [p.player_id for p in players])
        return replace(state, players=players, current_player_idx=0)

    def _enter_auction(self, state: GameState) -> GameState:
        return replace(state, current_player_idx=0, players_who_bought_this_round=())

    def _enter_buy_resources(self, state: GameState) -> GameState:
        state = self._handle_step_three_card(state)
        return replace(state, current_player_idx=len(state.players) - 1)

    def _enter_build_network(self, state: GameState) -> GameState:
        return replace(state, current_player_idx=len(state.players) - 1)

    def _enter_bureaucracy(self, state: GameState) -> GameState:
        state = replace(state, current_player_idx=0)
        state = collect_income(state)

        config = get_player_config(state.num_players())
        if state.step == 1 and any(
            p.num_cities() >= config.step2_trigger for p in state.players
        ):
            logger.info("Step 2 begins in round %d", state.round_number)
            # TODO: remove the lowest plant from the market and draw a replacement on entering step 2
            state = replace(state, step=2)

        return refill_resource_market(state)

    def _handle_step_three_card(self, state: GameState) -> GameState:
        """Start step 3 once the step 3 card is visible in the market.

        The card is taken out of the market for good.
        """
        market = state.power_plant_market
        if not market.has_step_three_card():
            return state

        logger.info("Step 3 card drawn; step 3 begins in round %d", state.round_number)
        return replace(
            state,
            step=3,
            power_plant_market=PowerPlantMarket(
                current=tuple(p for p in market.current if not p.is_step_three_card),
                future=tuple(p for p in market.future if not p.is_step_three_card),
                deck=market.deck,
            ),
        )

    # -------------------------------------------------------------------------
    # Turn order within a phase
    # -------------------------------------------------------------------------

    def advance_to_next_player(self) -> GameState:
        """Move to the next player in the current phase.

        Reverse-order phases count down and stay at 0 when done; other
        phases count up and stay at the last index.
        """
        idx = self.state.current_player_idx
        last = len(self.state.players) - 1

        if self.state.is_reverse_order_phase():
            next_idx = max(idx - 1, 0)
        else:
            next_idx = min(idx + 1, last)

        return replace(self.state, current_player_idx=next_idx)

    def is_phase_complete(self) -> bool:
        """Check if the current phase is ready to advance."""
        phase = self.phase
        idx = self.state.current_player_idx
        last = len(self.state.players) - 1

        if phase == Phase.SETUP:
            return False
        if phase in (Phase.DETERMINE_PLAYER_ORDER, Phase.GAME_OVER):
            return True
        if phase == Phase.AUCTION_POWER_PLANTS:
            return should_auction_phase_end(self.state)
        if self.state.is_reverse_order_phase():
            return idx == 0
        return idx >= last

    # -------------------------------------------------------------------------
    # Game end
    # -------------------------------------------------------------------------

    def check_game_end(self) -> bool:
        """Check if any player has reached the end-game city count."""
        trigger = get_player_config(self.state.num_players()).game_end_trigger
        return any(p.num_cities() >= trigger for p in self.state.players)

    def determine_winner(self) -> Optional[str]:
        """Pick the winner.

        Ranks by connected cities, then money. Official scoring ranks by
        cities powered in the final bureaucracy instead.
        """
        if not self.state.players:
            return None
        ranked = sorted(
            self.state.players,
            key=lambda p: (p.num_cities(), p.money),
            reverse=True,
        )
        return ranked[0].player_id

    def end_game(self) -> GameState:
        """Enter the terminal game-over phase."""
        logger.info("Game over after round %d", self.state.round_number)
        return replace(self.state, phase=Phase.GAME_OVER)

    def __str__(self) -> str:
        """Return string representation of the phase machine."""
        return f"PhaseMachine(phase={self.phase.value}, round={self.state.round_number})"

    def __repr__(self) -> str:
        """Return detailed representation of the phase machine."""
        return f"PhaseMachine(phase={self.phase!r}, round={self.state.round_number})"


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def advance_phase(state: GameState) -> GameState:
    """Advance a state to its next phase."""
    return PhaseMachine(state).advance_phase()


def advance_to_next_player(state: GameState) -> GameState:
    """Advance a state to the next player within its phase."""
    return PhaseMachine(state).advance_to_next_player()


def is_phase_complete(state: GameState) -> bool:
    return PhaseMachine(state).is_phase_complete()


def check_game_end(state: GameState) -> bool:
    return PhaseMachine(state).check_game_end()


def determine_winner(state: GameState) -> Optional[str]:
    return PhaseMachine(state).determine_winner()


def end_game(state: GameState) -> GameState:
    return PhaseMachine(state).end_game()
