"""Power plant auctions.

One auction runs per plant put up for sale:
- The player who picks the plant opens the auction at the plant's number
- Bidding rotates in seating order, skipping players who have passed
- A player who passes is out of this auction for good
- The auction ends when at most one player is still active

Round-level bookkeeping tracks which players have finished their auction
turn (bought a plant or declined to start an auction) during the phase.

All functions are pure: they return new AuctionState / GameState values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from core.config import get_player_config
from core.constants import MARKET_TIER_SIZE
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlant, PowerPlantMarket, sort_plants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuctionState:
    """State of a single plant auction.

    Attributes:
        plant: The plant being auctioned.
        current_bid: Highest bid so far; the plant number before any bid.
        current_bidder: Player holding the highest bid, or None if nobody
            has bid yet.
        starting_player: Player who put the plant up for auction.
        active_players: Players who may still bid, in seating order.
        passed_players: Players who have dropped out, in the order they passed.
    """

    plant: PowerPlant
    current_bid: int
    current_bidder: Optional[str]
    starting_player: str
    active_players: tuple[str, ...]
    passed_players: tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Single auction
# -----------------------------------------------------------------------------


def start_auction(
    state: GameState,
    plant: PowerPlant,
    starting_player_id: str,
    single_shot: bool = False,
) -> AuctionState:
    """Open an auction for a plant.

    Args:
        state: The current game state.
        plant: The plant to auction.
        starting_player_id: The player who picked the plant.
        single_shot: If True, every player takes part regardless of
            whether they already bought a plant this round.

    Returns:
        A fresh AuctionState with no bids.
    """
    if single_shot:
        eligible = tuple(state.player_ids())
    else:
        eligible = tuple(
            pid for pid in state.player_ids()
            if pid not in state.players_who_bought_this_round
        )

    logger.debug(
        "Auction for plant %d started by %s with %d eligible players",
        plant.number, starting_player_id, len(eligible),
    )
    return AuctionState(
        plant=plant,
        current_bid=plant.number,
        current_bidder=None,
        starting_player=starting_player_id,
        active_players=eligible,
    )


def minimum_bid(auction: AuctionState) -> int:
    """Smallest legal next bid.

    The opening bid may equal the plant number; every later bid must raise.
    """
    if auction.current_bidder is None:
        return auction.current_bid
    return auction.current_bid + 1


def place_bid(auction: AuctionState, player_id: str, amount: int) -> AuctionState:
    """Record a bid.

    Legality (at least ``minimum_bid`` and affordable) is checked by the
    caller before this is invoked.
    """
    return replace(auction, current_bid=amount, current_bidder=player_id)


def pass_auction(auction: AuctionState, player_id: str) -> AuctionState:
    """Move a player from the active list to the passed list."""
    if player_id not in auction.active_players:
        return auction
    return replace(
        auction,
        active_players=tuple(p for p in auction.active_players if p != player_id),
        passed_players=auction.passed_players + (player_id,),
    )


def is_auction_complete(auction: AuctionState) -> bool:
    """Check if at most one player is still active."""
    return len(auction.active_players) <= 1


def get_auction_winner(auction: AuctionState) -> Optional[str]:
    """Determine who wins the auction.

    - One active player left: they win, whether or not they ever bid.
    - Nobody active and a bid exists: the last bidder wins.
    - Nobody active and no bid: the starting player must take the plant.

    Returns:
        The winner's id, or None while two or more players are active.
    """
    if len(auction.active_players) == 1:
        return auction.active_players[0]

    if len(auction.active_players) == 0:
        if auction.current_bidder is not None:
            return auction.current_bidder
        return auction.starting_player

    return None


def get_final_price(auction: AuctionState) -> int:
    """Price the winner pays: the standing bid, or face value if none."""
    return auction.current_bid


def get_next_auction_player(
    auction: AuctionState,
    current_player_id: str,
    players_in_order: Sequence[Player],
) -> Optional[str]:
    """Find who bids next.

    Bidding follows the fixed seating order, not the order of the active
    list, and skips anyone who has passed.

    Args:
        auction: The auction in progress.
        current_player_id: The player who just acted.
        players_in_order: All players in seating order.

    Returns:
        The next active player's id, or None if nobody is active.
    """
    active = auction.active_players
    if not active:
        return None

    seat_ids = [p.player_id for p in players_in_order]
    if current_player_id not in seat_ids:
        return active[0]

    current_idx = seat_ids.index(current_player_id)
    for offset in range(1, len(seat_ids) + 1):
        candidate = seat_ids[(current_idx + offset) % len(seat_ids)]
        if candidate in active:
            return candidate

    return active[0]


def can_pass_auction(state: GameState, auction: AuctionState, player_id: str) -> bool:
    """Check whether a player may pass in an auction.

    In the first round the player who picked the plant and owns no plant
    must make the opening bid. Everyone else may pass at any time.
    """
    if player_id != auction.starting_player:
        return True
    if not is_first_round(state):
        return True
    if auction.current_bidder is not None:
        return True

    player = state.get_player(player_id)
    return player is not None and len(player.power_plants) > 0


def can_afford_bid(player: Player, amount: int) -> bool:
    """Check if a player can pay a bid."""
    return player.money >= amount


# -----------------------------------------------------------------------------
# Round-level bookkeeping
# -----------------------------------------------------------------------------


def is_first_round(state: GameState) -> bool:
    """Check if it is the first round (everyone must buy a plant)."""
    return state.round_number == 1


def all_players_have_plants(state: GameState) -> bool:
    """Check if every player owns at least one plant."""
    return all(len(p.power_plants) > 0 for p in state.players)


def mark_player_as_bought(state: GameState, player_id: str) -> GameState:
    """Record that a player finished their auction turn this round."""
    if player_id in state.players_who_bought_this_round:
        return state
    return replace(
        state,
        players_who_bought_this_round=state.players_who_bought_this_round + (player_id,),
    )


def get_next_player_for_auction(state: GameState) -> Optional[str]:
    """Find the next player who may start an auction.

    Scans seating order from ``current_player_idx``, wrapping around,
    for the first player who has not finished their auction turn.

    Returns:
        That player's id, or None if everyone is done.
    """
    n = len(state.players)
    for offset in range(n):
        player = state.players[(state.current_player_idx + offset) % n]
        if player.player_id not in state.players_who_bought_this_round:
            return player.player_id
    return None


def should_auction_phase_end(state: GameState) -> bool:
    """Check if the auction phase is over.

    Round 1 ends once every player owns a plant. Later rounds end once
    every player has bought or passed.
    """
    if is_first_round(state):
        return all_players_have_plants(state)
    return get_next_player_for_auction(state) is None


# -----------------------------------------------------------------------------
# Completing a purchase
# -----------------------------------------------------------------------------


def is_plant_purchasable(state: GameState, plant: PowerPlant) -> bool:
    """Check if a plant may be put up for auction.

    Only plants in the current tier can be bought, and never the step 3 card.
    """
    if plant.is_step_three_card:
        return False
    return state.power_plant_market.find_current(plant.number) is not None


def award_plant(
    state: GameState,
    winner_id: str,
    plant: PowerPlant,
    final_bid: int,
) -> GameState:
    """Give the plant to the winner and charge them the final bid.

    There is no cap here: a player may end up above the plant limit until
    a discard step exists.
    """
    winner = state.get_player(winner_id)
    if winner is None:
        logger.warning("Cannot award plant %d to unknown player %s", plant.number, winner_id)
        return state

    updated = winner.add_plant(plant).pay(final_bid)
    max_plants = get_player_config(state.num_players()).max_plants
    if len(updated.power_plants) > max_plants:
        logger.warning(
            "%s now holds %d plants (limit %d); discard is not implemented",
            winner_id, len(updated.power_plants), max_plants,
        )

    logger.info("%s bought plant %d for %d", winner_id, plant.number, final_bid)
    return state.replace_player(updated)


def refresh_power_plant_market(state: GameState, purchased_plant: PowerPlant) -> GameState:
    """Remove a bought plant from the market and refill it.

    One card is drawn from the deck if any remain. Remaining visible
    plants and the drawn card are sorted and re-split into a current tier
    and a future tier of up to four plants each; any overflow stays on top
    of the deck.
    """
    market = state.power_plant_market
    remaining = [
        p for p in market.visible_plants()
        if p.number != purchased_plant.number
    ]

    deck = list(market.deck)
    if deck:
        remaining.append(deck.pop(0))

    ordered = sort_plants(remaining)
    current = ordered[:MARKET_TIER_SIZE]
    future = ordered[MARKET_TIER_SIZE:2 * MARKET_TIER_SIZE]
    overflow = ordered[2 * MARKET_TIER_SIZE:]

    return replace(
        state,
        power_plant_market=PowerPlantMarket(
            current=current,
            future=future,
            deck=tuple(overflow) + tuple(deck),
        ),
    )


def complete_auction(state: GameState, auction: AuctionState) -> Optional[GameState]:
    """Apply a finished auction to the game state.

    Awards the plant, refreshes the market and marks the winner as done.

    Returns:
        The new state, or None if the auction is not complete.
    """
    if not is_auction_complete(auction):
        return None

    winner_id = get_auction_winner(auction)
    if winner_id is None:
        return None

    new_state = award_plant(state, winner_id, auction.plant, get_final_price(auction))
    new_state = refresh_power_plant_market(new_state, auction.plant)
    return mark_player_as_bought(new_state, winner_id)
