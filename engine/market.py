"""Resource market operations.

Handles buying fuel from the market, storing it on power plants, and
refilling the market during bureaucracy.

Pricing: each pool is sorted ascending and buyers always take the cheapest
unit. Refill puts new units on the most expensive rung that still has room,
so scarcity keeps prices high.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from core.config import FALLBACK_PLAYER_COUNT
from core.constants import (
    PlantType,
    ResourceType,
    RESOURCE_RUNGS,
    RESOURCE_SUPPLY,
    REFILL_TABLE,
    STARTING_RESOURCE_LOWEST_PRICE,
)
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlant
from core.resources import ResourceMarket

logger = logging.getLogger(__name__)


def create_starting_market() -> ResourceMarket:
    """Build the resource market as laid out at game start.

    Every rung from the starting price upward is filled to capacity.
    """
    market = ResourceMarket()
    for kind in ResourceType:
        lowest = STARTING_RESOURCE_LOWEST_PRICE[kind]
        prices = [
            price
            for price, capacity in RESOURCE_RUNGS[kind].items()
            if price >= lowest
            for _ in range(capacity)
        ]
        market = market.add_units(kind, prices)
    return market


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------


def get_resource_cost(state: GameState, kind: ResourceType) -> Optional[int]:
    """Price of the cheapest unit of a kind, or None if sold out."""
    return state.resource_market.cheapest(kind)


def _capacity(plants: tuple[PowerPlant, ...], plant_type: PlantType) -> int:
    return sum(p.resource_storage for p in plants if p.plant_type == plant_type)


def get_available_storage(player: Player, kind: ResourceType) -> int:
    """Free storage for one resource kind across a player's plants.

    Hybrid plants hold coal and oil from one shared capacity. Coal or oil
    beyond what dedicated plants hold is assumed to sit on hybrids, so
    buying either kind shrinks the room left for both.
    """
    plants = player.power_plants
    held = player.get_resource(kind)

    if kind in (ResourceType.COAL, ResourceType.OIL):
        other = ResourceType.OIL if kind == ResourceType.COAL else ResourceType.COAL
        own_capacity = _capacity(plants, PlantType(kind.value))
        other_capacity = _capacity(plants, PlantType(other.value))
        hybrid_capacity = _capacity(plants, PlantType.HYBRID)

        other_on_hybrids = max(0, player.get_resource(other) - other_capacity)
        free = own_capacity + hybrid_capacity - held - other_on_hybrids
    else:
        free = _capacity(plants, PlantType(kind.value)) - held

    return max(0, free)


def can_afford_resource(state: GameState, player_id: str, kind: ResourceType) -> bool:
    player = state.get_player(player_id)
    if player is None:
        return False
    cost = get_resource_cost(state, kind)
    return cost is not None and player.can_afford(cost)


def has_storage_space(state: GameState, player_id: str, kind: ResourceType) -> bool:
    player = state.get_player(player_id)
    if player is None:
        return False
    return get_available_storage(player, kind) > 0


@dataclass(frozen=True)
class ResourcePurchaseOption:
    """What a player could buy of one resource kind right now."""

    kind: ResourceType
    cost: Optional[int]
    available: int
    can_afford: bool
    has_storage: bool

    @property
    def can_purchase(self) -> bool:
        return self.cost is not None and self.can_afford and self.has_storage


def get_resource_purchase_options(
    state: GameState, player_id: str
) -> list[ResourcePurchaseOption]:
    """Summarise purchase options for each resource kind."""
    return [
        ResourcePurchaseOption(
            kind=kind,
            cost=get_resource_cost(state, kind),
            available=state.resource_market.available(kind),
            can_afford=can_afford_resource(state, player_id, kind),
            has_storage=has_storage_space(state, player_id, kind),
        )
        for kind in ResourceType
    ]


def is_player_done_purchasing(state: GameState, player_id: str) -> bool:
    """True when the player cannot buy any resource at all."""
    return not any(opt.can_purchase for opt in get_resource_purchase_options(state, player_id))


# -----------------------------------------------------------------------------
# Purchasing
# -----------------------------------------------------------------------------


def purchase_resource(
    state: GameState, player_id: str, kind: ResourceType
) -> Optional[GameState]:
    """Buy the cheapest unit of a resource for a player.

    Returns:
        The new state, or None if the pool is empty, the player cannot
        pay, or the player has no room to store it.
    """
    player = state.get_player(player_id)
    if player is None:
        return None

    cost = get_resource_cost(state, kind)
    if cost is None:
        logger.debug("No %s left for %s", kind.value, player_id)
        return None
    if not player.can_afford(cost):
        return None
    if get_available_storage(player, kind) <= 0:
        logger.debug("%s has no storage for %s", player_id, kind.value)
        return None

    new_state = replace(state, resource_market=state.resource_market.take_cheapest(kind))
    return new_state.replace_player(player.pay(cost).add_resource(kind))


# -----------------------------------------------------------------------------
# Refill
# -----------------------------------------------------------------------------


def get_refill_amount(kind: ResourceType, num_players: int, step: int) -> int:
    """Units of a kind added to the market in bureaucracy."""
    by_players = REFILL_TABLE[kind]
    amounts = by_players.get(num_players, by_players[FALLBACK_PLAYER_COUNT])
    return amounts[step - 1]


def get_supply_remaining(state: GameState, kind: ResourceType) -> int:
    """Units of a kind neither in the market nor held by players."""
    held = sum(p.get_resource(kind) for p in state.players)
    return max(0, RESOURCE_SUPPLY[kind] - state.resource_market.available(kind) - held)


def refill_pool(market: ResourceMarket, kind: ResourceType, amount: int) -> ResourceMarket:
    """Add up to ``amount`` units, most expensive open rung first.

    Units that do not fit on any rung are dropped.
    """
    rungs = RESOURCE_RUNGS[kind]
    new_prices: list[int] = []
    remaining = amount

    for price in sorted(rungs, reverse=True):
        if remaining <= 0:
            break
        room = rungs[price] - market.count_at_price(kind, price)
        if room <= 0:
            continue
        placed = min(room, remaining)
        new_prices.extend([price] * placed)
        remaining -= placed

    return market.add_units(kind, new_prices)


def refill_resource_market(state: GameState) -> GameState:
    """Refill every pool per the step and player count tables."""
    market = state.resource_market
    for kind in ResourceType:
        wanted = get_refill_amount(kind, state.num_players(), state.step)
        amount = min(wanted, get_supply_remaining(state, kind))
        market = refill_pool(market, kind, amount)
        logger.debug("Refilled %d of %d %s", amount, wanted, kind.value)

    return replace(state, resource_market=market)
