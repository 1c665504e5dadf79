"""Bureaucracy: powering cities and paying income.

Each player fires a set of their plants, burning the fuel each plant
needs, and is paid from the income table for the number of connected
cities those plants supply.

Plant selection picks the set that powers the most cities (capped at the
player's connected cities), burning the least fuel on ties. Hybrid plants
burn coal before oil.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from itertools import combinations
from typing import Optional

from core.constants import INCOME_TABLE, PlantType, ResourceType
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlant
from core.resources import ResourceInventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoweringPlan:
    """Which plants a player fires and what they burn.

    Attributes:
        plants: Plants fired, ascending by number.
        cities_powered: Connected cities supplied.
        fuel_burned: Units burned per resource kind.
    """

    plants: tuple[PowerPlant, ...] = ()
    cities_powered: int = 0
    fuel_burned: dict[ResourceType, int] = field(default_factory=dict)

    def total_fuel(self) -> int:
        return sum(self.fuel_burned.values())


def get_income(cities_powered: int) -> int:
    """Income for a number of powered cities."""
    return INCOME_TABLE[max(0, min(cities_powered, len(INCOME_TABLE) - 1))]


def _fuel_needed(
    plants: tuple[PowerPlant, ...], inventory: ResourceInventory
) -> Optional[dict[ResourceType, int]]:
    """Fuel a set of plants burns, or None if the inventory cannot cover it."""
    needed = {kind: 0 for kind in ResourceType}
    hybrid_need = 0
    for plant in plants:
        if plant.plant_type == PlantType.HYBRID:
            hybrid_need += plant.resource_cost
        elif plant.plant_type != PlantType.ECO:
            needed[ResourceType(plant.plant_type.value)] += plant.resource_cost

    for kind, amount in needed.items():
        if amount > inventory.get(kind):
            return None

    spare_coal = inventory.coal - needed[ResourceType.COAL]
    spare_oil = inventory.oil - needed[ResourceType.OIL]
    if hybrid_need > spare_coal + spare_oil:
        return None

    from_coal = min(hybrid_need, spare_coal)
    needed[ResourceType.COAL] += from_coal
    needed[ResourceType.OIL] += hybrid_need - from_coal
    return {kind: amount for kind, amount in needed.items() if amount > 0}


def get_powering_plan(player: Player) -> PoweringPlan:
    """Choose the plants a player fires this bureaucracy."""
    plants = tuple(p for p in player.power_plants if not p.is_step_three_card)
    best = PoweringPlan()

    for size in range(1, len(plants) + 1):
        for subset in combinations(plants, size):
            fuel = _fuel_needed(subset, player.resources)
            if fuel is None:
                continue
            powered = min(sum(p.cities_powered for p in subset), player.num_cities())
            candidate = PoweringPlan(
                plants=tuple(sorted(subset, key=lambda p: p.number)),
                cities_powered=powered,
                fuel_burned=fuel,
            )
            if (candidate.cities_powered, -candidate.total_fuel()) > (
                best.cities_powered, -best.total_fuel()
            ):
                best = candidate

    return best


def count_powerable_cities(player: Player) -> int:
    """Cities a player could power right now."""
    return get_powering_plan(player).cities_powered


def power_cities(player: Player) -> tuple[Player, PoweringPlan]:
    """Fire plants, burn fuel and pay income for one player."""
    plan = get_powering_plan(player)
    resources = player.resources
    for kind, amount in plan.fuel_burned.items():
        resources = resources.add(kind, -amount)

    income = get_income(plan.cities_powered)
    updated = replace(player, resources=resources).earn(income)
    logger.info(
        "%s powered %d cities with plants %s and earned %d",
        player.player_id,
        plan.cities_powered,
        [p.number for p in plan.plants],
        income,
    )
    return updated, plan


def collect_income(state: GameState) -> GameState:
    """Run powering and income for every player."""
    for player in state.players:
        updated, _ = power_cities(player)
        state = state.replace_player(updated)
    return state
