"""Tests for powering cities and income."""

from dataclasses import replace

import pytest

from core.city_graph import CityGraph
from core.constants import Phase, PlantType, ResourceType
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlant
from core.resources import ResourceInventory
from engine.bureaucracy import (
    collect_income,
    count_powerable_cities,
    get_income,
    get_powering_plan,
    power_cities,
)


COAL_PLANT = PowerPlant(4, PlantType.COAL, 2, 1, 4)
OIL_PLANT = PowerPlant(7, PlantType.OIL, 3, 2, 6)
HYBRID_PLANT = PowerPlant(5, PlantType.HYBRID, 2, 1, 4)
ECO_PLANT = PowerPlant(13, PlantType.ECO, 0, 1, 0)
BIG_COAL_PLANT = PowerPlant(20, PlantType.COAL, 3, 5, 6)


# =============================================================================
# Fixtures
# =============================================================================


def _player(*plants: PowerPlant, cities: int = 5, **resources) -> Player:
    return Player(
        player_id="player-0",
        name="Ann",
        power_plants=plants,
        cities=tuple(f"city-{i}" for i in range(cities)),
        resources=ResourceInventory(**resources),
    )


@pytest.fixture
def state() -> GameState:
    return GameState(
        players=(
            _player(COAL_PLANT, ECO_PLANT, cities=2, coal=2),
            replace(_player(cities=0), player_id="player-1", name="Ben"),
        ),
        city_graph=CityGraph(),
        phase=Phase.BUREAUCRACY,
        round_number=2,
    )


# =============================================================================
# Income Tests
# =============================================================================


class TestIncome:
    """Test the income table lookup."""

    def test_income_values(self):
        assert get_income(0) == 10
        assert get_income(1) == 22
        assert get_income(5) == 54
        assert get_income(20) == 150

    def test_income_capped(self):
        assert get_income(25) == 150

    def test_income_floor(self):
        assert get_income(-1) == 10


# =============================================================================
# Powering Plan Tests
# =============================================================================


class TestPoweringPlan:
    """Test which plants a player fires."""

    def test_no_plants(self):
        plan = get_powering_plan(_player())
        assert plan.cities_powered == 0
        assert plan.plants == ()

    def test_eco_plant_needs_no_fuel(self):
        plan = get_powering_plan(_player(ECO_PLANT))
        assert plan.cities_powered == 1
        assert plan.fuel_burned == {}

    def test_missing_fuel(self):
        plan = get_powering_plan(_player(COAL_PLANT, coal=1))
        assert plan.cities_powered == 0

    def test_capped_by_connected_cities(self):
        plan = get_powering_plan(_player(BIG_COAL_PLANT, cities=2, coal=3))
        assert plan.cities_powered == 2

    def test_prefers_more_cities(self):
        """With fuel for only one plant, the bigger one runs."""
        player = _player(COAL_PLANT, BIG_COAL_PLANT, coal=3)
        plan = get_powering_plan(player)
        assert [p.number for p in plan.plants] == [20]
        assert plan.cities_powered == 5

    def test_prefers_less_fuel_on_tie(self):
        """Once cities are capped, the cheaper set of plants runs."""
        player = _player(ECO_PLANT, COAL_PLANT, cities=1, coal=2)
        plan = get_powering_plan(player)
        assert plan.cities_powered == 1
        assert plan.total_fuel() == 0

    def test_hybrid_burns_coal_first(self):
        plan = get_powering_plan(_player(HYBRID_PLANT, coal=1, oil=3))
        assert plan.fuel_burned == {ResourceType.COAL: 1, ResourceType.OIL: 1}

    def test_hybrid_shares_with_dedicated(self):
        """Oil for the oil plant is not available to the hybrid."""
        player = _player(OIL_PLANT, HYBRID_PLANT, oil=4)
        plan = get_powering_plan(player)
        assert [p.number for p in plan.plants] == [7]
        assert plan.cities_powered == 2

    def test_count_powerable_cities(self):
        player = _player(COAL_PLANT, ECO_PLANT, coal=2)
        assert count_powerable_cities(player) == 2


# =============================================================================
# Powering and Income Tests
# =============================================================================


class TestPowerCities:
    """Test firing plants and paying income."""

    def test_fuel_is_burned_and_income_paid(self):
        player = _player(COAL_PLANT, ECO_PLANT, coal=3)
        updated, plan = power_cities(player)
        assert plan.cities_powered == 2
        assert updated.resources.coal == 1
        assert updated.money == 50 + 33

    def test_nothing_powered_still_pays_base_income(self):
        updated, plan = power_cities(_player(COAL_PLANT))
        assert plan.cities_powered == 0
        assert updated.money == 60

    def test_collect_income(self, state: GameState):
        new_state = collect_income(state)
        assert new_state.get_player("player-0").money == 50 + 33
        assert new_state.get_player("player-0").resources.coal == 0
        assert new_state.get_player("player-1").money == 60
