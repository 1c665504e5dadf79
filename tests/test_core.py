"""Tests for core data models: plants, resources, players, the map and GameState."""

import math

import pytest

from core.city_graph import City, CityGraph, CityGraphError, Connection
from core.config import (
    FALLBACK_PLAYER_COUNT,
    PLAYER_COUNT_CONFIGS,
    get_player_config,
    is_valid_player_count,
)
from core.constants import (
    Phase,
    PlantType,
    ResourceType,
    INCOME_TABLE,
    RESOURCE_RUNGS,
)
from core.game_state import GameState
from core.player import Player
from core.power_plant import PowerPlant, PowerPlantMarket, STEP_3_CARD, sort_plants
from core.resources import ResourceInventory, ResourceMarket


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def line_graph() -> CityGraph:
    """A - B - C with costs 3 and 4, plus an isolated city D."""
    return CityGraph.from_edges(
        [
            ("a", "Alpha", "north"),
            ("b", "Bravo", "north"),
            ("c", "Charlie", "south"),
            ("d", "Delta", "south"),
        ],
        [("a", "b", 3), ("b", "c", 4)],
    )


@pytest.fixture
def players() -> tuple[Player, ...]:
    return (
        Player(player_id="player-0", name="Ann"),
        Player(player_id="player-1", name="Ben"),
        Player(player_id="player-2", name="Cat"),
    )


@pytest.fixture
def game_state(line_graph: CityGraph, players: tuple[Player, ...]) -> GameState:
    return GameState(players=players, city_graph=line_graph)


# =============================================================================
# Configuration Tests
# =============================================================================


class TestPlayerCountConfig:
    """Test per-player-count rule tables."""

    def test_valid_player_counts(self):
        assert not is_valid_player_count(1)
        assert all(is_valid_player_count(n) for n in range(2, 7))
        assert not is_valid_player_count(7)

    def test_known_configs(self):
        """Triggers and removals should match the rulebook."""
        assert get_player_config(2).step2_trigger == 10
        assert get_player_config(2).game_end_trigger == 21
        assert get_player_config(2).max_plants == 4
        assert get_player_config(4).removed_plants == 4
        assert get_player_config(6).step2_trigger == 6
        assert get_player_config(6).game_end_trigger == 14

    def test_unknown_count_falls_back(self, caplog):
        """Unknown counts should use the 4-player rules and warn."""
        config = get_player_config(9)
        assert config == PLAYER_COUNT_CONFIGS[FALLBACK_PLAYER_COUNT]
        assert "No rules for 9 players" in caplog.text

    def test_income_table_bounds(self):
        assert INCOME_TABLE[0] == 10
        assert INCOME_TABLE[-1] == 150
        assert len(INCOME_TABLE) == 21


# =============================================================================
# Power Plant Tests
# =============================================================================


class TestPowerPlant:
    """Test PowerPlant and PowerPlantMarket."""

    def test_hybrid_burns_coal_and_oil(self):
        plant = PowerPlant(5, PlantType.HYBRID, 2, 1, 4)
        assert plant.can_burn(ResourceType.COAL)
        assert plant.can_burn(ResourceType.OIL)
        assert not plant.can_burn(ResourceType.GARBAGE)

    def test_single_fuel_plant(self):
        plant = PowerPlant(11, PlantType.URANIUM, 1, 2, 2)
        assert plant.can_burn(ResourceType.URANIUM)
        assert not plant.can_burn(ResourceType.COAL)

    def test_step_three_card(self):
        assert STEP_3_CARD.is_step_three_card
        assert str(STEP_3_CARD) == "Step 3"
        assert not PowerPlant(13, PlantType.ECO, 0, 1).is_step_three_card

    def test_sort_plants(self):
        plants = [PowerPlant(n, PlantType.COAL, 1, 1) for n in (10, 3, 7)]
        assert [p.number for p in sort_plants(plants)] == [3, 7, 10]

    def test_market_queries(self):
        plants = [PowerPlant(n, PlantType.COAL, 1, 1) for n in range(3, 11)]
        market = PowerPlantMarket(
            current=tuple(plants[:4]),
            future=tuple(plants[4:]),
            deck=(STEP_3_CARD,),
        )
        assert market.find_current(4).number == 4
        assert market.find_current(8) is None  # future tier
        assert len(market.visible_plants()) == 8
        assert market.total_plants() == 9
        assert not market.has_step_three_card()


# =============================================================================
# Resource Tests
# =============================================================================


class TestResources:
    """Test ResourceInventory and ResourceMarket."""

    def test_inventory_add_and_total(self):
        inv = ResourceInventory().add(ResourceType.COAL, 2).add(ResourceType.URANIUM)
        assert inv.coal == 2
        assert inv.get(ResourceType.URANIUM) == 1
        assert inv.total() == 3
        assert inv.as_dict() == {"coal": 2, "oil": 0, "garbage": 0, "uranium": 1}

    def test_inventory_is_immutable(self):
        inv = ResourceInventory()
        inv.add(ResourceType.OIL)
        assert inv.oil == 0

    def test_market_keeps_pools_sorted(self):
        market = ResourceMarket().add_units(ResourceType.COAL, [5, 1, 3])
        assert market.pool(ResourceType.COAL) == (1, 3, 5)
        assert market.cheapest(ResourceType.COAL) == 1

    def test_take_cheapest(self):
        market = ResourceMarket(oil=(3, 3, 4))
        market = market.take_cheapest(ResourceType.OIL)
        assert market.pool(ResourceType.OIL) == (3, 4)
        assert market.count_at_price(ResourceType.OIL, 3) == 1

    def test_take_from_empty_pool_raises(self):
        with pytest.raises(ValueError):
            ResourceMarket().take_cheapest(ResourceType.GARBAGE)

    def test_cheapest_of_empty_pool(self):
        assert ResourceMarket().cheapest(ResourceType.URANIUM) is None

    def test_uranium_rungs(self):
        """Uranium has single-unit rungs up to 8 and then 10, 12, 14, 16."""
        rungs = RESOURCE_RUNGS[ResourceType.URANIUM]
        assert sorted(rungs) == [1, 2, 3, 4, 5, 6, 7, 8, 10, 12, 14, 16]
        assert all(capacity == 1 for capacity in rungs.values())


# =============================================================================
# Player Tests
# =============================================================================


class TestPlayer:
    """Test Player copy helpers."""

    def test_defaults(self):
        player = Player(player_id="player-0", name="Ann")
        assert player.money == 50
        assert player.num_cities() == 0
        assert player.highest_plant_number() == 0

    def test_pay_and_earn(self):
        player = Player(player_id="player-0", name="Ann")
        assert player.pay(20).money == 30
        assert player.earn(5).money == 55
        assert player.money == 50

    def test_plants_and_cities(self):
        player = (
            Player(player_id="player-0", name="Ann")
            .add_plant(PowerPlant(7, PlantType.OIL, 3, 2, 6))
            .add_plant(PowerPlant(4, PlantType.COAL, 2, 1, 4))
            .add_city("a")
        )
        assert player.highest_plant_number() == 7
        assert player.owns_city("a")
        assert not player.owns_city("b")
        assert player.num_cities() == 1

    def test_can_afford(self):
        player = Player(player_id="player-0", name="Ann", money=10)
        assert player.can_afford(10)
        assert not player.can_afford(11)


# =============================================================================
# City Graph Tests
# =============================================================================


class TestCityGraph:
    """Test map construction and shortest paths."""

    def test_from_edges_is_symmetric(self, line_graph: CityGraph):
        assert line_graph.get_city("a").get_neighbors() == {"b"}
        assert line_graph.get_city("b").get_neighbors() == {"a", "c"}
        assert line_graph.get_regions() == {"north", "south"}
        assert len(line_graph) == 4

    def test_shortest_path_cost(self, line_graph: CityGraph):
        assert line_graph.shortest_path_cost("a", "c") == 7
        assert line_graph.shortest_path("a", "c") == ["a", "b", "c"]

    def test_unreachable_city(self, line_graph: CityGraph):
        assert math.isinf(line_graph.shortest_path_cost("a", "d"))
        assert line_graph.shortest_path("a", "d") == []
        assert not line_graph.is_connected()

    def test_unknown_city(self, line_graph: CityGraph):
        assert math.isinf(line_graph.shortest_path_cost("a", "zzz"))
        assert line_graph.get_city("zzz") is None
        assert not line_graph.has_city("zzz")

    def test_multi_source_takes_minimum(self, line_graph: CityGraph):
        """The cheapest source wins."""
        assert line_graph.cheapest_connection_cost(["a", "b"], "c") == 4
        assert line_graph.cheapest_connection_cost(["a"], "c") == 7

    def test_target_already_in_sources(self, line_graph: CityGraph):
        assert line_graph.cheapest_connection_cost(["a", "c"], "c") == 0

    def test_zero_cost_edge(self):
        graph = CityGraph.from_edges(
            [("x", "X", "r"), ("y", "Y", "r"), ("z", "Z", "r")],
            [("x", "y", 0), ("y", "z", 5)],
        )
        assert graph.shortest_path_cost("x", "y") == 0
        assert graph.shortest_path_cost("x", "z") == 5

    def test_duplicate_city_rejected(self):
        with pytest.raises(CityGraphError):
            CityGraph.from_cities([City("a", "A", "r"), City("a", "A", "r")])

    def test_unknown_edge_target_rejected(self):
        with pytest.raises(CityGraphError):
            CityGraph.from_edges([("a", "A", "r")], [("a", "b", 3)])

    def test_asymmetric_connection_rejected(self):
        with pytest.raises(CityGraphError):
            CityGraph.from_cities([
                City("a", "A", "r", (Connection("b", 3),)),
                City("b", "B", "r", (Connection("a", 4),)),
            ])

    def test_negative_cost_rejected(self):
        with pytest.raises(CityGraphError):
            CityGraph.from_edges([("a", "A", "r"), ("b", "B", "r")], [("a", "b", -1)])

    def test_graph_is_hashable(self, line_graph: CityGraph):
        rebuilt = CityGraph.from_cities(reversed(line_graph.all_cities()))
        assert rebuilt == line_graph
        assert hash(rebuilt) == hash(line_graph)
        assert len({line_graph, rebuilt}) == 1


# =============================================================================
# GameState Tests
# =============================================================================


class TestGameState:
    """Test GameState queries, replacement and serialization."""

    def test_player_lookup(self, game_state: GameState):
        assert game_state.num_players() == 3
        assert game_state.get_current_player().player_id == "player-0"
        assert game_state.get_player("player-2").name == "Cat"
        assert game_state.get_player("nobody") is None
        assert game_state.player_ids() == ["player-0", "player-1", "player-2"]

    def test_replace_player_keeps_order(self, game_state: GameState):
        updated = game_state.get_player("player-1").earn(10)
        new_state = game_state.replace_player(updated)
        assert new_state.players[1].money == 60
        assert new_state.player_ids() == game_state.player_ids()
        assert game_state.players[1].money == 50

    def test_count_houses(self, game_state: GameState):
        state = game_state.replace_player(game_state.players[0].add_city("a"))
        state = state.replace_player(state.players[2].add_city("a"))
        assert state.count_houses("a") == 2
        assert state.count_houses("b") == 0
        assert state.get_city_owners("a") == ["player-0", "player-2"]

    def test_reverse_order_phases(self, game_state: GameState):
        from dataclasses import replace

        assert not game_state.is_reverse_order_phase()
        assert replace(game_state, phase=Phase.BUY_RESOURCES).is_reverse_order_phase()
        assert replace(game_state, phase=Phase.BUILD_NETWORK).is_reverse_order_phase()
        assert replace(game_state, phase=Phase.GAME_OVER).is_game_over()

    def test_validate_clean_state(self, game_state: GameState):
        assert game_state.validate() == []

    def test_validate_catches_errors(self, game_state: GameState):
        from dataclasses import replace

        bad = replace(game_state, current_player_idx=5, step=4)
        bad = bad.replace_player(bad.players[0].add_city("nowhere"))
        errors = bad.validate()
        assert any("current_player_idx" in e for e in errors)
        assert any("step" in e for e in errors)
        assert any("nowhere" in e for e in errors)

    def test_state_hash_is_stable(self, game_state: GameState):
        assert game_state.state_hash() == game_state.state_hash()
        changed = game_state.replace_player(game_state.players[0].pay(1))
        assert changed.state_hash() != game_state.state_hash()

    def test_snapshots_are_hashable(self, game_state: GameState):
        changed = game_state.replace_player(game_state.players[0].pay(1))
        seen = {game_state, changed}
        assert len(seen) == 2
        assert game_state in seen
        assert hash(game_state) == hash(game_state.replace_player(game_state.players[0]))

    def test_to_dict(self, game_state: GameState):
        data = game_state.to_dict()
        assert data["phase"] == "setup"
        assert data["round_number"] == 1
        assert len(data["players"]) == 3
        assert data["players"][0]["resources"]["coal"] == 0
