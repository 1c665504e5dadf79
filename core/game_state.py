"""Game state for the Power Grid rules engine.

GameState is the single source of truth for the entire game. It is an
immutable snapshot: every rule operation takes a state and returns a new
one, and the caller keeps only the newest value.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .constants import Phase, MAX_STEP, REVERSE_ORDER_PHASES
from .city_graph import CityGraph
from .config import is_valid_player_count
from .player import Player
from .power_plant import PowerPlantMarket
from .resources import ResourceMarket


@dataclass(frozen=True)
class GameState:
    """The complete game state.

    Attributes:
        players: Players in seating order; re-sorted at each new round.
        city_graph: The map.
        power_plant_market: Current / future / deck triple.
        resource_market: Priced fuel pools.
        phase: Current game phase.
        round_number: Current round (1-indexed).
        current_player_idx: Index into ``players`` of the acting player.
        step: Game step (1, 2 or 3). Also the house limit per city.
        players_who_bought_this_round: Ids of players who finished their
            auction turn this round, by buying or passing.
    """

    players: tuple[Player, ...]
    city_graph: CityGraph
    power_plant_market: PowerPlantMarket = field(default_factory=PowerPlantMarket)
    resource_market: ResourceMarket = field(default_factory=ResourceMarket)
    phase: Phase = Phase.SETUP
    round_number: int = 1
    current_player_idx: int = 0
    step: int = 1
    players_who_bought_this_round: tuple[str, ...] = ()

    # -------------------------------------------------------------------------
    # Player access methods
    # -------------------------------------------------------------------------

    def num_players(self) -> int:
        """Return the number of players."""
        return len(self.players)

    def get_current_player(self) -> Player:
        """Get the player at ``current_player_idx``."""
        return self.players[self.current_player_idx]

    def get_player(self, player_id: str) -> Optional[Player]:
        """Get a player by id, or None if no such player."""
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def player_ids(self) -> list[str]:
        """Player ids in seating order."""
        return [p.player_id for p in self.players]

    def replace_player(self, player: Player) -> GameState:
        """Return a copy with the player of the same id swapped for ``player``."""
        return replace(
            self,
            players=tuple(
                player if p.player_id == player.player_id else p
                for p in self.players
            ),
        )

    # -------------------------------------------------------------------------
    # Board queries
    # -------------------------------------------------------------------------

    def count_houses(self, city_id: str) -> int:
        """Houses built in a city by all players."""
        return sum(1 for p in self.players if p.owns_city(city_id))

    def get_city_owners(self, city_id: str) -> list[str]:
        """Ids of players with a house in a city, in seating order."""
        return [p.player_id for p in self.players if p.owns_city(city_id)]

    # -------------------------------------------------------------------------
    # Phase queries
    # -------------------------------------------------------------------------

    def is_reverse_order_phase(self) -> bool:
        """True in phases where the last-place player acts first."""
        return self.phase in REVERSE_ORDER_PHASES

    def is_game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the game state to a dictionary.

        The map topology is omitted; it never changes during a game.
        """
        return {
            "phase": self.phase.value,
            "round_number": self.round_number,
            "current_player_idx": self.current_player_idx,
            "step": self.step,
            "players_who_bought_this_round": list(self.players_who_bought_this_round),
            "players": [
                {
                    "player_id": p.player_id,
                    "name": p.name,
                    "color": p.color,
                    "money": p.money,
                    "power_plants": [plant.number for plant in p.power_plants],
                    "cities": list(p.cities),
                    "resources": p.resources.as_dict(),
                }
                for p in self.players
            ],
            "power_plant_market": {
                "current": [p.number for p in self.power_plant_market.current],
                "future": [p.number for p in self.power_plant_market.future],
                "deck": [p.number for p in self.power_plant_market.deck],
            },
            "resource_market": self.resource_market.as_dict(),
        }

    def state_hash(self) -> str:
        """Compute a hash of the game state.

        Two states with the same hash are interchangeable for replay.

        Returns:
            A hex string hash of the serialized state.
        """
        state_json = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(state_json.encode()).hexdigest()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Validate the game state for consistency.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors: list[str] = []

        if not is_valid_player_count(len(self.players)):
            errors.append(f"Invalid player count: {len(self.players)}")

        ids = self.player_ids()
        if len(set(ids)) != len(ids):
            errors.append(f"Duplicate player IDs: {ids}")

        if self.players and not 0 <= self.current_player_idx < len(self.players):
            errors.append(f"Invalid current_player_idx: {self.current_player_idx}")

        if not 1 <= self.step <= MAX_STEP:
            errors.append(f"Invalid step: {self.step}")

        for player in self.players:
            for city_id in player.cities:
                if not self.city_graph.has_city(city_id):
                    errors.append(
                        f"Player {player.player_id} connected to unknown city {city_id}"
                    )
            if len(set(player.cities)) != len(player.cities):
                errors.append(f"Player {player.player_id} has duplicate cities")

        for city_id in self.city_graph.cities:
            houses = self.count_houses(city_id)
            if houses > MAX_STEP:
                errors.append(f"City {city_id} has {houses} houses")

        for player_id in self.players_who_bought_this_round:
            if player_id not in ids:
                errors.append(f"Unknown player {player_id} marked as bought")

        return errors

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        lines = [
            f"GameState(phase={self.phase.value}, round={self.round_number}, step={self.step})",
            f"  Current player: {self.current_player_idx}",
            f"  Market: current={[p.number for p in self.power_plant_market.current]} "
            f"future={[p.number for p in self.power_plant_market.future]} "
            f"deck={len(self.power_plant_market.deck)}",
            f"  Players ({len(self.players)}):",
        ]
        for p in self.players:
            lines.append(
                f"    {p.player_id} ({p.name}): money={p.money}, "
                f"plants={[plant.number for plant in p.power_plants]}, "
                f"cities={len(p.cities)}, resources={p.resources.as_dict()}"
            )
        return "\n".join(lines)
