"""Player model for the Power Grid rules engine.

Players are immutable snapshots. Every change returns a new Player; the
game state swaps the new value in place of the old one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .constants import ResourceType, STARTING_MONEY
from .power_plant import PowerPlant
from .resources import ResourceInventory


@dataclass(frozen=True)
class Player:
    """Represents a player in the game.

    Attributes:
        player_id: Unique identifier, e.g. "player-0".
        name: Display name.
        color: Display colour.
        money: Elektro held. Never checked for negativity here.
        power_plants: Owned plants in purchase order.
        cities: Ids of connected cities in build order.
        resources: Resource units held on the player's plants.
    """

    player_id: str
    name: str
    color: str = "#FFFFFF"
    money: int = STARTING_MONEY
    power_plants: tuple[PowerPlant, ...] = ()
    cities: tuple[str, ...] = ()
    resources: ResourceInventory = field(default_factory=ResourceInventory)

    def num_cities(self) -> int:
        """Number of connected cities."""
        return len(self.cities)

    def owns_city(self, city_id: str) -> bool:
        """Check if the player has a house in a city."""
        return city_id in self.cities

    def highest_plant_number(self) -> int:
        """Number of the player's largest plant, 0 if they own none."""
        return max((p.number for p in self.power_plants), default=0)

    def get_resource(self, kind: ResourceType) -> int:
        return self.resources.get(kind)

    def can_afford(self, amount: int) -> bool:
        """Check if the player holds at least ``amount`` money."""
        return self.money >= amount

    def pay(self, amount: int) -> Player:
        """Return a copy with ``amount`` deducted."""
        return replace(self, money=self.money - amount)

    def earn(self, amount: int) -> Player:
        """Return a copy with ``amount`` added."""
        return replace(self, money=self.money + amount)

    def add_plant(self, plant: PowerPlant) -> Player:
        """Return a copy owning one more plant."""
        return replace(self, power_plants=self.power_plants + (plant,))

    def add_city(self, city_id: str) -> Player:
        """Return a copy connected to one more city."""
        return replace(self, cities=self.cities + (city_id,))

    def add_resource(self, kind: ResourceType, amount: int = 1) -> Player:
        """Return a copy holding ``amount`` more units of ``kind``."""
        return replace(self, resources=self.resources.add(kind, amount))
