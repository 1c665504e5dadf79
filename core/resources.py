"""Resource inventory and resource market models.

The market holds one pool per resource kind. Each pool is a multiset of
price tags kept in ascending order, so the cheapest unit is always first.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from .constants import ResourceType


@dataclass(frozen=True)
class ResourceInventory:
    """Resource units held by a player, across all of their plants."""

    coal: int = 0
    oil: int = 0
    garbage: int = 0
    uranium: int = 0

    def get(self, kind: ResourceType) -> int:
        """Units held of one kind."""
        return getattr(self, kind.value)

    def with_amount(self, kind: ResourceType, amount: int) -> ResourceInventory:
        """Return a copy with one kind set to ``amount``."""
        return replace(self, **{kind.value: amount})

    def add(self, kind: ResourceType, amount: int = 1) -> ResourceInventory:
        """Return a copy with ``amount`` units of ``kind`` added."""
        return self.with_amount(kind, self.get(kind) + amount)

    def total(self) -> int:
        """Units held across all kinds."""
        return self.coal + self.oil + self.garbage + self.uranium

    def as_dict(self) -> dict[str, int]:
        return {kind.value: self.get(kind) for kind in ResourceType}


@dataclass(frozen=True)
class ResourceMarket:
    """Four independent ascending price pools.

    Attributes:
        coal: Price tags of coal units for sale.
        oil: Price tags of oil units for sale.
        garbage: Price tags of garbage units for sale.
        uranium: Price tags of uranium units for sale.
    """

    coal: tuple[int, ...] = ()
    oil: tuple[int, ...] = ()
    garbage: tuple[int, ...] = ()
    uranium: tuple[int, ...] = ()

    def pool(self, kind: ResourceType) -> tuple[int, ...]:
        """Price tags for one kind, cheapest first."""
        return getattr(self, kind.value)

    def available(self, kind: ResourceType) -> int:
        """Units for sale of one kind."""
        return len(self.pool(kind))

    def cheapest(self, kind: ResourceType) -> int | None:
        """Price of the cheapest unit, or None if the pool is empty."""
        pool = self.pool(kind)
        return pool[0] if pool else None

    def take_cheapest(self, kind: ResourceType) -> ResourceMarket:
        """Return a copy with the cheapest unit of ``kind`` removed.

        Raises:
            ValueError: If the pool is empty.
        """
        pool = self.pool(kind)
        if not pool:
            raise ValueError(f"No {kind.value} left in the market")
        return replace(self, **{kind.value: pool[1:]})

    def add_units(self, kind: ResourceType, prices: Iterable[int]) -> ResourceMarket:
        """Return a copy with new price tags appended and the pool re-sorted."""
        return replace(self, **{kind.value: tuple(sorted(self.pool(kind) + tuple(prices)))})

    def count_at_price(self, kind: ResourceType, price: int) -> int:
        """Units of ``kind`` currently tagged at ``price``."""
        return self.pool(kind).count(price)

    def as_dict(self) -> dict[str, list[int]]:
        return {kind.value: list(self.pool(kind)) for kind in ResourceType}
