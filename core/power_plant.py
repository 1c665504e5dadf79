"""Power plant cards and the power plant market.

Plants are immutable catalog entries. The market is split into three tiers:
the current tier (plants that may be auctioned), the future tier (visible but
not yet purchasable) and the face-down deck.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import PlantType, ResourceType, STEP_3_CARD_NUMBER


@dataclass(frozen=True)
class PowerPlant:
    """A power plant card.

    Attributes:
        number: Plant number; also the minimum bid and the market sort key.
        plant_type: What the plant burns.
        resource_cost: Resources burned to run the plant once.
        cities_powered: Cities supplied when the plant runs.
        resource_storage: Resources the plant can hold.
    """

    number: int
    plant_type: PlantType
    resource_cost: int
    cities_powered: int
    resource_storage: int = 0

    @property
    def is_step_three_card(self) -> bool:
        """True for the sentinel card that starts step 3."""
        return self.number == STEP_3_CARD_NUMBER

    def can_burn(self, kind: ResourceType) -> bool:
        """Check if this plant can store and burn a resource kind."""
        if self.plant_type == PlantType.HYBRID:
            return kind in (ResourceType.COAL, ResourceType.OIL)
        return self.plant_type.value == kind.value

    def __str__(self) -> str:
        if self.is_step_three_card:
            return "Step 3"
        return (
            f"#{self.number} {self.plant_type.value} "
            f"({self.resource_cost} -> {self.cities_powered})"
        )


STEP_3_CARD = PowerPlant(
    number=STEP_3_CARD_NUMBER,
    plant_type=PlantType.ECO,
    resource_cost=0,
    cities_powered=0,
)


def sort_plants(plants) -> tuple[PowerPlant, ...]:
    """Return plants sorted ascending by number."""
    return tuple(sorted(plants, key=lambda p: p.number))


@dataclass(frozen=True)
class PowerPlantMarket:
    """The current / future / deck triple.

    Attributes:
        current: Plants available for auction, ascending.
        future: Next plants to enter the current tier, ascending.
        deck: Face-down draw pile; index 0 is the top.
    """

    current: tuple[PowerPlant, ...] = ()
    future: tuple[PowerPlant, ...] = ()
    deck: tuple[PowerPlant, ...] = ()

    def visible_plants(self) -> tuple[PowerPlant, ...]:
        """Return current and future plants together."""
        return self.current + self.future

    def find_current(self, plant_number: int) -> PowerPlant | None:
        """Find a plant in the current tier by number."""
        for plant in self.current:
            if plant.number == plant_number:
                return plant
        return None

    def has_step_three_card(self) -> bool:
        """Check if the step 3 card has been drawn into the visible market."""
        return any(p.is_step_three_card for p in self.visible_plants())

    def total_plants(self) -> int:
        """Count every plant in all three tiers."""
        return len(self.current) + len(self.future) + len(self.deck)
