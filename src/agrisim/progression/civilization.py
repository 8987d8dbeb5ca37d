from dataclasses import dataclass, field
import logging
from typing import Dict, Optional

from ..core.ids import ItemId

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 10

LEVEL_NAMES = {
    1: "Paleolithic",
    2: "Neolithic",
    3: "Bronze Age",
    4: "Iron Age",
    5: "Ancient Civilization",
}

LEVEL_UP_MESSAGES = {
    2: "Preserved food lets your people settle. The Neolithic age begins.",
    3: "Herds have become a dependable source of wealth. Welcome to the Bronze Age.",
    4: "Thriving pastures feed forges and workshops. The Iron Age has arrived.",
}


def level_name(level: int) -> str:
    return LEVEL_NAMES.get(level, "Unknown")


@dataclass
class ProgressAggregates:
    """Counters gathered from the rest of the simulation once per step."""
    preserved_food: Dict[ItemId, int] = field(default_factory=dict)
    livestock_products: int = 0
    temples: int = 0


@dataclass
class ProgressionRules:
    preserved_requirements: Dict[ItemId, int] = field(
        default_factory=lambda: {ItemId(42): 100, ItemId(43): 50}
    )
    product_threshold_level3: int = 20
    product_threshold_level4: int = 100
    top_implemented_level: int = 4


class CivilizationLevel:
    """
    Monotonic level counter. Each check looks only at the transition out of
    the current level, so at most one level is gained per check.
    """

    def __init__(self, level: int = MIN_LEVEL, rules: Optional[ProgressionRules] = None):
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            raise ValueError(f"Civilization level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}.")
        self._level = level
        self.rules = rules or ProgressionRules()

    @property
    def level(self) -> int:
        return self._level

    @property
    def name(self) -> str:
        return level_name(self._level)

    def is_item_available(self, required_level: int) -> bool:
        return required_level <= self._level

    def _transition_met(self, aggregates: ProgressAggregates) -> bool:
        if self._level == 1:
            return all(
                aggregates.preserved_food.get(item_id, 0) >= qty
                for item_id, qty in self.rules.preserved_requirements.items()
            )
        if self._level == 2:
            return aggregates.livestock_products >= self.rules.product_threshold_level3
        if self._level == 3:
            return aggregates.livestock_products >= self.rules.product_threshold_level4
        # Levels past the top implemented tier have no transition defined.
        return False

    def check_progress(self, aggregates: ProgressAggregates) -> Optional[int]:
        """Advances one level if the current level's condition holds. Returns the new level or None."""
        if self._level >= MAX_LEVEL or not self._transition_met(aggregates):
            return None
        self._level += 1
        logger.info("Civilization advanced to level %d (%s)", self._level, self.name)
        return self._level

    def level_up_message(self, level: Optional[int] = None) -> str:
        level = self._level if level is None else level
        return LEVEL_UP_MESSAGES.get(level, f"Your civilization reached the {level_name(level)}.")

    def ending_available(self, temple_count: int) -> bool:
        return self._level >= self.rules.top_implemented_level and temple_count >= 1

    def progress_summary(self, aggregates: ProgressAggregates) -> Dict[str, object]:
        """What the next transition needs, for display."""
        if self._level == 1:
            need = {
                str(item_id): {"have": aggregates.preserved_food.get(item_id, 0), "need": qty}
                for item_id, qty in self.rules.preserved_requirements.items()
            }
            return {"next_level": 2, "preserved_food": need}
        if self._level in (2, 3):
            threshold = (
                self.rules.product_threshold_level3 if self._level == 2 else self.rules.product_threshold_level4
            )
            return {
                "next_level": self._level + 1,
                "livestock_products": {"have": aggregates.livestock_products, "need": threshold},
            }
        return {"next_level": None}
