import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Tuple

from .ids import ItemId, BuildingType

logger = logging.getLogger(__name__)


@dataclass
class SimulationRules:
    # World generation
    chunk_margin: int = 2
    terrain_generator: str = "classic"  # "classic" or "continuous"

    # Farming
    farm_stage_times: Tuple[float, float, float] = (3.0, 6.0, 10.0)
    default_seed_item: ItemId = ItemId(8)
    water_radius: int = 1

    # Livestock
    livestock_stage_times: Tuple[float, float] = (5.0, 10.0)
    feed_item: ItemId = ItemId(9)

    # Progression
    preserved_requirements: Dict[ItemId, int] = field(
        default_factory=lambda: {ItemId(42): 100, ItemId(43): 50}
    )
    product_threshold_level3: int = 20
    product_threshold_level4: int = 100
    top_implemented_level: int = 4
    ending_building: BuildingType = BuildingType("TEMPLE")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationRules":
        """Builds rules from a scenario 'rules' section, keeping defaults for anything missing."""
        rules = cls()
        if not data:
            return rules
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown simulation rule '%s'", key)
                continue
            if key in ("farm_stage_times", "livestock_stage_times"):
                value = tuple(float(v) for v in value)
            elif key == "preserved_requirements":
                value = {ItemId(int(k)): int(v) for k, v in value.items()}
            elif key in ("default_seed_item", "feed_item"):
                value = ItemId(int(value))
            setattr(rules, key, value)
        if rules.terrain_generator not in ("classic", "continuous"):
            raise ValueError(f"Unknown terrain generator '{rules.terrain_generator}'.")
        return rules

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunk_margin": self.chunk_margin,
            "terrain_generator": self.terrain_generator,
            "farm_stage_times": list(self.farm_stage_times),
            "default_seed_item": self.default_seed_item,
            "water_radius": self.water_radius,
            "livestock_stage_times": list(self.livestock_stage_times),
            "feed_item": self.feed_item,
            "preserved_requirements": {str(k): v for k, v in self.preserved_requirements.items()},
            "product_threshold_level3": self.product_threshold_level3,
            "product_threshold_level4": self.product_threshold_level4,
            "top_implemented_level": self.top_implemented_level,
            "ending_building": self.ending_building,
        }
