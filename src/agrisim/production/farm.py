from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
from typing import Callable, ClassVar, Dict, List, Optional, Tuple

from ..core.ids import Coord, ItemId
from ..core.results import CommandResult, Failure
from ..economy.inventory import Inventory
from ..economy.items import ItemCatalog, ItemData, ToolClass
from ..world.grid import WorldGrid
from ..world.terrain import TerrainTable, TerrainType
from .soil import SoilData, is_suitable, soil_multipliers

logger = logging.getLogger(__name__)


@dataclass
class FarmPlot:
    coord: Coord
    has_seed: bool = False
    growth_stage: int = 0
    growth_timer: float = 0.0
    seed_item_id: Optional[ItemId] = None
    crop_item_id: Optional[ItemId] = None
    soil: SoilData = field(default_factory=SoilData)
    growth_multiplier: float = 1.0
    yield_multiplier: float = 1.0

    # An equipped farm tool stays on the plot across replanting.
    tool_item_id: Optional[ItemId] = None
    tool_durability: int = 0
    tool_efficiency: float = 1.0

    MAX_STAGE: ClassVar[int] = 3

    @property
    def is_harvestable(self) -> bool:
        return self.has_seed and self.growth_stage == self.MAX_STAGE

    def advance(self, dt: float, stage_times: Tuple[float, float, float]) -> bool:
        """Accumulates growth time. Returns True if the plot became harvestable on this call."""
        if not self.has_seed or self.growth_stage >= self.MAX_STAGE:
            return False
        self.growth_timer += dt * self.growth_multiplier
        # Highest threshold first so a large dt lands on the right stage.
        if self.growth_timer >= stage_times[2]:
            new_stage = 3
        elif self.growth_timer >= stage_times[1]:
            new_stage = 2
        elif self.growth_timer >= stage_times[0]:
            new_stage = 1
        else:
            new_stage = 0
        became_ripe = new_stage == self.MAX_STAGE and self.growth_stage != self.MAX_STAGE
        self.growth_stage = max(self.growth_stage, new_stage)
        return became_ripe

    def harvest_amount(self) -> int:
        # Round half up, never below one crop.
        return max(1, int(math.floor(self.tool_efficiency * self.yield_multiplier + 0.5)))

    def reset(self):
        self.has_seed = False
        self.growth_stage = 0
        self.growth_timer = 0.0
        self.seed_item_id = None
        self.crop_item_id = None
        self.growth_multiplier = 1.0
        self.yield_multiplier = 1.0

    def wear_tool(self):
        if self.tool_item_id is None:
            return
        self.tool_durability -= 1
        if self.tool_durability <= 0:
            self.tool_item_id = None
            self.tool_durability = 0
            self.tool_efficiency = 1.0


class FarmRegistry:
    def __init__(
        self,
        grid: WorldGrid,
        terrain: TerrainTable,
        inventory: Inventory,
        items: ItemCatalog,
        stage_times: Tuple[float, float, float] = (3.0, 6.0, 10.0),
        default_seed_item: ItemId = ItemId(8),
        water_radius: int = 1,
        is_unlocked: Optional[Callable[[int], bool]] = None,
    ):
        self.grid = grid
        self.terrain = terrain
        self.inventory = inventory
        self.items = items
        self.stage_times = stage_times
        self.default_seed_item = default_seed_item
        self.water_radius = water_radius
        self.is_unlocked = is_unlocked or (lambda required_level: True)
        self.plots: Dict[Coord, FarmPlot] = {}

    def get_plot(self, x: int, y: int) -> Optional[FarmPlot]:
        return self.plots.get((x, y))

    def find_seed(self) -> Optional[ItemId]:
        """The seed planted when the caller does not name one."""
        if self.inventory.get(self.default_seed_item) > 0:
            return self.default_seed_item
        for seed in self.items.seeds():
            if self.inventory.get(seed.id) > 0:
                return seed.id
        return None

    def plant_seed(self, x: int, y: int, seed_item_id: Optional[ItemId] = None) -> CommandResult:
        plot = self.plots.get((x, y))
        if plot is not None and plot.has_seed:
            return CommandResult.fail(Failure.INVALID_STATE, f"Plot at ({x}, {y}) is already planted.")

        if seed_item_id is None:
            seed_item_id = self.find_seed()
            if seed_item_id is None:
                return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, "No seeds in inventory.")
        if self.inventory.get(seed_item_id) <= 0:
            return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, f"No seed {seed_item_id} in inventory.")

        seed = self.items.find(seed_item_id)
        if seed is None or not seed.is_seed:
            return CommandResult.fail(Failure.INVALID_STATE, f"Item {seed_item_id} cannot be planted.")
        if not self.is_unlocked(seed.required_civ_level):
            return CommandResult.fail(Failure.NOT_UNLOCKED, f"{seed.name} is not unlocked yet.")

        terrain_type = self.grid.terrain_at(x, y)
        if seed.allowed_terrain and (terrain_type is None or terrain_type.value not in seed.allowed_terrain):
            allowed = ", ".join(sorted(seed.allowed_terrain))
            return CommandResult.fail(Failure.INVALID_TERRAIN, f"{seed.name} only grows on {allowed}.")
        # Crops draw from open water only; channels and paddies do not count here.
        if seed.requires_water and not self.grid.any_within(x, y, self.water_radius, (TerrainType.WATER,)):
            return CommandResult.fail(Failure.ADJACENCY_UNMET, f"{seed.name} needs water nearby.")

        soil = SoilData.from_terrain(self.terrain.get(terrain_type)) if terrain_type else SoilData()
        if seed.soil_profile is not None and not is_suitable(soil, seed.soil_profile):
            return CommandResult.fail(Failure.INVALID_TERRAIN, f"The soil here does not suit {seed.name}.")
        growth, crop_yield = self._multipliers(seed, soil, terrain_type.value if terrain_type else None)

        self.inventory.remove(seed.id, 1)
        if plot is None:
            plot = FarmPlot(coord=(x, y))
            self.plots[(x, y)] = plot
        plot.reset()
        plot.has_seed = True
        plot.seed_item_id = seed.id
        plot.crop_item_id = seed.crop_item_id
        plot.soil = soil
        plot.growth_multiplier = growth
        plot.yield_multiplier = crop_yield
        return CommandResult.success(f"Planted {seed.name}.")

    @staticmethod
    def _multipliers(seed: ItemData, soil: SoilData, terrain_name: Optional[str]) -> Tuple[float, float]:
        if seed.soil_profile is not None:
            growth, crop_yield = soil_multipliers(soil, seed.soil_profile)
        else:
            growth, crop_yield = 1.0, 1.0
        if terrain_name is not None:
            crop_yield *= seed.terrain_yield.get(terrain_name, 1.0)
        return growth, crop_yield

    def update(self, dt: float) -> List[Coord]:
        """Advances every plot. Returns the plots that became harvestable."""
        ripe = []
        for coord, plot in self.plots.items():
            if plot.advance(dt, self.stage_times):
                ripe.append(coord)
        return ripe

    def harvest(self, x: int, y: int) -> CommandResult:
        plot = self.plots.get((x, y))
        if plot is None or not plot.is_harvestable:
            return CommandResult.fail(Failure.INVALID_STATE, f"Nothing to harvest at ({x}, {y}).")
        crop_id = plot.crop_item_id
        amount = plot.harvest_amount()
        self.inventory.add(crop_id, amount)
        plot.wear_tool()
        plot.reset()
        return CommandResult.success(f"Harvested {amount} of item {crop_id}.")

    def equip_tool(self, x: int, y: int, tool_item_id: ItemId) -> CommandResult:
        plot = self.plots.get((x, y))
        if plot is None:
            return CommandResult.fail(Failure.INVALID_STATE, f"No farm plot at ({x}, {y}).")
        tool = self.items.find(tool_item_id)
        if tool is None or tool.tool_class != ToolClass.FARM_TOOL:
            return CommandResult.fail(Failure.INVALID_STATE, f"Item {tool_item_id} is not a farm tool.")
        if not self.is_unlocked(tool.required_civ_level):
            return CommandResult.fail(Failure.NOT_UNLOCKED, f"{tool.name} is not unlocked yet.")
        if not self.inventory.remove(tool_item_id, 1):
            return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, f"No {tool.name} in inventory.")
        plot.tool_item_id = tool.id
        plot.tool_durability = max(1, tool.durability)
        plot.tool_efficiency = tool.efficiency
        return CommandResult.success(f"Equipped {tool.name}.")

    def planted_count(self) -> int:
        return sum(1 for p in self.plots.values() if p.has_seed)

    def harvestable_count(self) -> int:
        return sum(1 for p in self.plots.values() if p.is_harvestable)
