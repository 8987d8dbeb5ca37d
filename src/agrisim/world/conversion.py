import logging
from typing import Callable, Dict, Optional

from ..core.ids import ItemId
from ..core.results import CommandResult, Failure
from ..economy.inventory import Inventory
from ..economy.items import ItemCatalog, ItemData, ToolClass
from .grid import WorldGrid
from .terrain import TerrainTable, TerrainType

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[ToolClass, Dict[TerrainType, TerrainType]] = {
    ToolClass.HOE: {
        TerrainType.DIRT: TerrainType.FARMLAND,
    },
    ToolClass.DRAINAGE_SHOVEL: {
        TerrainType.DIRT: TerrainType.WATER_CHANNEL,
        TerrainType.GRASS: TerrainType.WATER_CHANNEL,
        TerrainType.DRAINED_MARSH: TerrainType.WATER_CHANNEL,
        TerrainType.MARSH: TerrainType.DRAINED_MARSH,
    },
    ToolClass.LEVELER: {
        TerrainType.DRAINED_MARSH: TerrainType.PADDY,
    },
}

# Tool classes that only work next to a water source.
NEEDS_WATER = frozenset({ToolClass.LEVELER})

# Already-worked land is protected from every tool.
PROTECTED = frozenset({TerrainType.FARMLAND, TerrainType.PADDY})
UNWORKABLE = frozenset({TerrainType.STONE, TerrainType.WATER})

# When several tool classes apply to a tile, prefer the more specific one.
CLASS_PREFERENCE = (ToolClass.HOE, ToolClass.LEVELER, ToolClass.DRAINAGE_SHOVEL)


class TerrainConversionEngine:
    def __init__(
        self,
        grid: WorldGrid,
        terrain: TerrainTable,
        inventory: Inventory,
        items: ItemCatalog,
        water_radius: int = 1,
        is_unlocked: Optional[Callable[[int], bool]] = None,
    ):
        self.grid = grid
        self.terrain = terrain
        self.inventory = inventory
        self.items = items
        self.water_radius = water_radius
        self.is_unlocked = is_unlocked or (lambda required_level: True)

    def has_water_nearby(self, x: int, y: int) -> bool:
        return self.grid.any_within(x, y, self.water_radius, self.terrain.water_sources())

    def try_convert(self, x: int, y: int, tool_item_id: ItemId) -> CommandResult:
        tool = self.items.find(tool_item_id)
        if tool is None or not tool.is_terrain_tool:
            return CommandResult.fail(Failure.INVALID_STATE, f"Item {tool_item_id} is not a terrain tool.")
        if not self.is_unlocked(tool.required_civ_level):
            return CommandResult.fail(Failure.NOT_UNLOCKED, f"{tool.name} is not unlocked yet.")
        if self.inventory.get(tool.id) <= 0:
            return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, f"No {tool.name} in inventory.")

        source = self.grid.terrain_at(x, y)
        if source is None:
            return CommandResult.fail(Failure.INVALID_TERRAIN, f"Tile ({x}, {y}) has not been generated.")
        if source in PROTECTED or source in UNWORKABLE:
            return CommandResult.fail(Failure.INVALID_TERRAIN, f"{source.value} cannot be converted.")

        result = TRANSITIONS[tool.tool_class].get(source)
        if result is None:
            return CommandResult.fail(Failure.INVALID_TERRAIN, f"{tool.name} cannot work {source.value}.")
        if tool.tool_class in NEEDS_WATER and not self.has_water_nearby(x, y):
            return CommandResult.fail(Failure.ADJACENCY_UNMET, f"{result.value} needs a water source nearby.")

        # One application uses up one tool.
        self.inventory.remove(tool.id, 1)
        self.grid.set_terrain_type(x, y, result)
        logger.debug("Converted (%d, %d) %s -> %s with %s", x, y, source.value, result.value, tool.name)
        return CommandResult.success(f"{source.value} became {result.value}.")

    def find_usable_tool(self, x: int, y: int) -> Optional[ItemData]:
        """Best owned, unlocked tool that has a transition for the tile's current terrain."""
        source = self.grid.terrain_at(x, y)
        if source is None or source in PROTECTED or source in UNWORKABLE:
            return None
        for tool_class in CLASS_PREFERENCE:
            if source not in TRANSITIONS[tool_class]:
                continue
            owned = [
                tool for tool in self.items.tools_of_class(tool_class)
                if self.inventory.get(tool.id) > 0 and self.is_unlocked(tool.required_civ_level)
            ]
            if owned:
                return max(owned, key=lambda t: (t.tier, t.id))
        return None
