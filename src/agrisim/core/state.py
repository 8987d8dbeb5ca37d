import random
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .catalogs import Catalogs, load_catalogs
from .config import SimulationRules
from .ids import Coord
from .log import AuditLog
from .rng import get_seeded_rng
from ..economy.crafting import CraftingSystem
from ..economy.inventory import Inventory
from ..economy.preserved import PreservedFoodStore
from ..production.buildings import BuildingRegistry
from ..production.farm import FarmRegistry
from ..production.livestock import PenRegistry
from ..progression.civilization import CivilizationLevel, ProgressAggregates, ProgressionRules
from ..world.conversion import TerrainConversionEngine
from ..world.grid import WorldGrid
from ..world.model import Viewport

COMMAND_LOG_LIMIT = 1000


@dataclass
class SimulationState:
    seed: int
    tick: int = 0
    elapsed: float = 0.0
    rules: SimulationRules = field(default_factory=SimulationRules)
    catalogs: Optional[Catalogs] = None
    player_tile: Coord = (0, 0)
    viewport_size: Tuple[int, int] = (40, 24)
    civilization_level: int = 1
    inventory: Inventory = field(default_factory=Inventory)
    preserved: PreservedFoodStore = field(default_factory=PreservedFoodStore)
    command_log: AuditLog = field(default_factory=lambda: AuditLog(max_entries=COMMAND_LOG_LIMIT))

    rng: random.Random = field(init=False, repr=False)
    grid: WorldGrid = field(init=False, repr=False)
    progression: CivilizationLevel = field(init=False, repr=False)
    crafting: CraftingSystem = field(init=False, repr=False)
    conversion: TerrainConversionEngine = field(init=False, repr=False)
    farms: FarmRegistry = field(init=False, repr=False)
    pens: PenRegistry = field(init=False, repr=False)
    buildings: BuildingRegistry = field(init=False, repr=False)

    def __post_init__(self):
        if self.catalogs is None:
            self.catalogs = load_catalogs()
        self.rng = get_seeded_rng(self.seed)
        self.grid = WorldGrid(
            seed=self.seed,
            generator=self.rules.terrain_generator,
            margin_chunks=self.rules.chunk_margin,
        )
        self.progression = CivilizationLevel(
            level=self.civilization_level,
            rules=ProgressionRules(
                preserved_requirements=dict(self.rules.preserved_requirements),
                product_threshold_level3=self.rules.product_threshold_level3,
                product_threshold_level4=self.rules.product_threshold_level4,
                top_implemented_level=self.rules.top_implemented_level,
            ),
        )
        unlocked = self.progression.is_item_available

        self.crafting = CraftingSystem(self.inventory, self.catalogs.items, self.preserved, unlocked)
        self.conversion = TerrainConversionEngine(
            self.grid, self.catalogs.terrain, self.inventory, self.catalogs.items,
            water_radius=self.rules.water_radius, is_unlocked=unlocked,
        )
        self.farms = FarmRegistry(
            self.grid, self.catalogs.terrain, self.inventory, self.catalogs.items,
            stage_times=self.rules.farm_stage_times,
            default_seed_item=self.rules.default_seed_item,
            water_radius=self.rules.water_radius,
            is_unlocked=unlocked,
        )
        self.pens = PenRegistry(
            self.grid, self.catalogs.terrain, self.inventory, self.catalogs.livestock, self.rng,
            feed_item=self.rules.feed_item,
            stage_times=self.rules.livestock_stage_times,
            level_source=lambda: self.progression.level,
        )
        self.buildings = BuildingRegistry(self.grid, self.inventory, self.catalogs.buildings, unlocked)

    @property
    def level(self) -> int:
        return self.progression.level

    def viewport(self) -> Viewport:
        width, height = self.viewport_size
        return Viewport.around(self.player_tile[0], self.player_tile[1], width, height)

    def aggregates(self) -> ProgressAggregates:
        return ProgressAggregates(
            preserved_food=self.preserved.to_dict(),
            livestock_products=self.pens.total_products,
            temples=self.buildings.count_by_type(self.rules.ending_building),
        )

    def ending_available(self) -> bool:
        return self.progression.ending_available(self.buildings.count_by_type(self.rules.ending_building))
