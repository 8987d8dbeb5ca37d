from __future__ import annotations
from dataclasses import dataclass
import logging
import random
from typing import Callable, ClassVar, Dict, List, Optional, Tuple

from ..core.ids import Coord, ItemId, SpeciesId
from ..core.results import CommandResult, Failure
from ..economy.inventory import Inventory
from ..economy.livestock import LivestockCatalog, LivestockData
from ..world.grid import WorldGrid
from ..world.terrain import TerrainTable

logger = logging.getLogger(__name__)


@dataclass
class LivestockPen:
    coord: Coord
    has_animal: bool = False
    species: Optional[LivestockData] = None
    growth_stage: int = 0
    growth_timer: float = 0.0
    product_timer: float = 0.0
    has_product: bool = False

    MAX_STAGE: ClassVar[int] = 2

    @property
    def is_mature(self) -> bool:
        return self.has_animal and self.growth_stage >= self.MAX_STAGE

    def advance(self, dt: float, stage_times: Tuple[float, float]) -> List[str]:
        """Runs growth and the production loop. Returns the events that happened ('mature', 'product')."""
        events = []
        if not self.has_animal:
            return events
        if self.growth_stage < self.MAX_STAGE:
            self.growth_timer += dt
            if self.growth_timer >= stage_times[1]:
                new_stage = 2
            elif self.growth_timer >= stage_times[0]:
                new_stage = 1
            else:
                new_stage = 0
            if new_stage > self.growth_stage:
                self.growth_stage = new_stage
                if new_stage == self.MAX_STAGE:
                    events.append("mature")

        if self.is_mature and self.species.has_product and not self.has_product:
            # Single-slot buffer: the timer only runs while the slot is empty.
            self.product_timer += dt
            if self.product_timer >= self.species.product_interval:
                self.has_product = True
                self.product_timer = 0.0
                events.append("product")
        return events

    def clear(self):
        self.has_animal = False
        self.species = None
        self.growth_stage = 0
        self.growth_timer = 0.0
        self.product_timer = 0.0
        self.has_product = False


class PenRegistry:
    def __init__(
        self,
        grid: WorldGrid,
        terrain: TerrainTable,
        inventory: Inventory,
        species: LivestockCatalog,
        rng: random.Random,
        feed_item: ItemId = ItemId(9),
        stage_times: Tuple[float, float] = (5.0, 10.0),
        level_source: Optional[Callable[[], int]] = None,
    ):
        self.grid = grid
        self.terrain = terrain
        self.inventory = inventory
        self.species = species
        self.rng = rng
        self.feed_item = feed_item
        self.stage_times = stage_times
        self.level_source = level_source or (lambda: 1)
        self.pens: Dict[Coord, LivestockPen] = {}
        self.total_products = 0

    def get_pen(self, x: int, y: int) -> Optional[LivestockPen]:
        return self.pens.get((x, y))

    def place_animal(self, x: int, y: int, species_id: Optional[SpeciesId] = None) -> CommandResult:
        pen = self.pens.get((x, y))
        if pen is not None and pen.has_animal:
            return CommandResult.fail(Failure.INVALID_STATE, f"Pen at ({x}, {y}) is occupied.")
        if self.inventory.get(self.feed_item) <= 0:
            return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, "No feed in inventory.")

        terrain_type = self.grid.terrain_at(x, y)
        if terrain_type is not None and not self.terrain.get(terrain_type).grazeable:
            return CommandResult.fail(
                Failure.INVALID_TERRAIN, f"Animals cannot be kept on {terrain_type.value}."
            )

        level = self.level_source()
        if species_id is None:
            candidates = self.species.available_species(level)
            if not candidates:
                return CommandResult.fail(Failure.NOT_UNLOCKED, "No livestock available at this level.")
            species = self.rng.choice(candidates)
        else:
            species = self.species.find(species_id)
            if species is None:
                return CommandResult.fail(Failure.INVALID_STATE, f"Unknown species {species_id}.")
            if species.required_civ_level > level:
                return CommandResult.fail(
                    Failure.NOT_UNLOCKED,
                    f"{species.name} requires civilization level {species.required_civ_level}.",
                )

        self.inventory.remove(self.feed_item, 1)
        if pen is None:
            pen = LivestockPen(coord=(x, y))
            self.pens[(x, y)] = pen
        pen.clear()
        pen.has_animal = True
        pen.species = species
        return CommandResult.success(f"Placed a {species.name}.")

    def update(self, dt: float) -> List[Tuple[Coord, str]]:
        events = []
        for coord, pen in self.pens.items():
            for event in pen.advance(dt, self.stage_times):
                events.append((coord, event))
        return events

    def harvest_product(self, x: int, y: int) -> CommandResult:
        pen = self.pens.get((x, y))
        if pen is None or not pen.has_animal:
            return CommandResult.fail(Failure.INVALID_STATE, f"No animal at ({x}, {y}).")
        if not pen.species.has_product:
            return CommandResult.fail(Failure.INVALID_STATE, f"{pen.species.name} has no product.")
        if not pen.has_product:
            return CommandResult.fail(Failure.INVALID_STATE, f"{pen.species.name} has nothing ready yet.")
        self.inventory.add(pen.species.product_item_id, 1)
        pen.has_product = False
        self.total_products += 1
        return CommandResult.success(f"Collected product from {pen.species.name}.")

    def kill_animal(self, x: int, y: int) -> CommandResult:
        pen = self.pens.get((x, y))
        if pen is None or not pen.has_animal:
            return CommandResult.fail(Failure.INVALID_STATE, f"No animal at ({x}, {y}).")
        name = pen.species.name
        self.inventory.add(pen.species.meat_item_id, 1)
        # Meat counts as a livestock product toward progression.
        self.total_products += 1
        pen.clear()
        return CommandResult.success(f"Butchered {name}.")

    def animal_count(self) -> int:
        return sum(1 for p in self.pens.values() if p.has_animal)
