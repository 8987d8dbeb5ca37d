from __future__ import annotations
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional
import yaml

from ..core.ids import BuildingType, Coord, ItemId
from ..core.results import CommandResult, Failure
from ..economy.inventory import Inventory
from ..economy.items import CatalogSchemaError
from ..world.grid import WorldGrid
from ..world.terrain import TerrainType

logger = logging.getLogger(__name__)

TEMPLE = BuildingType("TEMPLE")


@dataclass(frozen=True)
class BuildingSpec:
    type: BuildingType
    name: str
    materials: Dict[ItemId, int] = field(default_factory=dict)
    allowed_terrain: FrozenSet[TerrainType] = frozenset({TerrainType.BARREN, TerrainType.STONE})
    required_civ_level: int = 1


@dataclass(frozen=True)
class Building:
    coord: Coord
    type: BuildingType


def default_buildings() -> List[BuildingSpec]:
    return [
        BuildingSpec(
            type=TEMPLE,
            name="Temple",
            materials={ItemId(37): 5, ItemId(1): 3},
        ),
    ]


class BuildingCatalog:
    def __init__(self):
        self._specs: Dict[BuildingType, BuildingSpec] = {}

    def load_from_yaml(self, path: Path) -> int:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None or not isinstance(data, list):
            raise ValueError(f"YAML file '{path}' is empty or malformed.")

        for b_data in data:
            try:
                if 'type' not in b_data:
                    raise CatalogSchemaError("Missing key 'type' in building row.")
                terrain = b_data.get('allowed_terrain')
                spec = BuildingSpec(
                    type=BuildingType(str(b_data['type']).upper()),
                    name=b_data.get('name', str(b_data['type']).title()),
                    materials={ItemId(int(k)): int(v) for k, v in b_data.get('materials', {}).items()},
                    allowed_terrain=(
                        frozenset(TerrainType.parse(t) for t in terrain)
                        if terrain else frozenset({TerrainType.BARREN, TerrainType.STONE})
                    ),
                    required_civ_level=int(b_data.get('required_civ_level', 1)),
                )
            except (CatalogSchemaError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping building row %r in %s: %s", b_data, path, e)
                continue
            self._specs[spec.type] = spec
        return len(self._specs)

    def load_defaults(self):
        for spec in default_buildings():
            self._specs.setdefault(spec.type, spec)

    def get(self, building_type: BuildingType) -> BuildingSpec:
        if building_type not in self._specs:
            raise ValueError(f"Building type '{building_type}' not found.")
        return self._specs[building_type]

    def find(self, building_type: BuildingType) -> Optional[BuildingSpec]:
        return self._specs.get(building_type)

    def all_specs(self) -> List[BuildingSpec]:
        return list(self._specs.values())


class BuildingRegistry:
    def __init__(
        self,
        grid: WorldGrid,
        inventory: Inventory,
        specs: BuildingCatalog,
        is_unlocked: Optional[Callable[[int], bool]] = None,
    ):
        self.grid = grid
        self.inventory = inventory
        self.specs = specs
        self.is_unlocked = is_unlocked or (lambda required_level: True)
        self.buildings: Dict[Coord, Building] = {}

    def get_building(self, x: int, y: int) -> Optional[Building]:
        return self.buildings.get((x, y))

    def build(self, x: int, y: int, building_type: BuildingType) -> CommandResult:
        spec = self.specs.find(BuildingType(str(building_type).upper()))
        if spec is None:
            return CommandResult.fail(Failure.INVALID_STATE, f"Unknown building type '{building_type}'.")
        if (x, y) in self.buildings:
            return CommandResult.fail(Failure.INVALID_STATE, f"There is already a building at ({x}, {y}).")

        terrain_type = self.grid.terrain_at(x, y)
        if terrain_type not in spec.allowed_terrain:
            return CommandResult.fail(
                Failure.INVALID_TERRAIN, f"{spec.name} cannot be built on {terrain_type.value if terrain_type else 'unexplored land'}."
            )
        if not self.is_unlocked(spec.required_civ_level):
            return CommandResult.fail(Failure.NOT_UNLOCKED, f"{spec.name} is not unlocked yet.")
        for item_id, qty in spec.materials.items():
            if self.inventory.get(item_id) < qty:
                return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, f"Not enough materials for {spec.name}.")

        for item_id, qty in spec.materials.items():
            self.inventory.remove(item_id, qty)
        self.buildings[(x, y)] = Building(coord=(x, y), type=spec.type)
        logger.info("Built %s at (%d, %d)", spec.name, x, y)
        return CommandResult.success(f"Built {spec.name}.")

    def count_by_type(self, building_type: BuildingType) -> int:
        return sum(1 for b in self.buildings.values() if b.type == building_type)
