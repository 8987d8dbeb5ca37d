from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Any
import yaml

from ..core.ids import ItemId

logger = logging.getLogger(__name__)


class CatalogSchemaError(Exception):
    """Raised when a single catalog row cannot be parsed."""
    pass


class ToolClass(Enum):
    HOE = "hoe"
    DRAINAGE_SHOVEL = "drainage_shovel"
    LEVELER = "leveler"
    FARM_TOOL = "farm_tool"


TERRAIN_TOOL_CLASSES = frozenset({ToolClass.HOE, ToolClass.DRAINAGE_SHOVEL, ToolClass.LEVELER})


@dataclass(frozen=True)
class CropSoilProfile:
    """Soil window a crop grows best in. `fertility_impact` scales how much fertility matters."""
    min_moisture: float = 0.0
    max_moisture: Optional[float] = None
    min_fertility: float = 0.0
    min_drainage: Optional[float] = None
    max_drainage: Optional[float] = None
    max_tillage: float = 1.0
    fertility_impact: float = 0.5


@dataclass
class ItemData:
    id: ItemId
    name: str
    description: str = ""
    tier: int = 1
    category: str = "material"
    icon: str = ""
    required_civ_level: int = 1

    # Filled from recipes.yaml (or inline in items.yaml)
    craftable: bool = False
    materials: Dict[ItemId, int] = field(default_factory=dict)
    requirements: Dict[ItemId, int] = field(default_factory=dict)
    result_amount: int = 1

    tool_class: Optional[ToolClass] = None
    durability: int = 0
    efficiency: float = 1.0

    # None means "decide from category and name"
    preserved: Optional[bool] = None

    # Seed-only fields
    crop_item_id: Optional[ItemId] = None
    soil_profile: Optional[CropSoilProfile] = None
    allowed_terrain: FrozenSet[str] = frozenset()
    terrain_yield: Dict[str, float] = field(default_factory=dict)
    requires_water: bool = False

    @property
    def is_tool(self) -> bool:
        return self.tool_class is not None

    @property
    def is_terrain_tool(self) -> bool:
        return self.tool_class in TERRAIN_TOOL_CLASSES

    @property
    def is_seed(self) -> bool:
        return self.crop_item_id is not None


def _parse_soil_profile(data: Optional[Dict[str, Any]]) -> Optional[CropSoilProfile]:
    if not data:
        return None
    return CropSoilProfile(**{k: (float(v) if v is not None else None) for k, v in data.items()})


def _parse_amounts(data: Optional[Dict[Any, Any]], what: str) -> Dict[ItemId, int]:
    amounts = {}
    for raw_id, qty in (data or {}).items():
        qty = int(qty)
        if qty <= 0:
            raise CatalogSchemaError(f"{what} amount for item {raw_id} must be positive, got {qty}.")
        amounts[ItemId(int(raw_id))] = qty
    return amounts


def parse_item(i_data: Dict[str, Any]) -> ItemData:
    if not isinstance(i_data, dict):
        raise CatalogSchemaError(f"Item row must be a mapping, got {type(i_data).__name__}.")
    for key in ("id", "name"):
        if key not in i_data:
            raise CatalogSchemaError(f"Missing key '{key}' in item row.")
    name = str(i_data['name']).strip()
    if not name:
        raise CatalogSchemaError(f"Empty name for item {i_data['id']}.")

    tool_class = i_data.get('tool_class')
    crop_id = i_data.get('crop_item_id')
    materials = _parse_amounts(i_data.get('materials'), "material")
    preserved = i_data.get('preserved')
    return ItemData(
        id=ItemId(int(i_data['id'])),
        name=name,
        description=i_data.get('description', ""),
        tier=int(i_data.get('tier', 1)),
        category=i_data.get('category', "material"),
        icon=i_data.get('icon', ""),
        required_civ_level=int(i_data.get('required_civ_level', 1)),
        craftable=bool(materials),
        materials=materials,
        requirements=_parse_amounts(i_data.get('requirements'), "requirement"),
        result_amount=int(i_data.get('result_amount', 1)),
        tool_class=ToolClass(tool_class) if tool_class else None,
        durability=int(i_data.get('durability', 0)),
        efficiency=float(i_data.get('efficiency', 1.0)),
        preserved=bool(preserved) if preserved is not None else None,
        crop_item_id=ItemId(int(crop_id)) if crop_id is not None else None,
        soil_profile=_parse_soil_profile(i_data.get('soil_profile')),
        allowed_terrain=frozenset(str(t).upper() for t in i_data.get('allowed_terrain', [])),
        terrain_yield={str(t).upper(): float(m) for t, m in i_data.get('terrain_yield', {}).items()},
        requires_water=bool(i_data.get('requires_water', False)),
    )


def default_items() -> List[ItemData]:
    """Minimal bootstrap set used when the item catalog is missing or unreadable."""
    return [
        ItemData(id=ItemId(1), name="Stone", description="A rough stone.", category="material"),
        ItemData(id=ItemId(2), name="Wood", description="A length of timber.", category="material"),
        ItemData(id=ItemId(9), name="Grain", description="Edible grain. Also feeds livestock.", category="food"),
        ItemData(id=ItemId(25), name="Chicken Meat", category="food"),
        ItemData(id=ItemId(26), name="Egg", category="food"),
        ItemData(id=ItemId(27), name="Pork", category="food"),
        ItemData(id=ItemId(105), name="Raw Meat", description="Fresh meat.", category="food"),
    ]


class ItemCatalog:
    def __init__(self):
        self._items: Dict[ItemId, ItemData] = {}

    def load_from_yaml(self, path: Path) -> int:
        """
        Loads item rows. Bad rows are logged and skipped; returns the number loaded.
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None or not isinstance(data, list):
            raise ValueError(f"YAML file '{path}' is empty or malformed.")

        loaded = 0
        for i_data in data:
            try:
                item = parse_item(i_data)
            except (CatalogSchemaError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping item row %r in %s: %s", i_data, path, e)
                continue
            if item.id in self._items:
                logger.warning("Duplicate item id %s in %s, keeping the later row.", item.id, path)
            self._items[item.id] = item
            loaded += 1
        return loaded

    def load_defaults(self):
        for item in default_items():
            self._items.setdefault(item.id, item)

    def add(self, item: ItemData):
        self._items[item.id] = item

    def get(self, item_id: ItemId) -> ItemData:
        if item_id not in self._items:
            raise ValueError(f"Item with ID '{item_id}' not found.")
        return self._items[item_id]

    def find(self, item_id: ItemId) -> Optional[ItemData]:
        return self._items.get(item_id)

    def __contains__(self, item_id: ItemId) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def all_items(self) -> List[ItemData]:
        return sorted(self._items.values(), key=lambda i: i.id)

    def tools_of_class(self, tool_class: ToolClass) -> List[ItemData]:
        return [i for i in self.all_items() if i.tool_class == tool_class]

    def seeds(self) -> List[ItemData]:
        return [i for i in self.all_items() if i.is_seed]

    def unlocked_items(self, level: int) -> List[ItemData]:
        return [i for i in self.all_items() if i.required_civ_level <= level]
