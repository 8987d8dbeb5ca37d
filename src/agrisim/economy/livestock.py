from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Any
import yaml

from ..core.ids import ItemId, SpeciesId
from .items import CatalogSchemaError

logger = logging.getLogger(__name__)

NO_PRODUCT = ItemId(-1)


@dataclass(frozen=True)
class LivestockData:
    id: SpeciesId
    name: str
    meat_item_id: ItemId
    product_item_id: ItemId = NO_PRODUCT
    product_interval: float = 0.0
    required_civ_level: int = 1
    description: str = ""
    color: Tuple[float, float, float] = (1.0, 1.0, 1.0)

    @property
    def has_product(self) -> bool:
        return self.product_item_id != NO_PRODUCT and self.product_interval > 0


def _parse_species(s_data: Dict[str, Any]) -> LivestockData:
    for key in ("id", "name", "meat_item_id"):
        if key not in s_data:
            raise CatalogSchemaError(f"Missing key '{key}' in livestock row.")
    product_id = int(s_data.get('product_item_id', NO_PRODUCT))
    interval = float(s_data.get('product_interval', 0.0))
    if product_id != NO_PRODUCT and interval <= 0:
        raise CatalogSchemaError(f"Species {s_data['id']} has a product but no positive interval.")
    color = s_data.get('color', [1.0, 1.0, 1.0])
    return LivestockData(
        id=SpeciesId(int(s_data['id'])),
        name=s_data['name'],
        meat_item_id=ItemId(int(s_data['meat_item_id'])),
        product_item_id=ItemId(product_id),
        product_interval=interval,
        required_civ_level=int(s_data.get('required_civ_level', 1)),
        description=s_data.get('description', ""),
        color=tuple(float(c) for c in color),
    )


def default_species() -> List[LivestockData]:
    return [
        LivestockData(id=SpeciesId(19), name="Chicken", meat_item_id=ItemId(25),
                      product_item_id=ItemId(26), product_interval=8.0),
        LivestockData(id=SpeciesId(20), name="Pig", meat_item_id=ItemId(27)),
    ]


class LivestockCatalog:
    def __init__(self):
        self._species: Dict[SpeciesId, LivestockData] = {}

    def load_from_yaml(self, path: Path) -> int:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None or not isinstance(data, list):
            raise ValueError(f"YAML file '{path}' is empty or malformed.")

        for s_data in data:
            # The livestock sheet shares its layout with other animal-like rows.
            if isinstance(s_data, dict) and s_data.get('category', 'animal') != 'animal':
                continue
            try:
                species = _parse_species(s_data)
            except (CatalogSchemaError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping livestock row %r in %s: %s", s_data, path, e)
                continue
            self._species[species.id] = species
        return len(self._species)

    def load_defaults(self):
        for species in default_species():
            self._species.setdefault(species.id, species)

    def get(self, species_id: SpeciesId) -> LivestockData:
        if species_id not in self._species:
            raise ValueError(f"Species with ID '{species_id}' not found.")
        return self._species[species_id]

    def find(self, species_id: SpeciesId) -> Optional[LivestockData]:
        return self._species.get(species_id)

    def all_species(self) -> List[LivestockData]:
        return sorted(self._species.values(), key=lambda s: s.id)

    def available_species(self, level: int) -> List[LivestockData]:
        return [s for s in self.all_species() if s.required_civ_level <= level]
