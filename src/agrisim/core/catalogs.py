from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Optional
import yaml

from ..economy.items import ItemCatalog
from ..economy.recipes import RecipeRegistry
from ..economy.livestock import LivestockCatalog
from ..production.buildings import BuildingCatalog
from ..world.terrain import TerrainTable

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass
class Catalogs:
    """Read-only game data shared by every subsystem."""
    items: ItemCatalog = field(default_factory=ItemCatalog)
    recipes: RecipeRegistry = field(default_factory=RecipeRegistry)
    livestock: LivestockCatalog = field(default_factory=LivestockCatalog)
    terrain: TerrainTable = field(default_factory=TerrainTable)
    buildings: BuildingCatalog = field(default_factory=BuildingCatalog)


def _try_load(catalog, path: Path) -> int:
    """Loads one catalog file. Returns the number of rows loaded, 0 when the file is unusable."""
    if not path.exists():
        logger.warning("Catalog file '%s' not found; using built-in defaults.", path)
        return 0
    try:
        return catalog.load_from_yaml(path) or 0
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.warning("Could not read catalog file '%s' (%s); using built-in defaults.", path, e)
        return 0


def load_catalogs(data_dir: Optional[Path] = None) -> Catalogs:
    """
    Loads every catalog from `data_dir`. Never raises over bad data: missing
    or corrupt files fall back to a minimal built-in set so the economy can
    always bootstrap.
    """
    data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
    catalogs = Catalogs()

    if _try_load(catalogs.items, data_dir / "items.yaml") == 0:
        catalogs.items.load_defaults()
    if _try_load(catalogs.livestock, data_dir / "livestock.yaml") == 0:
        catalogs.livestock.load_defaults()
    if _try_load(catalogs.buildings, data_dir / "buildings.yaml") == 0:
        catalogs.buildings.load_defaults()
    # Terrain rows start from the built-in table, the file only overrides.
    _try_load(catalogs.terrain, data_dir / "terrain.yaml")
    _try_load(catalogs.recipes, data_dir / "recipes.yaml")
    catalogs.recipes.apply_to(catalogs.items)

    logger.debug(
        "Loaded %d items, %d recipes, %d species from %s",
        len(catalogs.items), len(catalogs.recipes.all_recipes()), len(catalogs.livestock.all_species()), data_dir,
    )
    return catalogs
