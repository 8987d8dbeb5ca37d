from pathlib import Path
import logging
from typing import Optional
import yaml

from ..core.catalogs import load_catalogs
from ..core.config import SimulationRules
from ..core.ids import ItemId
from ..core.state import SimulationState
from ..economy.inventory import Inventory
from ..progression.civilization import MIN_LEVEL, MAX_LEVEL
from .terrain import TerrainType

logger = logging.getLogger(__name__)


class ScenarioSchemaError(Exception):
    """Raised when there is a problem with the scenario data schema."""
    pass


def load_scenario(path: Path, data_dir: Optional[Path] = None) -> SimulationState:
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None or not isinstance(data, dict):
        raise ScenarioSchemaError(f"Scenario file '{path}' is empty or malformed.")

    seed = data.get('seed')
    if seed is None:
        raise ScenarioSchemaError("Missing 'seed' in scenario data.")
    if not isinstance(seed, int):
        raise ScenarioSchemaError(f"'seed' must be an integer, got {seed!r}.")

    try:
        rules = SimulationRules.from_dict(data.get('rules') or {})
    except (TypeError, ValueError) as e:
        raise ScenarioSchemaError(f"Invalid rules section: {e}")

    catalogs = load_catalogs(data_dir)

    player = data.get('player') or {}
    try:
        player_tile = (int(player.get('x', 0)), int(player.get('y', 0)))
    except (TypeError, ValueError):
        raise ScenarioSchemaError(f"Invalid player position: {player!r}")

    viewport = data.get('viewport') or {}
    width, height = viewport.get('width', 40), viewport.get('height', 24)
    if not (isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0):
        raise ScenarioSchemaError(f"Viewport width and height must be positive integers: {viewport!r}")

    level = data.get('civilization_level', MIN_LEVEL)
    if not (isinstance(level, int) and MIN_LEVEL <= level <= MAX_LEVEL):
        raise ScenarioSchemaError(f"'civilization_level' must be an integer in [{MIN_LEVEL}, {MAX_LEVEL}].")

    # Schema check: starting inventory references known items
    inventory = Inventory()
    for raw_id, qty in (data.get('inventory') or {}).items():
        try:
            item_id = ItemId(int(raw_id))
        except (TypeError, ValueError):
            raise ScenarioSchemaError(f"Invalid item id '{raw_id}' in starting inventory.")
        if item_id not in catalogs.items:
            raise ScenarioSchemaError(f"Starting inventory references unknown item '{raw_id}'.")
        if not isinstance(qty, int) or qty <= 0:
            raise ScenarioSchemaError(f"Starting quantity for item '{raw_id}' must be a positive integer.")
        inventory.add(item_id, qty)

    state = SimulationState(
        seed=seed,
        rules=rules,
        catalogs=catalogs,
        player_tile=player_tile,
        viewport_size=(width, height),
        civilization_level=level,
        inventory=inventory,
    )

    # Schema check: terrain overrides
    seen = set()
    for t_data in data.get('terrain') or []:
        try:
            x, y = int(t_data['x']), int(t_data['y'])
            terrain_type = TerrainType.parse(t_data['type'])
        except (KeyError, TypeError, ValueError) as e:
            raise ScenarioSchemaError(f"Invalid terrain override {t_data!r}: {e}")
        if (x, y) in seen:
            raise ScenarioSchemaError(f"Duplicate terrain override at ({x}, {y}).")
        seen.add((x, y))
        state.grid.set_terrain_type(x, y, terrain_type)

    logger.info("Loaded scenario '%s' (seed %d, %d starting items)", path, seed, len(inventory.to_dict()))
    return state
