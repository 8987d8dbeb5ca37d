import json
import logging
from typing import Dict, Any, Optional

from ..core.catalogs import Catalogs
from ..core.config import SimulationRules
from ..core.ids import ItemId, SpeciesId, BuildingType
from ..core.state import SimulationState
from ..economy.inventory import Inventory
from ..economy.preserved import PreservedFoodStore
from ..production.buildings import Building
from ..production.farm import FarmPlot
from ..production.livestock import LivestockPen
from ..production.soil import SoilData
from ..world.model import TerrainTile
from ..world.terrain import TerrainType

logger = logging.getLogger(__name__)

SAVE_VERSION = 1


def to_dict(state: SimulationState) -> Dict[str, Any]:
    """Converts the SimulationState to a dictionary for serialization."""
    tiles_data = [
        [tile.x, tile.y, tile.terrain_type.value, tile.explored]
        for tile in sorted(state.grid.tiles.values(), key=lambda t: t.coord)
    ]

    plots_data = [
        {
            "x": plot.coord[0],
            "y": plot.coord[1],
            "has_seed": plot.has_seed,
            "growth_stage": plot.growth_stage,
            "growth_timer": plot.growth_timer,
            "seed_item_id": plot.seed_item_id,
            "crop_item_id": plot.crop_item_id,
            "soil": plot.soil.to_dict(),
            "growth_multiplier": plot.growth_multiplier,
            "yield_multiplier": plot.yield_multiplier,
            "tool_item_id": plot.tool_item_id,
            "tool_durability": plot.tool_durability,
            "tool_efficiency": plot.tool_efficiency,
        }
        for plot in sorted(state.farms.plots.values(), key=lambda p: p.coord)
    ]

    pens_data = [
        {
            "x": pen.coord[0],
            "y": pen.coord[1],
            "has_animal": pen.has_animal,
            "species_id": pen.species.id if pen.species else None,
            "growth_stage": pen.growth_stage,
            "growth_timer": pen.growth_timer,
            "product_timer": pen.product_timer,
            "has_product": pen.has_product,
        }
        for pen in sorted(state.pens.pens.values(), key=lambda p: p.coord)
    ]

    buildings_data = [
        {"x": b.coord[0], "y": b.coord[1], "type": b.type}
        for b in sorted(state.buildings.buildings.values(), key=lambda b: b.coord)
    ]

    version, internal, gauss = state.rng.getstate()

    return {
        "version": SAVE_VERSION,
        "seed": state.seed,
        "tick": state.tick,
        "elapsed": state.elapsed,
        "rules": state.rules.to_dict(),
        "player_tile": list(state.player_tile),
        "viewport_size": list(state.viewport_size),
        "civilization_level": state.level,
        "inventory": {str(item_id): qty for item_id, qty in state.inventory.snapshot().items()},
        "preserved_food": {str(item_id): qty for item_id, qty in state.preserved.to_dict().items()},
        "livestock_products_total": state.pens.total_products,
        "world": {
            "generator": state.grid.generator_kind,
            "generated_chunks": sorted([list(c) for c in state.grid.generated_chunks]),
            "tiles": tiles_data,
        },
        "farm_plots": plots_data,
        "pens": pens_data,
        "buildings": buildings_data,
        "rng_state": [version, list(internal), gauss],
    }


def from_dict(data: Dict[str, Any], catalogs: Optional[Catalogs] = None) -> SimulationState:
    """Creates a SimulationState from a dictionary."""
    inventory = Inventory()
    for item_id, qty in data.get('inventory', {}).items():
        if int(qty) > 0:
            inventory.add(ItemId(int(item_id)), int(qty))

    state = SimulationState(
        seed=data['seed'],
        tick=data.get('tick', 0),
        elapsed=data.get('elapsed', 0.0),
        rules=SimulationRules.from_dict(data.get('rules', {})),
        catalogs=catalogs,
        player_tile=tuple(data.get('player_tile', (0, 0))),
        viewport_size=tuple(data.get('viewport_size', (40, 24))),
        civilization_level=data.get('civilization_level', 1),
        inventory=inventory,
        preserved=PreservedFoodStore.from_dict(data.get('preserved_food', {})),
    )

    world_data = data.get('world', {})
    for x, y, terrain, explored in world_data.get('tiles', []):
        state.grid.tiles[(x, y)] = TerrainTile(coord=(x, y), terrain_type=TerrainType(terrain), explored=explored)
    state.grid.generated_chunks = {tuple(c) for c in world_data.get('generated_chunks', [])}

    for p_data in data.get('farm_plots', []):
        coord = (p_data['x'], p_data['y'])
        seed_id = p_data.get('seed_item_id')
        crop_id = p_data.get('crop_item_id')
        tool_id = p_data.get('tool_item_id')
        state.farms.plots[coord] = FarmPlot(
            coord=coord,
            has_seed=p_data.get('has_seed', False),
            growth_stage=p_data.get('growth_stage', 0),
            growth_timer=p_data.get('growth_timer', 0.0),
            seed_item_id=ItemId(seed_id) if seed_id is not None else None,
            crop_item_id=ItemId(crop_id) if crop_id is not None else None,
            soil=SoilData(**p_data.get('soil', {})),
            growth_multiplier=p_data.get('growth_multiplier', 1.0),
            yield_multiplier=p_data.get('yield_multiplier', 1.0),
            tool_item_id=ItemId(tool_id) if tool_id is not None else None,
            tool_durability=p_data.get('tool_durability', 0),
            tool_efficiency=p_data.get('tool_efficiency', 1.0),
        )

    for p_data in data.get('pens', []):
        coord = (p_data['x'], p_data['y'])
        species = None
        if p_data.get('species_id') is not None:
            species = state.catalogs.livestock.find(SpeciesId(p_data['species_id']))
            if species is None:
                logger.warning("Dropping pen at %s: unknown species %s", coord, p_data['species_id'])
                continue
        state.pens.pens[coord] = LivestockPen(
            coord=coord,
            has_animal=p_data.get('has_animal', False) and species is not None,
            species=species,
            growth_stage=p_data.get('growth_stage', 0),
            growth_timer=p_data.get('growth_timer', 0.0),
            product_timer=p_data.get('product_timer', 0.0),
            has_product=p_data.get('has_product', False),
        )
    state.pens.total_products = data.get('livestock_products_total', 0)

    for b_data in data.get('buildings', []):
        coord = (b_data['x'], b_data['y'])
        state.buildings.buildings[coord] = Building(coord=coord, type=BuildingType(b_data['type']))

    if 'rng_state' in data:
        version, internal, gauss = data['rng_state']
        state.rng.setstate((version, tuple(internal), gauss))

    return state


def save_to_json(state: SimulationState, path: str):
    """Saves the simulation state to a JSON file."""
    with open(path, 'w') as f:
        json.dump(to_dict(state), f, indent=2)


def load_from_json(path: str, catalogs: Optional[Catalogs] = None) -> SimulationState:
    """Loads the simulation state from a JSON file."""
    with open(path, 'r') as f:
        data = json.load(f)
    return from_dict(data, catalogs)
