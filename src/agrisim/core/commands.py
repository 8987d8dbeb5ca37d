"""
Player command surface. Every command is a synchronous call that returns a
CommandResult; gameplay failures never raise. Malformed requests (unknown
command, missing coordinates) are programmer errors and do raise.
"""
import logging
from typing import Any, Callable, Dict, Optional

from .ids import BuildingType, ItemId, SpeciesId
from .results import CommandResult, Failure
from .state import SimulationState

logger = logging.getLogger(__name__)


class UnknownCommandError(Exception):
    """Raised when a command name is not part of the command surface."""
    pass


class CommandArgumentError(ValueError):
    """Raised when a command is missing a parameter or gets one of the wrong type."""
    pass


def _int_param(params: Dict[str, Any], key: str) -> int:
    if key not in params or params[key] is None:
        raise CommandArgumentError(f"Missing parameter '{key}'.")
    try:
        return int(params[key])
    except (TypeError, ValueError):
        raise CommandArgumentError(f"Parameter '{key}' must be an integer, got {params[key]!r}.")


def _optional_int(params: Dict[str, Any], key: str) -> Optional[int]:
    if params.get(key) is None:
        return None
    return _int_param(params, key)


def _plant_seed(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    seed = _optional_int(p, "seed_item_id")
    return state.farms.plant_seed(_int_param(p, "x"), _int_param(p, "y"),
                                  ItemId(seed) if seed is not None else None)


def _harvest(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    return state.farms.harvest(_int_param(p, "x"), _int_param(p, "y"))


def _equip_tool(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    return state.farms.equip_tool(_int_param(p, "x"), _int_param(p, "y"), ItemId(_int_param(p, "tool_item_id")))


def _place_animal(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    species = _optional_int(p, "species_id")
    return state.pens.place_animal(_int_param(p, "x"), _int_param(p, "y"),
                                   SpeciesId(species) if species is not None else None)


def _harvest_product(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    return state.pens.harvest_product(_int_param(p, "x"), _int_param(p, "y"))


def _kill_animal(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    return state.pens.kill_animal(_int_param(p, "x"), _int_param(p, "y"))


def _convert_terrain(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    x, y = _int_param(p, "x"), _int_param(p, "y")
    tool_id = _optional_int(p, "tool_item_id")
    if tool_id is None:
        tool = state.conversion.find_usable_tool(x, y)
        if tool is None:
            return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, f"No usable tool for ({x}, {y}).")
        tool_id = tool.id
    return state.conversion.try_convert(x, y, ItemId(tool_id))


def _build(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    building_type = p.get("building_type")
    if not building_type:
        raise CommandArgumentError("Missing parameter 'building_type'.")
    return state.buildings.build(_int_param(p, "x"), _int_param(p, "y"), BuildingType(str(building_type).upper()))


def _craft(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    return state.crafting.craft(ItemId(_int_param(p, "item_id")))


def _move_player(state: SimulationState, p: Dict[str, Any]) -> CommandResult:
    state.player_tile = (_int_param(p, "x"), _int_param(p, "y"))
    return CommandResult.success(f"Moved to {state.player_tile}.")


COMMANDS: Dict[str, Callable[[SimulationState, Dict[str, Any]], CommandResult]] = {
    "plant_seed": _plant_seed,
    "harvest": _harvest,
    "equip_tool": _equip_tool,
    "place_animal": _place_animal,
    "harvest_product": _harvest_product,
    "kill_animal": _kill_animal,
    "convert_terrain": _convert_terrain,
    "build": _build,
    "craft": _craft,
    "move_player": _move_player,
}


def execute(state: SimulationState, name: str, **params: Any) -> CommandResult:
    handler = COMMANDS.get(name)
    if handler is None:
        raise UnknownCommandError(f"Unknown command '{name}'.")
    result = handler(state, params)
    state.command_log.add_entry(
        f"command.{name}",
        state.tick,
        coord=(int(params["x"]), int(params["y"])) if "x" in params and "y" in params else None,
        reason=result.message,
        details={"params": dict(params), "ok": result.ok,
                 "failure": result.failure.value if result.failure else None},
    )
    if not result.ok:
        logger.debug("Command %s failed: %s", name, result.message)
    return result
