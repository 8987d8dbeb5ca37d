from dataclasses import dataclass
from typing import Optional

from .state import SimulationState
from .log import AuditLog
from ..world.model import Viewport


@dataclass
class TickReport:
    tick: int
    log: AuditLog
    level: int = 1
    ending_available: bool = False


def step(state: SimulationState, dt: float = 1.0, viewport: Optional[Viewport] = None) -> TickReport:
    """
    Advances the simulation by `dt` seconds.
    Order is fixed: world generation, farms, livestock, progression.
    """
    if dt < 0:
        raise ValueError("dt must be non-negative.")
    log = AuditLog()
    tick = state.tick

    # --- Simulation Stages ---

    # 1. world.generate
    new_chunks = state.grid.generate_in_view(viewport or state.viewport())
    if new_chunks:
        log.add_entry(
            "world.generate",
            tick,
            reason=f"{len(new_chunks)} new chunks generated.",
            details={"chunks": [list(c) for c in new_chunks]},
        )

    # 2. production.farms
    for coord in state.farms.update(dt):
        plot = state.farms.plots[coord]
        log.add_entry(
            "farm.harvestable",
            tick,
            coord=coord,
            item_id=plot.crop_item_id,
            reason=f"Crop at {coord} is ready to harvest.",
        )

    # 3. production.livestock
    for coord, event in state.pens.update(dt):
        pen = state.pens.pens[coord]
        if event == "mature":
            log.add_entry(
                "livestock.mature", tick, coord=coord,
                reason=f"{pen.species.name} at {coord} is fully grown.",
            )
        elif event == "product":
            log.add_entry(
                "livestock.product_ready", tick, coord=coord, item_id=pen.species.product_item_id,
                reason=f"{pen.species.name} at {coord} has produce to collect.",
            )

    # 4. progression.check
    aggregates = state.aggregates()
    old_level = state.level
    new_level = state.progression.check_progress(aggregates)
    if new_level is not None:
        unlocked = [r.name for r in state.catalogs.recipes.unlocked_at(new_level)]
        log.add_entry(
            "progression.level_up",
            tick,
            delta=new_level - old_level,
            reason=state.progression.level_up_message(new_level),
            details={"old_level": old_level, "new_level": new_level, "unlocked_recipes": unlocked},
        )

    # --- End of Tick ---
    state.tick += 1
    state.elapsed += dt

    return TickReport(
        tick=state.tick,
        log=log,
        level=state.level,
        ending_available=state.progression.ending_available(aggregates.temples),
    )
