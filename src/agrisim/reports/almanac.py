from typing import List

from ..core.log import AuditLog
from ..core.state import SimulationState
from ..economy.preserved import preserved_items
from ..progression.civilization import level_name


def generate_almanac(log: AuditLog, tick: int) -> str:
    """
    Generates a concise almanac entry from an AuditLog.
    """
    lines = [f"== Tick {tick} Almanac =="]
    for entry in log.entries:
        reason = entry.reason or ""
        where = f" @{entry.coord[0]},{entry.coord[1]}" if entry.coord else ""
        if reason:
            lines.append(f"[{entry.type}]{where} {reason}")
        else:
            lines.append(f"[{entry.type}]{where}")
    return "\n".join(lines) + "\n"


def generate_state_summary(state: SimulationState) -> str:
    """
    Summarizes the settlement: civilization, holdings, fields and herds.

    Args:
        state: The SimulationState to summarize.

    Returns:
        A string containing the formatted report.
    """
    items = state.catalogs.items
    report = "--- Settlement Almanac ---\n"
    report += f"Tick: {state.tick} (elapsed {state.elapsed:.1f}s)\n"
    report += f"Civilization: level {state.level} ({level_name(state.level)})\n"

    report += "\n--- Holdings ---\n"
    holdings = state.inventory.snapshot()
    if not holdings:
        report += "Storehouse is empty.\n"
    for item_id, qty in holdings.items():
        item = items.find(item_id)
        name = item.name if item else f"Item {item_id}"
        report += f"{name}: {qty}\n"

    report += "\n--- Fields ---\n"
    report += f"Planted: {state.farms.planted_count()}, ready to harvest: {state.farms.harvestable_count()}\n"

    report += "\n--- Herds ---\n"
    report += f"Animals: {state.pens.animal_count()}\n"
    herds: List[str] = []
    for pen in state.pens.pens.values():
        if pen.has_animal:
            status = "product ready" if pen.has_product else f"stage {pen.growth_stage}"
            herds.append(f"{pen.species.name} at {pen.coord}: {status}")
    report += "\n".join(sorted(herds)) + "\n" if herds else "No animals.\n"
    report += f"Lifetime livestock products: {state.pens.total_products}\n"

    report += "\n--- Preserved Stores ---\n"
    stores = [(item.name, state.preserved.count(item.id)) for item in preserved_items(items.all_items())]
    stores = [(name, qty) for name, qty in stores if qty > 0]
    if not stores:
        report += "Nothing preserved yet.\n"
    for name, qty in stores:
        report += f"{name}: {qty}\n"

    report += "\n--- Progress ---\n"
    summary = state.progression.progress_summary(state.aggregates())
    if summary["next_level"] is None:
        report += "No further advancement is known.\n"
    else:
        report += f"Next: level {summary['next_level']} ({level_name(summary['next_level'])})\n"
        for key, value in summary.items():
            if key != "next_level":
                report += f"  {key}: {value}\n"
    if state.ending_available():
        report += "The temple stands. The age of legends can begin.\n"

    report += "\n--- End Almanac ---\n"
    return report
