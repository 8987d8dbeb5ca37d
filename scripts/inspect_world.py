import argparse
import json
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from src.agrisim.world.load import load_scenario
from src.agrisim.io.save_load import load_from_json
from src.agrisim.core.sim import step
from src.agrisim.world.model import Viewport


def render_ascii(state, viewport: Viewport) -> str:
    """Draws terrain glyphs, with F/f for ripe/growing crops, A for animals and B for buildings."""
    terrain = state.catalogs.terrain
    rows = []
    for y in range(int(viewport.top), int(viewport.bottom) - 1, -1):
        row = []
        for x in range(int(viewport.left), int(viewport.right) + 1):
            if (x, y) == state.player_tile:
                row.append("@")
            elif (x, y) in state.buildings.buildings:
                row.append("B")
            elif (x, y) in state.pens.pens and state.pens.pens[(x, y)].has_animal:
                row.append("A")
            elif (x, y) in state.farms.plots and state.farms.plots[(x, y)].has_seed:
                row.append("F" if state.farms.plots[(x, y)].is_harvestable else "f")
            else:
                row.append(terrain.glyph(state.grid.terrain_at(x, y)))
        rows.append("".join(row))
    return "\n".join(rows)


def main():
    parser = argparse.ArgumentParser(description="Inspect the terrain and holdings of an AgriSim world.")
    parser.add_argument(
        "--scenario",
        type=str,
        default="data/scenario.yaml",
        help="Path to the scenario YAML file.",
    )
    parser.add_argument(
        "--from-json",
        type=str,
        help="Path to a JSON state file to load from instead of a YAML scenario.",
    )
    parser.add_argument("--x", type=int, help="Centre x (defaults to the player tile).")
    parser.add_argument("--y", type=int, help="Centre y (defaults to the player tile).")
    parser.add_argument("--width", type=int, default=60)
    parser.add_argument("--height", type=int, default=30)
    parser.add_argument("--tile", type=str, help="Print details of one tile, given as 'x,y'.")
    args = parser.parse_args()

    if args.from_json:
        state = load_from_json(args.from_json)
        print(f"Loaded state from JSON file: {args.from_json}")
    else:
        state = load_scenario(Path(args.scenario))
        print(f"Loaded scenario from '{args.scenario}' with seed {state.seed}")

    cx = args.x if args.x is not None else state.player_tile[0]
    cy = args.y if args.y is not None else state.player_tile[1]
    viewport = Viewport.around(cx, cy, args.width, args.height)
    # A zero-length step only generates terrain.
    step(state, dt=0.0, viewport=viewport)

    if args.tile:
        x, y = (int(v) for v in args.tile.split(","))
        tile = state.grid.get_tile(x, y)
        if tile is None:
            print(f"Error: Tile ({x}, {y}) has not been generated.")
            sys.exit(1)
        attrs = state.catalogs.terrain.get(tile.terrain_type)
        info = {
            "coord": list(tile.coord),
            "terrain": tile.terrain_type.value,
            "explored": tile.explored,
            "soil": {"moisture": attrs.moisture, "fertility": attrs.fertility,
                     "drainage": attrs.drainage, "tillage": attrs.tillage},
            "near_water": state.conversion.has_water_nearby(x, y),
        }
        usable = state.conversion.find_usable_tool(x, y)
        info["usable_tool"] = usable.name if usable else None
        print(f"\n--- Tile ({x}, {y}) ---")
        print(json.dumps(info, indent=2))
        return

    print(f"\n--- Terrain around ({cx}, {cy}) ---")
    print(render_ascii(state, viewport))

    counts = {t.value: n for t, n in sorted(state.grid.terrain_counts().items(), key=lambda kv: kv[0].value)}
    print("\n--- Terrain counts ---")
    print(json.dumps(counts, indent=2))
    print(f"\nCivilization: level {state.level} ({state.progression.name})")


if __name__ == "__main__":
    main()
