import argparse
import logging
import sys
from pathlib import Path

import yaml

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from src.agrisim.world.load import load_scenario
from src.agrisim.core.sim import step
from src.agrisim.core.commands import execute
from src.agrisim.reports.almanac import generate_almanac, generate_state_summary


def load_command_script(path: Path) -> dict:
    """
    Reads a YAML list of {tick, command, ...params} rows and groups them by tick.
    """
    with open(path, 'r') as f:
        rows = yaml.safe_load(f) or []
    by_tick = {}
    for row in rows:
        row = dict(row)
        tick = int(row.pop('tick', 0))
        name = row.pop('command')
        by_tick.setdefault(tick, []).append((name, row))
    return by_tick


def main():
    parser = argparse.ArgumentParser(description="Run the AgriSim simulation.")
    parser.add_argument(
        "--scenario",
        type=str,
        default="data/scenario.yaml",
        help="Path to the scenario YAML file.",
    )
    parser.add_argument(
        "--data-dir", type=str, default="data", help="Directory holding the catalog YAML files."
    )
    parser.add_argument(
        "--ticks", type=int, default=12, help="Number of ticks to simulate."
    )
    parser.add_argument(
        "--dt", type=float, default=1.0, help="Seconds of game time per tick."
    )
    parser.add_argument(
        "--script", type=str, help="YAML file of player commands to issue at given ticks."
    )
    parser.add_argument(
        "--dump-json", action="store_true", help="Dump the final state to a JSON file."
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only print the final summary."
    )
    parser.add_argument(
        "--log-level", type=str, default="WARNING", help="Python logging level (DEBUG, INFO, ...)."
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    state = load_scenario(Path(args.scenario), Path(args.data_dir))
    print(f"Loaded scenario '{args.scenario}' with seed {state.seed}.")

    commands = load_command_script(Path(args.script)) if args.script else {}

    for _ in range(args.ticks):
        initial_tick = state.tick
        for name, params in commands.get(initial_tick, []):
            result = execute(state, name, **params)
            status = "ok" if result.ok else f"failed ({result.failure.value})"
            print(f"[tick {initial_tick}] {name} {params}: {status} {result.message}")

        report = step(state, dt=args.dt)
        if not args.quiet:
            print(generate_almanac(report.log, tick=initial_tick))

    print(generate_state_summary(state))

    if args.dump_json:
        from src.agrisim.io.save_load import save_to_json
        output_path = "final_state.json"
        save_to_json(state, output_path)
        print(f"Final state dumped to {output_path}")


if __name__ == "__main__":
    main()
