import logging
import sys
import threading
import time
from collections import deque
from pathlib import Path

# Add the project root to the Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from flask import Flask, jsonify, request

from src.agrisim.core.state import SimulationState
import src.agrisim.core.sim as sim
from src.agrisim.core.commands import COMMANDS, CommandArgumentError, UnknownCommandError, execute
from src.agrisim.world.load import load_scenario
from src.agrisim.world.model import Viewport

logger = logging.getLogger(__name__)

app = Flask(__name__)

MAX_STEPS_PER_REQUEST = 500

DATA_PATH = Path(__file__).parent.parent / "data"
SCENARIO_PATH = DATA_PATH / "scenario.yaml"

# Global variables holding the running simulation
state = None
sim_controller = None


class SimulationController:
    def __init__(self, initial_state: SimulationState, tick_interval_s: float = 0.5, max_history: int = 200):
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread = None
        self._running = False
        self._tick_interval_s = tick_interval_s
        self._history = deque(maxlen=max_history)
        self._state = initial_state
        self._last_report = None
        self._record()

    def get_state(self) -> SimulationState:
        with self._lock:
            return self._state

    def lock(self):
        return self._lock

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def tick_count(self) -> int:
        with self._lock:
            return self._state.tick

    def history(self):
        with self._lock:
            return list(self._history)

    def last_events(self):
        with self._lock:
            if self._last_report is None:
                return []
            return [
                {"type": e.type, "coord": list(e.coord) if e.coord else None, "reason": e.reason}
                for e in self._last_report.log.entries
            ]

    def play(self):
        with self._lock:
            self._running = True
            if self._thread is None or not self._thread.is_alive():
                self._thread = threading.Thread(target=self._run_loop, daemon=True)
                self._thread.start()

    def pause(self):
        with self._lock:
            self._running = False

    def _advance(self):
        self._last_report = sim.step(self._state, dt=self._tick_interval_s)
        self._record()

    def _record(self):
        # Summary only; full saves go through io.save_load.
        current = self._state
        self._history.append({
            "tick": current.tick,
            "level": current.level,
            "chunks": len(current.grid.generated_chunks),
            "inventory": {str(k): v for k, v in current.inventory.snapshot().items()},
        })

    def step_once(self):
        with self._lock:
            try:
                self._advance()
            except Exception:
                self._running = False
                logger.exception("sim.step failed in step_once")

    def run_command(self, name: str, params: dict):
        with self._lock:
            result = execute(self._state, name, **params)
            self._record()
            return result

    def stop(self):
        self._stop_event.set()

    def _run_loop(self):
        while not self._stop_event.is_set():
            with self._lock:
                if self._running:
                    try:
                        self._advance()
                    except Exception:
                        self._running = False
                        logger.exception("sim.step failed in run loop")
            time.sleep(self._tick_interval_s)


def _initialize_simulation():
    global state, sim_controller
    state = load_scenario(SCENARIO_PATH, DATA_PATH)
    # Generate the starting view before the first tick is requested.
    state.grid.generate_in_view(state.viewport())
    sim_controller = SimulationController(state)


def _tile_payload(current: SimulationState, x: int, y: int) -> dict:
    tile = current.grid.get_tile(x, y)
    payload = {
        "x": x,
        "y": y,
        "terrain": tile.terrain_type.value if tile else None,
        "explored": tile.explored if tile else False,
        "chunk": list(current.grid.chunk_coords_of(x, y)),
    }
    plot = current.farms.get_plot(x, y)
    if plot is not None and plot.has_seed:
        payload["farm"] = {
            "seed_item_id": plot.seed_item_id,
            "growth_stage": plot.growth_stage,
            "harvestable": plot.is_harvestable,
            "tool_item_id": plot.tool_item_id,
        }
    pen = current.pens.pens.get((x, y))
    if pen is not None and pen.has_animal:
        payload["pen"] = {
            "species": pen.species.name,
            "growth_stage": pen.growth_stage,
            "has_product": pen.has_product,
        }
    building = current.buildings.get_building(x, y)
    if building is not None:
        payload["building"] = building.type
    return payload


@app.before_request
def before_first_request():
    if state is None or sim_controller is None:
        _initialize_simulation()


@app.route('/')
def index():
    return jsonify({"name": "agrisim", "commands": sorted(COMMANDS)})


@app.route('/sim/state')
def sim_state():
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    with sim_controller.lock():
        current = sim_controller.get_state()
        aggregates = current.aggregates()
        return jsonify({
            "tick": current.tick,
            "elapsed": current.elapsed,
            "player_tile": list(current.player_tile),
            "inventory": {str(k): v for k, v in current.inventory.snapshot().items()},
            "unlocked_items": [item.id for item in current.catalogs.items.unlocked_items(current.level)],
            "progression": current.progression.progress_summary(aggregates),
            "ending_available": current.ending_available(),
            "events": sim_controller.last_events(),
            "meta": {
                "running": sim_controller.is_running(),
                "tick": sim_controller.tick_count(),
            },
        })


@app.route('/sim/history')
def sim_history():
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    return jsonify({"history": sim_controller.history()})


@app.route('/world/tiles')
def world_tiles():
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    with sim_controller.lock():
        current = sim_controller.get_state()
        viewport = current.viewport()
        if all(k in request.args for k in ("left", "bottom", "right", "top")):
            try:
                viewport = Viewport(*(int(request.args[k]) for k in ("left", "bottom", "right", "top")))
            except ValueError:
                return jsonify({"error": "Viewport bounds must be integers"}), 400
        tiles = [
            [tile.x, tile.y, tile.terrain_type.value]
            for tile in current.grid.tiles_in_rect(
                int(viewport.left), int(viewport.bottom), int(viewport.right), int(viewport.top))
        ]
        return jsonify({
            "viewport": [viewport.left, viewport.bottom, viewport.right, viewport.top],
            "tiles": tiles,
        })


@app.route('/world/tile/<int(signed=True):x>/<int(signed=True):y>')
def world_tile(x, y):
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    with sim_controller.lock():
        return jsonify(_tile_payload(sim_controller.get_state(), x, y))


@app.route('/command/<name>', methods=['POST'])
def run_command(name):
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    params = request.get_json(silent=True) or {}
    try:
        result = sim_controller.run_command(name, params)
    except UnknownCommandError as e:
        return jsonify({"error": str(e)}), 400
    except CommandArgumentError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(result.to_dict())


@app.route('/sim/play', methods=['POST'])
def sim_play():
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    sim_controller.play()
    return jsonify({"status": "playing"})


@app.route('/sim/pause', methods=['POST'])
def sim_pause():
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    sim_controller.pause()
    return jsonify({"status": "paused"})


@app.route('/sim/step', methods=['POST'])
def sim_step():
    if sim_controller is None:
        return jsonify({"error": "Simulation not initialized"}), 500
    data = request.get_json(silent=True) or {}
    try:
        steps = int(data.get("steps", 1))
    except (TypeError, ValueError):
        return jsonify({"error": "steps must be an integer"}), 400
    steps = max(1, min(steps, MAX_STEPS_PER_REQUEST))
    for _ in range(steps):
        sim_controller.step_once()
    return jsonify({"status": "stepped", "steps": steps, "tick": sim_controller.tick_count()})


if __name__ == '__main__':
    app.run(debug=True)
