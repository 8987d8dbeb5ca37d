from pathlib import Path

import pytest

from src.agrisim.core.catalogs import load_catalogs
from src.agrisim.core.config import SimulationRules
from src.agrisim.core.state import SimulationState


DATA_DIR = Path("data")


@pytest.fixture(scope="session")
def catalogs():
    # Catalogs are read-only after loading, so one copy serves the whole run.
    return load_catalogs(DATA_DIR)


@pytest.fixture
def state(catalogs) -> SimulationState:
    """Empty world: no generated chunks, empty inventory, level 1."""
    return SimulationState(seed=42, catalogs=catalogs)


@pytest.fixture
def make_state(catalogs):
    def _make(level: int = 1, seed: int = 42, **rule_overrides) -> SimulationState:
        rules = SimulationRules(**rule_overrides)
        return SimulationState(seed=seed, rules=rules, catalogs=catalogs, civilization_level=level)
    return _make


@pytest.fixture
def scenario_path() -> Path:
    return DATA_DIR / "scenario.yaml"


def pytest_addoption(parser):
    """Adds the --update-goldens command-line option."""
    parser.addoption(
        "--update-goldens", action="store_true", default=False, help="Update golden regression files."
    )
