import pytest

from src.agrisim.core.ids import ItemId
from src.agrisim.core.sim import step
from src.agrisim.world.model import Viewport
from src.agrisim.world.terrain import TerrainType

GRAIN_SEED, GRAIN, WORKBENCH, PORK, SALT = ItemId(8), ItemId(9), ItemId(5), ItemId(27), ItemId(7)
BREAD, JERKY = ItemId(42), ItemId(43)


def test_step_advances_clock_and_generates_view(state):
    report = step(state, dt=0.5)

    assert report.tick == 1
    assert state.tick == 1
    assert state.elapsed == pytest.approx(0.5)
    assert len(report.log.of_type("world.generate")) == 1
    assert state.grid.terrain_at(0, 0) is not None

    second = step(state)
    assert second.log.of_type("world.generate") == []


def test_step_uses_given_viewport(state):
    step(state, viewport=Viewport.around(500, 500, 4, 4))
    assert state.grid.terrain_at(500, 500) is not None
    assert state.grid.terrain_at(0, 0) is None


def test_negative_dt_is_rejected(state):
    with pytest.raises(ValueError):
        step(state, dt=-1.0)
    assert state.tick == 0


def test_zero_dt_only_generates(state):
    state.inventory.add(GRAIN_SEED, 1)
    state.farms.plant_seed(1, 1)
    step(state, dt=0.0)
    assert state.farms.get_plot(1, 1).growth_timer == 0.0
    assert state.tick == 1


def test_farm_and_livestock_events_are_reported(state):
    state.inventory.add(GRAIN_SEED, 1)
    state.inventory.add(GRAIN, 1)
    state.grid.set_terrain_type(3, 3, TerrainType.GRASS)
    state.farms.plant_seed(1, 1)
    state.pens.place_animal(3, 3, 19)

    report = step(state, dt=10.0)

    types = [e.type for e in report.log.entries]
    assert types.index("farm.harvestable") < types.index("livestock.mature")
    assert types.index("livestock.mature") < types.index("livestock.product_ready")
    assert report.log.of_type("farm.harvestable")[0].coord == (1, 1)


def test_crafting_preserved_food_levels_up(make_state):
    state = make_state(preserved_requirements={BREAD: 1, JERKY: 2})
    state.inventory.add(WORKBENCH, 1)
    state.inventory.add(GRAIN, 2)
    state.inventory.add(PORK, 1)
    state.inventory.add(SALT, 1)
    assert state.crafting.craft(BREAD)
    assert state.crafting.craft(JERKY)

    report = step(state)

    assert report.level == 2
    level_ups = report.log.of_type("progression.level_up")
    assert len(level_ups) == 1
    assert level_ups[0].details["old_level"] == 1
    assert "Wooden Leveler" in level_ups[0].details["unlocked_recipes"]
    assert step(state).log.of_type("progression.level_up") == []


def test_livestock_products_drive_later_levels(make_state):
    state = make_state(level=2, product_threshold_level3=2, product_threshold_level4=3)
    state.inventory.add(GRAIN, 3)
    for x in range(3):
        state.pens.place_animal(x, 0, 20)
        state.pens.kill_animal(x, 0)

    assert step(state).level == 3
    assert step(state).level == 4
    assert not state.ending_available()
