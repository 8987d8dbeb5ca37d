import logging

import pytest

from src.agrisim.core.config import SimulationRules
from src.agrisim.core.ids import ItemId


def test_defaults():
    rules = SimulationRules()
    assert rules.farm_stage_times == (3.0, 6.0, 10.0)
    assert rules.preserved_requirements == {ItemId(42): 100, ItemId(43): 50}
    assert rules.ending_building == "TEMPLE"


def test_from_dict_coerces_values():
    rules = SimulationRules.from_dict({
        "farm_stage_times": [1, 2, 3],
        "preserved_requirements": {"42": 5},
        "feed_item": "16",
        "chunk_margin": 1,
    })
    assert rules.farm_stage_times == (1.0, 2.0, 3.0)
    assert rules.preserved_requirements == {ItemId(42): 5}
    assert rules.feed_item == ItemId(16)
    assert rules.chunk_margin == 1


def test_unknown_keys_are_ignored_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        rules = SimulationRules.from_dict({"gravity": 9.8})
    assert not hasattr(rules, "gravity")
    assert "gravity" in caplog.text


def test_bad_generator_is_rejected():
    with pytest.raises(ValueError):
        SimulationRules.from_dict({"terrain_generator": "perlin"})


def test_to_dict_round_trip():
    rules = SimulationRules(water_radius=2, product_threshold_level3=7)
    assert SimulationRules.from_dict(rules.to_dict()) == rules
