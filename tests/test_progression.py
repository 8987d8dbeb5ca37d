import pytest

from src.agrisim.core.ids import ItemId
from src.agrisim.progression.civilization import (
    CivilizationLevel,
    ProgressAggregates,
    ProgressionRules,
    level_name,
)

BREAD, JERKY = ItemId(42), ItemId(43)


def test_level_one_needs_both_preserved_foods():
    civ = CivilizationLevel()
    assert civ.check_progress(ProgressAggregates(preserved_food={BREAD: 100, JERKY: 49})) is None
    assert civ.level == 1
    assert civ.check_progress(ProgressAggregates(preserved_food={BREAD: 100, JERKY: 50})) == 2
    assert civ.name == "Neolithic"


def test_one_level_per_check():
    civ = CivilizationLevel()
    rich = ProgressAggregates(preserved_food={BREAD: 500, JERKY: 500}, livestock_products=1000)

    assert civ.check_progress(rich) == 2
    assert civ.check_progress(rich) == 3
    assert civ.check_progress(rich) == 4
    assert civ.check_progress(rich) is None
    assert civ.level == 4


def test_level_never_decreases():
    civ = CivilizationLevel(level=3)
    assert civ.check_progress(ProgressAggregates()) is None
    assert civ.level == 3
    assert civ.check_progress(ProgressAggregates(livestock_products=99)) is None
    assert civ.check_progress(ProgressAggregates(livestock_products=100)) == 4


def test_custom_thresholds():
    civ = CivilizationLevel(level=2, rules=ProgressionRules(product_threshold_level3=3))
    assert civ.check_progress(ProgressAggregates(livestock_products=2)) is None
    assert civ.check_progress(ProgressAggregates(livestock_products=3)) == 3


def test_ending_needs_top_level_and_a_temple():
    civ = CivilizationLevel(level=3)
    assert not civ.ending_available(temple_count=1)
    civ = CivilizationLevel(level=4)
    assert not civ.ending_available(temple_count=0)
    assert civ.ending_available(temple_count=1)


def test_item_availability_follows_level():
    civ = CivilizationLevel(level=2)
    assert civ.is_item_available(1)
    assert civ.is_item_available(2)
    assert not civ.is_item_available(3)


def test_level_bounds_and_names():
    with pytest.raises(ValueError):
        CivilizationLevel(level=0)
    with pytest.raises(ValueError):
        CivilizationLevel(level=11)
    assert level_name(3) == "Bronze Age"
    assert level_name(9) == "Unknown"
    assert "Bronze" in CivilizationLevel(level=3).level_up_message()


def test_progress_summary():
    civ = CivilizationLevel()
    summary = civ.progress_summary(ProgressAggregates(preserved_food={BREAD: 7}))
    assert summary["next_level"] == 2
    assert summary["preserved_food"]["42"] == {"have": 7, "need": 100}
    assert CivilizationLevel(level=4).progress_summary(ProgressAggregates())["next_level"] is None
