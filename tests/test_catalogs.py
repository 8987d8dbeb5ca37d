import logging
from pathlib import Path

import pytest

from src.agrisim.core.catalogs import load_catalogs
from src.agrisim.core.ids import BuildingType, ItemId, RecipeId, SpeciesId
from src.agrisim.core.state import SimulationState
from src.agrisim.economy.items import ItemCatalog, ToolClass
from src.agrisim.economy.livestock import LivestockCatalog
from src.agrisim.economy.preserved import is_preserved_food
from src.agrisim.economy.recipes import RecipeRegistry
from src.agrisim.world.terrain import TerrainTable, TerrainType


def test_shipped_catalogs_load(catalogs):
    assert len(catalogs.items) > 40
    assert catalogs.items.get(ItemId(51)).tool_class == ToolClass.HOE
    assert [s.name for s in catalogs.livestock.available_species(1)] == ["Chicken", "Pig"]
    assert catalogs.buildings.get(BuildingType("TEMPLE")).materials == {ItemId(37): 5, ItemId(1): 3}


def test_recipes_are_applied_to_items(catalogs):
    hoe = catalogs.items.get(ItemId(51))
    assert hoe.craftable
    assert hoe.materials == {ItemId(2): 2, ItemId(1): 1}

    bread = catalogs.items.get(ItemId(42))
    assert bread.requirements == {ItemId(5): 1}
    assert catalogs.recipes.get(RecipeId(6)).result_amount == 2


def test_recipes_unlocked_at_level(catalogs):
    names = [r.name for r in catalogs.recipes.unlocked_at(2)]
    assert "Wooden Leveler" in names
    assert "Stone Hoe" not in names
    assert all(r.required_civ_level <= 1 for r in catalogs.recipes.available_recipes(1))


def test_preserved_food_classification(catalogs):
    items = catalogs.items
    assert is_preserved_food(items.get(ItemId(42)))
    assert is_preserved_food(items.get(ItemId(43)))
    assert is_preserved_food(items.get(ItemId(44)))
    # Explicit flag wins over the name heuristic
    assert is_preserved_food(items.get(ItemId(46)))
    assert not is_preserved_food(items.get(ItemId(9)))
    assert not is_preserved_food(items.get(ItemId(35)))


def test_bad_item_rows_are_skipped(tmp_path: Path, caplog):
    path = tmp_path / "items.yaml"
    path.write_text(
        "- {id: 1, name: Stone}\n"
        "- {id: 2}\n"
        "- {id: x, name: Broken}\n"
        "- {id: 3, name: Odd Tool, tool_class: spoon}\n"
        "- {id: 4, name: Wood}\n"
    )
    catalog = ItemCatalog()
    with caplog.at_level(logging.WARNING):
        loaded = catalog.load_from_yaml(path)

    assert loaded == 2
    assert ItemId(1) in catalog and ItemId(4) in catalog
    assert ItemId(3) not in catalog
    assert "Skipping item row" in caplog.text


def test_recipe_component_rows_for_unknown_recipes_are_dropped(tmp_path: Path):
    path = tmp_path / "recipes.yaml"
    path.write_text(
        "recipes:\n"
        "  - {id: 1, result_item_id: 51, name: Stone Hoe}\n"
        "  - {id: 2, result_item_id: 52, name: Bad, result_amount: 0}\n"
        "ingredients:\n"
        "  - {recipe_id: 1, item_id: 2, amount: 2}\n"
        "  - {recipe_id: 7, item_id: 2, amount: 2}\n"
        "  - {recipe_id: 1, item_id: 1, amount: -1}\n"
        "requirements: []\n"
    )
    registry = RecipeRegistry()
    assert registry.load_from_yaml(path) == 1
    assert registry.get(RecipeId(1)).materials == {ItemId(2): 2}
    with pytest.raises(ValueError):
        registry.get(RecipeId(2))


def test_livestock_rows_of_other_categories_are_ignored(tmp_path: Path):
    path = tmp_path / "livestock.yaml"
    path.write_text(
        "- {id: 19, category: animal, name: Chicken, meat_item_id: 25, product_item_id: 26, product_interval: 8}\n"
        "- {id: 90, category: crop, name: Cabbage, meat_item_id: 1}\n"
        "- {id: 21, category: animal, name: Sheep, meat_item_id: 28, product_item_id: 29, product_interval: 0}\n"
    )
    catalog = LivestockCatalog()
    catalog.load_from_yaml(path)
    assert [s.id for s in catalog.all_species()] == [SpeciesId(19)]


def test_missing_data_directory_falls_back_to_defaults(tmp_path: Path, caplog):
    with caplog.at_level(logging.WARNING):
        fallback = load_catalogs(tmp_path / "nowhere")

    assert {i.name for i in fallback.items.all_items()} == {
        "Stone", "Wood", "Grain", "Chicken Meat", "Egg", "Pork", "Raw Meat"}
    assert [s.name for s in fallback.livestock.all_species()] == ["Chicken", "Pig"]
    assert fallback.buildings.find(BuildingType("TEMPLE")) is not None
    assert fallback.terrain.get(TerrainType.WATER).water_source
    assert fallback.recipes.all_recipes() == []
    assert "not found" in caplog.text


def test_fallback_livestock_only_uses_fallback_items(tmp_path: Path):
    fallback = load_catalogs(tmp_path)

    for species in fallback.livestock.all_species():
        assert species.meat_item_id in fallback.items
        if species.has_product:
            assert species.product_item_id in fallback.items

    state = SimulationState(seed=3, catalogs=fallback)
    state.inventory.add(state.rules.feed_item, 1)
    assert state.rules.feed_item in fallback.items
    assert state.pens.place_animal(0, 0, SpeciesId(20))
    assert state.pens.kill_animal(0, 0)
    assert fallback.items.find(ItemId(27)).name == "Pork"
    assert state.inventory.get(ItemId(27)) == 1


def test_corrupt_catalog_file_falls_back_to_defaults(tmp_path: Path):
    (tmp_path / "items.yaml").write_text("key: [unclosed\n")
    (tmp_path / "livestock.yaml").write_text("just a string\n")

    fallback = load_catalogs(tmp_path)

    assert ItemId(105) in fallback.items
    assert fallback.livestock.find(SpeciesId(20)).name == "Pig"


def test_terrain_overrides_keep_unlisted_defaults(tmp_path: Path):
    path = tmp_path / "terrain.yaml"
    path.write_text(
        "- {type: GRASS, soil: {fertility: 0.9}, glyph: g}\n"
        "- {type: LAVA, soil: {moisture: 0.0}}\n"
    )
    table = TerrainTable()
    table.load_from_yaml(path)

    grass = table.get(TerrainType.GRASS)
    assert grass.fertility == 0.9
    assert grass.moisture == 0.5
    assert table.glyph(TerrainType.GRASS) == "g"
    assert table.get(TerrainType.SAND).drainage == 0.9
    assert set(table.water_sources()) == {TerrainType.WATER, TerrainType.PADDY, TerrainType.WATER_CHANNEL}
