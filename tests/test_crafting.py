from src.agrisim.core.ids import ItemId
from src.agrisim.core.results import Failure
from src.agrisim.economy.crafting import CraftingSystem
from src.agrisim.economy.inventory import Inventory
from src.agrisim.economy.items import ItemCatalog, ItemData
from src.agrisim.economy.preserved import PreservedFoodStore

WOOD, STONE, WORKBENCH, GRAIN, SALT, PORK = (ItemId(i) for i in (2, 1, 5, 9, 7, 27))
STONE_HOE, BREAD, JERKY, WOODEN_LEVELER = ItemId(51), ItemId(42), ItemId(43), ItemId(57)


def test_missing_material_leaves_inventory_untouched(state):
    state.inventory.add(WOOD, 1)

    assert state.crafting.can_craft(STONE_HOE) is False
    result = state.crafting.craft(STONE_HOE)

    assert not result
    assert result.failure == Failure.INSUFFICIENT_RESOURCE
    assert state.inventory.snapshot() == {WOOD: 1}


def test_successful_craft_consumes_materials(state):
    state.inventory.add(WOOD, 2)
    state.inventory.add(STONE, 1)

    assert state.crafting.can_craft(STONE_HOE)
    assert state.crafting.craft(STONE_HOE)
    assert state.inventory.snapshot() == {STONE_HOE: 1}


def test_requirements_are_held_not_consumed(state):
    state.inventory.add(GRAIN, 4)
    assert state.crafting.craft(BREAD).failure == Failure.INSUFFICIENT_RESOURCE

    state.inventory.add(WORKBENCH, 1)
    assert state.crafting.craft(BREAD)
    assert state.inventory.get(WORKBENCH) == 1
    assert state.inventory.get(GRAIN) == 2
    assert state.inventory.get(BREAD) == 1


def test_result_amount_and_preserved_tally(state):
    state.inventory.add(WORKBENCH, 1)
    state.inventory.add(PORK, 1)
    state.inventory.add(SALT, 1)

    assert state.crafting.craft(JERKY)

    assert state.inventory.get(JERKY) == 2
    assert state.preserved.count(JERKY) == 2
    assert state.aggregates().preserved_food == {JERKY: 2}


def test_locked_recipe_is_rejected_before_materials(state):
    state.inventory.add(WOOD, 10)
    state.inventory.add(STONE, 10)

    result = state.crafting.craft(WOODEN_LEVELER)

    assert result.failure == Failure.NOT_UNLOCKED
    assert state.inventory.get(WOOD) == 10


def test_item_without_recipe(state):
    state.inventory.add(STONE, 5)
    assert state.crafting.can_craft(STONE) is False
    assert state.crafting.craft(STONE).failure == Failure.INVALID_STATE
    assert state.crafting.craft(ItemId(9999)).failure == Failure.INVALID_STATE


def test_missing_materials_reports_shortfall(state):
    state.inventory.add(WOOD, 1)
    assert state.crafting.missing_materials(STONE_HOE) == {WOOD: 1, STONE: 1}
    assert state.crafting.missing_materials(BREAD) == {GRAIN: 2, WORKBENCH: 1}


def test_craftable_items_lists_only_affordable_unlocked(state):
    state.inventory.add(WOOD, 3)
    state.inventory.add(STONE, 1)
    names = {item.name for item in state.crafting.craftable_items()}
    assert "Stone Hoe" in names
    assert "Wooden Shovel" in names
    assert "Wooden Leveler" not in names
    assert "Bread" not in names


def test_standalone_crafting_without_progression():
    items = ItemCatalog()
    items.add(ItemData(id=ItemId(1), name="Stone"))
    items.add(ItemData(id=ItemId(2), name="Wood"))
    items.add(ItemData(id=ItemId(3), name="Smoked Fish", category="intermediate",
                       craftable=True, materials={ItemId(2): 1}))
    inventory = Inventory()
    inventory.add(ItemId(2), 3)
    store = PreservedFoodStore()
    crafting = CraftingSystem(inventory, items, store)

    assert crafting.craft(ItemId(3))
    assert store.count(ItemId(3)) == 1
    assert inventory.get(ItemId(2)) == 2
