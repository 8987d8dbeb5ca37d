import logging
from typing import Callable, List, Optional

from ..core.ids import ItemId
from ..core.results import CommandResult, Failure
from .inventory import Inventory
from .items import ItemCatalog, ItemData
from .preserved import PreservedFoodStore, is_preserved_food

logger = logging.getLogger(__name__)


class CraftingSystem:
    """
    Turns materials into items. `is_unlocked` receives an item's required
    civilization level; it defaults to "everything unlocked" for callers that
    run without progression.
    """

    def __init__(
        self,
        inventory: Inventory,
        items: ItemCatalog,
        preserved_store: Optional[PreservedFoodStore] = None,
        is_unlocked: Optional[Callable[[int], bool]] = None,
    ):
        self.inventory = inventory
        self.items = items
        self.preserved_store = preserved_store
        self.is_unlocked = is_unlocked or (lambda required_level: True)

    def _has_inputs(self, item: ItemData) -> bool:
        for material_id, qty in item.materials.items():
            if self.inventory.get(material_id) < qty:
                return False
        for required_id in item.requirements:
            # Requirements are held, not consumed: owning one is enough.
            if self.inventory.get(required_id) < 1:
                return False
        return True

    def can_craft(self, item_id: ItemId) -> bool:
        item = self.items.find(item_id)
        if item is None or not item.craftable:
            return False
        return self._has_inputs(item)

    def craft(self, item_id: ItemId) -> CommandResult:
        item = self.items.find(item_id)
        if item is None or not item.craftable:
            return CommandResult.fail(Failure.INVALID_STATE, f"Item {item_id} has no recipe.")
        if not self.is_unlocked(item.required_civ_level):
            return CommandResult.fail(
                Failure.NOT_UNLOCKED,
                f"{item.name} requires civilization level {item.required_civ_level}.",
            )
        if not self._has_inputs(item):
            return CommandResult.fail(Failure.INSUFFICIENT_RESOURCE, f"Missing materials for {item.name}.")

        # Validated above, so every removal succeeds and no partial state is visible.
        for material_id, qty in item.materials.items():
            self.inventory.remove(material_id, qty)
        self.inventory.add(item.id, item.result_amount)

        if self.preserved_store is not None and is_preserved_food(item):
            self.preserved_store.add(item.id, item.result_amount)

        logger.debug("Crafted %d x %s", item.result_amount, item.name)
        return CommandResult.success(f"Crafted {item.result_amount} {item.name}.")

    def missing_materials(self, item_id: ItemId) -> dict:
        """Shortfall per input; empty when the item can be crafted."""
        item = self.items.get(item_id)
        missing = {}
        for material_id, qty in item.materials.items():
            have = self.inventory.get(material_id)
            if have < qty:
                missing[material_id] = qty - have
        for required_id in item.requirements:
            if self.inventory.get(required_id) < 1:
                missing[required_id] = 1
        return missing

    def craftable_items(self) -> List[ItemData]:
        return [
            item for item in self.items.all_items()
            if item.craftable and self.is_unlocked(item.required_civ_level) and self._has_inputs(item)
        ]
