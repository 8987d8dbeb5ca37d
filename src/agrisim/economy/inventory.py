from typing import Dict, Iterator, Tuple
from collections import defaultdict

from ..core.ids import ItemId


class Inventory:
    def __init__(self):
        self._quantities: Dict[ItemId, int] = defaultdict(int)

    def get(self, item_id: ItemId, default_qty: int = 0) -> int:
        """Returns the quantity of an item, or a default if not present."""
        return self._quantities.get(item_id, default_qty)

    count = get

    def has(self, item_id: ItemId, quantity: int = 1) -> bool:
        return self.get(item_id) >= quantity

    def add(self, item_id: ItemId, quantity: int):
        """Adds a quantity of an item to the inventory."""
        if quantity <= 0:
            raise ValueError("Quantity to add must be positive.")
        self._quantities[item_id] += int(quantity)

    def remove(self, item_id: ItemId, quantity: int) -> bool:
        """
        Removes a quantity of an item. Returns False and leaves the inventory
        untouched if the balance is lower than the requested quantity.
        """
        if quantity < 0:
            raise ValueError("Quantity to remove must be non-negative.")
        current_qty = self._quantities.get(item_id, 0)
        if current_qty < quantity:
            return False
        if current_qty == quantity:
            self._quantities.pop(item_id, None)
        else:
            self._quantities[item_id] = current_qty - quantity
        return True

    def __getitem__(self, item_id: ItemId) -> int:
        return self.get(item_id)

    def __setitem__(self, item_id: ItemId, quantity: int):
        if quantity < 0:
            raise ValueError("Inventory quantity cannot be negative.")
        if quantity == 0:
            self._quantities.pop(item_id, None)
        else:
            self._quantities[item_id] = int(quantity)

    def __contains__(self, item_id: ItemId) -> bool:
        return self._quantities.get(item_id, 0) > 0

    def __iter__(self) -> Iterator[Tuple[ItemId, int]]:
        return iter(sorted(self._quantities.items()))

    def to_dict(self) -> Dict[ItemId, int]:
        return {item_id: qty for item_id, qty in self._quantities.items() if qty > 0}

    def snapshot(self) -> Dict[ItemId, int]:
        """Sorted copy, safe to hand to readers outside the simulation step."""
        return dict(sorted(self.to_dict().items()))
