from typing import Dict, Iterable

from ..core.ids import ItemId
from .items import ItemData

PRESERVATION_KEYWORDS = ("bread", "jerky", "dried", "salted", "smoked", "pickled")
PRESERVED_CATEGORY = "intermediate"


def is_preserved_food(item: ItemData) -> bool:
    """
    Explicit catalog flag wins. Without one, fall back to the name heuristic:
    an intermediate material whose name mentions a preservation method.
    """
    if item.preserved is not None:
        return item.preserved
    if item.category != PRESERVED_CATEGORY:
        return False
    name = item.name.lower()
    return any(keyword in name for keyword in PRESERVATION_KEYWORDS)


class PreservedFoodStore:
    """Running tally of preserved food crafted so far; read by progression."""

    def __init__(self):
        self._counts: Dict[ItemId, int] = {}

    def add(self, item_id: ItemId, quantity: int):
        if quantity <= 0:
            raise ValueError("Quantity to add must be positive.")
        self._counts[item_id] = self._counts.get(item_id, 0) + quantity

    def count(self, item_id: ItemId) -> int:
        return self._counts.get(item_id, 0)

    def meets(self, requirements: Dict[ItemId, int]) -> bool:
        return all(self.count(item_id) >= qty for item_id, qty in requirements.items())

    def total(self) -> int:
        return sum(self._counts.values())

    def to_dict(self) -> Dict[ItemId, int]:
        return dict(sorted(self._counts.items()))

    @classmethod
    def from_dict(cls, data: Dict) -> "PreservedFoodStore":
        store = cls()
        for item_id, qty in data.items():
            if int(qty) > 0:
                store.add(ItemId(int(item_id)), int(qty))
        return store


def preserved_items(items: Iterable[ItemData]) -> list:
    return [item for item in items if is_preserved_food(item)]
