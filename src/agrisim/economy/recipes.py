from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict, List, Any
import yaml

from ..core.ids import ItemId, RecipeId
from .items import ItemCatalog, CatalogSchemaError

logger = logging.getLogger(__name__)


@dataclass
class Recipe:
    id: RecipeId
    result_item_id: ItemId
    name: str
    result_amount: int = 1
    description: str = ""
    required_civ_level: int = 1
    category: str = "general"
    materials: Dict[ItemId, int] = field(default_factory=dict)
    requirements: Dict[ItemId, int] = field(default_factory=dict)


def _parse_recipe(r_data: Dict[str, Any]) -> Recipe:
    for key in ("id", "result_item_id", "name"):
        if key not in r_data:
            raise CatalogSchemaError(f"Missing key '{key}' in recipe row.")
    result_amount = int(r_data.get('result_amount', 1))
    if result_amount <= 0:
        raise CatalogSchemaError(f"Recipe {r_data['id']} must produce at least one item.")
    return Recipe(
        id=RecipeId(int(r_data['id'])),
        result_item_id=ItemId(int(r_data['result_item_id'])),
        name=r_data['name'],
        result_amount=result_amount,
        description=r_data.get('description', ""),
        required_civ_level=int(r_data.get('required_civ_level', 1)),
        category=r_data.get('category', "general"),
    )


class RecipeRegistry:
    """
    Recipes are stored as three tables: recipe rows, ingredient rows (consumed)
    and requirement rows (held, e.g. a workbench). Rows that reference a
    missing recipe are dropped.
    """

    def __init__(self):
        self._recipes: Dict[RecipeId, Recipe] = {}

    def load_from_yaml(self, path: Path) -> int:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None or not isinstance(data, dict):
            raise ValueError(f"YAML file '{path}' is empty or malformed.")

        for r_data in data.get('recipes', []):
            try:
                recipe = _parse_recipe(r_data)
            except (CatalogSchemaError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping recipe row %r in %s: %s", r_data, path, e)
                continue
            self._recipes[recipe.id] = recipe

        self._load_component_rows(data.get('ingredients', []), path, "materials")
        self._load_component_rows(data.get('requirements', []), path, "requirements")
        return len(self._recipes)

    def _load_component_rows(self, rows: List[Dict[str, Any]], path: Path, target: str):
        for row in rows:
            try:
                recipe_id = RecipeId(int(row['recipe_id']))
                item_id = ItemId(int(row['item_id']))
                amount = int(row.get('amount', 1))
                if amount <= 0:
                    raise CatalogSchemaError(f"Amount must be positive, got {amount}.")
            except (CatalogSchemaError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping %s row %r in %s: %s", target, row, path, e)
                continue
            recipe = self._recipes.get(recipe_id)
            if recipe is None:
                logger.warning("Skipping %s row %r in %s: unknown recipe %s", target, row, path, recipe_id)
                continue
            components = getattr(recipe, target)
            components[item_id] = components.get(item_id, 0) + amount

    def apply_to(self, items: ItemCatalog):
        """Copies recipe data onto the result items so crafting only needs the item catalog."""
        for recipe in self.all_recipes():
            item = items.find(recipe.result_item_id)
            if item is None:
                logger.warning("Recipe %s produces unknown item %s; ignored.", recipe.id, recipe.result_item_id)
                continue
            if not recipe.materials:
                logger.warning("Recipe %s has no ingredients; ignored.", recipe.id)
                continue
            item.craftable = True
            item.materials = dict(recipe.materials)
            item.requirements = dict(recipe.requirements)
            item.result_amount = recipe.result_amount
            item.required_civ_level = recipe.required_civ_level

    def add(self, recipe: Recipe):
        self._recipes[recipe.id] = recipe

    def get(self, recipe_id: RecipeId) -> Recipe:
        if recipe_id not in self._recipes:
            raise ValueError(f"Recipe with ID '{recipe_id}' not found.")
        return self._recipes[recipe_id]

    def all_recipes(self) -> List[Recipe]:
        return sorted(self._recipes.values(), key=lambda r: r.id)

    def available_recipes(self, level: int) -> List[Recipe]:
        return [r for r in self.all_recipes() if r.required_civ_level <= level]

    def unlocked_at(self, level: int) -> List[Recipe]:
        """Recipes that become available exactly at `level` (used for level-up messages)."""
        return [r for r in self.all_recipes() if r.required_civ_level == level]
