"""Shopping list service"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from domain.models import MealPlan

logger = logging.getLogger("smartplates.shopping")


def _normalize(name: str) -> str:
    return " ".join((name or "").split()).lower()


@dataclass
class ShoppingItem:
    name: str
    count: int = 0
    recipes: List[str] = field(default_factory=list)
    checked: bool = False


class ShoppingListService:
    """Business logic for shopping list generation."""

    @staticmethod
    def build(plan: MealPlan) -> List[ShoppingItem]:
        """
        Aggregate the ingredients of every slot in a plan.

        Ingredients are matched case- and whitespace-insensitively; the first
        spelling seen is kept. Items are ordered by first appearance (Monday
        breakfast first), each with the number of slots that need it and the
        recipes it comes from.

        Args:
            plan: Meal plan to shop for

        Returns:
            List of ShoppingItem, empty when no slot lists ingredients
        """
        items: Dict[str, ShoppingItem] = {}
        for _, _, slot in plan.slots():
            for raw in slot.ingredients:
                key = _normalize(raw)
                if not key:
                    continue
                item = items.get(key)
                if item is None:
                    item = items[key] = ShoppingItem(name=raw.strip())
                item.count += 1
                recipe = slot.recipe_name or slot.recipe_id
                if recipe and recipe not in item.recipes:
                    item.recipes.append(recipe)

        logger.info("Built shopping list for week %s with %d items", plan.week_key, len(items))
        return list(items.values())

    @staticmethod
    def to_text(items: List[ShoppingItem], title: str = "Shopping List") -> str:
        """Plain-text checklist, one ingredient per line."""
        lines = [title, ""]
        for item in items:
            mark = "[X]" if item.checked else "[ ]"
            suffix = f" x{item.count}" if item.count > 1 else ""
            lines.append(f"{mark} {item.name}{suffix}")
        return "\n".join(lines) + "\n"
