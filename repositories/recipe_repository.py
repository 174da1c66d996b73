"""
Recipe Repository - Data access layer for recipe lookups (MongoDB integration)
"""

from typing import Any, Dict, Optional

from adapters import mongo_adapter
from repositories.base import BaseRepository


class RecipeRepository(BaseRepository):
    """
    Repository for recipe data access from MongoDB.
    Recipes are read-only here; they are looked up when a meal is added.
    """

    def __init__(self, collection=None):
        super().__init__(collection, resolve=mongo_adapter.recipes)

    def get_by_id(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        """Get recipe by ID from MongoDB

        Args:
            recipe_id: Recipe id

        Returns:
            Recipe document or None if not found
        """
        return self.find_one({"_id": str(recipe_id)})
