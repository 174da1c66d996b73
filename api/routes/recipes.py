"""
Recipe routes - recipe lookup used when a meal is added to a plan.
"""

from fastapi import APIRouter, Depends, HTTPException
import logging

from api.dependencies import get_recipe_repository
from api.responses import success_response
from app.exceptions import NotFoundError
from domain.mappers import MealPlanMapper, normalize_slot
from repositories import RecipeRepository

router = APIRouter(prefix="/recipes", tags=["Recipes"])
logger = logging.getLogger("smartplates.api.recipes")


@router.get("/{recipe_id}")
def get_recipe(recipe_id: str, repo: RecipeRepository = Depends(get_recipe_repository)):
    """
    Get a single recipe by ID.

    The recipe is returned in meal-slot shape (recipeId, recipeName, servings,
    prepTime, cookingTime, image, ingredients, tags).
    """
    if not recipe_id or len(recipe_id) > 100:
        raise HTTPException(status_code=400, detail="Invalid recipe ID format")

    recipe = repo.get_by_id(recipe_id)
    if not recipe:
        raise NotFoundError(f"Recipe {recipe_id} not found")
    logger.debug("Serving recipe %s", recipe_id)
    return success_response(data=MealPlanMapper.slot_to_payload(normalize_slot(recipe)))
