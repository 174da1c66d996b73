"""
API dependencies for dependency injection
"""

from repositories import MealPlanRepository, RecipeRepository


def get_meal_plan_repository() -> MealPlanRepository:
    """
    Meal plan repository dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(repo: MealPlanRepository = Depends(get_meal_plan_repository)):
            ...
    """
    return MealPlanRepository()


def get_recipe_repository() -> RecipeRepository:
    return RecipeRepository()
