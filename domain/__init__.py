"""
Domain layer - Meal planning entities, schemas, mappers and enums.
"""

from domain import enums, mappers, models, schemas, week

__all__ = ["enums", "mappers", "models", "schemas", "week"]
