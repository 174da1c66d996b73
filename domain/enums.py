"""
Domain enums for SmartPlates.
Contains the enumeration types shared by the planning core and the API.
"""

import enum


class MealType(str, enum.Enum):
    """Meal-type buckets of a day, in display order"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"


class ViewMode(str, enum.Enum):
    """Calendar presentations of the planning page"""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class SaveStatus(str, enum.Enum):
    """Save badge states reported by the persistence bridge"""

    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class BatchOperation(str, enum.Enum):
    """Bulk operations accepted by the meal plan batch endpoint"""

    DELETE = "delete"
    COPY = "copy"
    MAKE_TEMPLATES = "makeTemplates"
