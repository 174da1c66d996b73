"""Services package - Planning core and business logic"""

from services.plan_store import PlanStore
from services.view_projector import (
    Cursor,
    MonthCell,
    MonthView,
    PlanStats,
    TodayView,
    ViewProjector,
    WeekView,
)
from services.move_engine import MoveEngine, SlotLocation
from services.persistence_bridge import PersistenceBridge
from services.shopping_service import ShoppingItem, ShoppingListService
from services.calendar_export import build_ics
from services.meal_plan_service import MealPlanService
from services.planning_session import MealPlanningSession

__all__ = [
    "PlanStore",
    "Cursor",
    "MonthCell",
    "MonthView",
    "PlanStats",
    "TodayView",
    "ViewProjector",
    "WeekView",
    "MoveEngine",
    "SlotLocation",
    "PersistenceBridge",
    "ShoppingItem",
    "ShoppingListService",
    "build_ics",
    "MealPlanService",
    "MealPlanningSession",
]
