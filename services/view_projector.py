"""
Projection of the plan store into Today / Week / Month view models.

Projections are read-only with one exception: the Week view lazily creates the
plan for the week it shows, through ``PlanStore.get_or_create``. Navigation
only moves the cursor and never touches the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Tuple, Union

from domain.enums import ViewMode
from domain.models import DayMeals, MealPlan
from domain.week import (
    DateLike,
    add_months,
    format_day,
    format_month,
    format_week_range,
    month_grid_start,
    to_local_date,
    week_start,
)
from services.plan_store import PlanStore

logger = logging.getLogger("smartplates.views")

MONTH_GRID_CELLS = 42


@dataclass(frozen=True)
class PlanStats:
    total_meals: int
    planned_days: int
    total_days: int

    @classmethod
    def from_days(cls, days: Iterable[DayMeals]) -> "PlanStats":
        total = planned = count = 0
        for day in days:
            meals = day.meal_count()
            total += meals
            planned += 1 if meals else 0
            count += 1
        return cls(total_meals=total, planned_days=planned, total_days=count)


@dataclass(frozen=True)
class Cursor:
    """Currently viewed date plus the active view mode."""

    date: date
    view_mode: ViewMode = ViewMode.WEEK

    def _shift(self, direction: int) -> "Cursor":
        if self.view_mode == ViewMode.TODAY:
            return replace(self, date=self.date + timedelta(days=direction))
        if self.view_mode == ViewMode.WEEK:
            return replace(self, date=self.date + timedelta(days=7 * direction))
        return replace(self, date=add_months(self.date, direction))

    def previous(self) -> "Cursor":
        return self._shift(-1)

    def next(self) -> "Cursor":
        return self._shift(1)

    def today(self, today: Optional[date] = None) -> "Cursor":
        return replace(self, date=today or date.today())

    def with_mode(self, view_mode: ViewMode) -> "Cursor":
        return replace(self, view_mode=ViewMode(view_mode))


@dataclass(frozen=True)
class TodayView:
    date: date
    label: str
    day: DayMeals
    plan: Optional[MealPlan]

    @property
    def stats(self) -> PlanStats:
        return PlanStats.from_days([self.day])


@dataclass(frozen=True)
class WeekView:
    week_key: str
    label: str
    plan: MealPlan
    today: date

    @property
    def days(self) -> Tuple[DayMeals, ...]:
        return tuple(self.plan.days)

    @property
    def stats(self) -> PlanStats:
        return PlanStats.from_days(self.plan.days)


@dataclass(frozen=True)
class MonthCell:
    date: date
    is_today: bool
    is_current_month: bool
    day: DayMeals

    @property
    def has_meals(self) -> bool:
        return self.day.has_meals


@dataclass(frozen=True)
class MonthView:
    year: int
    month: int
    label: str
    cells: Tuple[MonthCell, ...]

    @property
    def weeks(self) -> Tuple[Tuple[MonthCell, ...], ...]:
        return tuple(self.cells[i:i + 7] for i in range(0, len(self.cells), 7))

    @property
    def stats(self) -> PlanStats:
        return PlanStats.from_days(c.day for c in self.cells if c.is_current_month)


ViewModel = Union[TodayView, WeekView, MonthView]


class ViewProjector:
    """Builds view models from a PlanStore and a cursor date."""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today

    def project(self, view_mode: ViewMode, cursor_date: DateLike, store: PlanStore) -> ViewModel:
        mode = ViewMode(view_mode)
        if mode == ViewMode.TODAY:
            return self.today_view(cursor_date, store)
        if mode == ViewMode.WEEK:
            return self.week_view(cursor_date, store)
        return self.month_view(cursor_date, store)

    def project_cursor(self, cursor: Cursor, store: PlanStore) -> ViewModel:
        return self.project(cursor.view_mode, cursor.date, store)

    @staticmethod
    def day_for(when: DateLike, store: PlanStore) -> Tuple[DayMeals, Optional[MealPlan]]:
        """Stored day for a date, or a detached empty day when no plan owns it."""
        d = to_local_date(when)
        plan = store.get(d)
        if plan is not None:
            day = plan.day_for(d)
            if day is not None:
                return day, plan
        return DayMeals(date=d), None

    def today_view(self, cursor_date: DateLike, store: PlanStore) -> TodayView:
        d = to_local_date(cursor_date)
        day, plan = self.day_for(d, store)
        return TodayView(date=d, label=format_day(d), day=day, plan=plan)

    def week_view(self, cursor_date: DateLike, store: PlanStore) -> WeekView:
        plan = store.get_or_create(week_start(cursor_date))
        return WeekView(
            week_key=plan.week_key,
            label=format_week_range(plan.week_start_date),
            plan=plan,
            today=self._today(),
        )

    def month_view(self, cursor_date: DateLike, store: PlanStore) -> MonthView:
        anchor = to_local_date(cursor_date)
        today = self._today()
        start = month_grid_start(anchor)
        cells = []
        for offset in range(MONTH_GRID_CELLS):
            d = start + timedelta(days=offset)
            day, _ = self.day_for(d, store)
            cells.append(
                MonthCell(
                    date=d,
                    is_today=d == today,
                    is_current_month=d.month == anchor.month and d.year == anchor.year,
                    day=day,
                )
            )
        return MonthView(
            year=anchor.year,
            month=anchor.month,
            label=format_month(anchor),
            cells=tuple(cells),
        )

    # ---------- stats ----------

    @staticmethod
    def plan_stats(plan: MealPlan) -> PlanStats:
        return PlanStats.from_days(plan.days)

    @staticmethod
    def week_stats(cursor_date: DateLike, store: PlanStore) -> PlanStats:
        """Stats of the plan owning ``cursor_date``; all zero if none is loaded."""
        plan = store.get(cursor_date)
        if plan is None:
            return PlanStats(total_meals=0, planned_days=0, total_days=7)
        return PlanStats.from_days(plan.days)

    @staticmethod
    def all_plans_stats(store: PlanStore) -> PlanStats:
        return PlanStats.from_days(day for plan in store for day in plan.days)
