"""
Meal planning models.

Plain dataclasses held by the in-memory plan store. A MealPlan always carries
exactly seven DayMeals, Monday first, with ``days[i].date`` equal to
``week_start_date + i`` days.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, List, Optional, Set, Tuple

from domain.enums import MealType
from domain.week import DateLike, to_local_date, week_dates, week_start

MIN_SERVINGS = 1
MAX_SERVINGS = 20
DEFAULT_SERVINGS = 2


def clamp_servings(value: int) -> int:
    return max(MIN_SERVINGS, min(MAX_SERVINGS, int(value)))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MealSlot:
    """A single planned meal in one bucket of one day."""

    recipe_id: str = ""
    recipe_name: str = ""
    servings: int = DEFAULT_SERVINGS
    prep_time: int = 0  # minutes
    cooking_time: int = 0  # minutes
    image: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    tags: Set[str] = field(default_factory=set)
    notes: str = ""

    def __post_init__(self):
        self.servings = clamp_servings(self.servings)
        self.prep_time = max(0, int(self.prep_time))
        self.cooking_time = max(0, int(self.cooking_time))

    def copy(self) -> "MealSlot":
        """Shallow duplicate with its own ingredient and tag containers."""
        return replace(self, ingredients=list(self.ingredients), tags=set(self.tags))


@dataclass
class DayMeals:
    """The four meal-type buckets of one calendar date."""

    date: date
    breakfast: List[MealSlot] = field(default_factory=list)
    lunch: List[MealSlot] = field(default_factory=list)
    dinner: List[MealSlot] = field(default_factory=list)
    snacks: List[MealSlot] = field(default_factory=list)
    daily_notes: str = ""

    def bucket(self, meal_type) -> List[MealSlot]:
        return getattr(self, MealType(meal_type).value)

    def buckets(self) -> Iterator[Tuple[MealType, List[MealSlot]]]:
        for meal_type in MealType:
            yield meal_type, self.bucket(meal_type)

    def meal_count(self) -> int:
        return sum(len(slots) for _, slots in self.buckets())

    @property
    def has_meals(self) -> bool:
        return self.meal_count() > 0


@dataclass(eq=False)
class MealPlan:
    """Seven consecutive days of meals for one user, keyed by its Monday."""

    user_id: str
    week_start_date: date
    days: List[DayMeals]
    id: Optional[str] = None
    title: str = ""
    shopping_list_generated: bool = False
    is_template: bool = False
    total_calories: Optional[float] = None
    tags: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        self.week_start_date = week_start(self.week_start_date)
        if not self.title:
            self.title = default_title(self.week_start_date)
        self.check_days()

    @classmethod
    def empty(cls, user_id: str, when: DateLike) -> "MealPlan":
        start = week_start(when)
        return cls(
            user_id=user_id,
            week_start_date=start,
            days=[DayMeals(date=d) for d in week_dates(start)],
        )

    @property
    def week_end_date(self) -> date:
        return self.week_start_date + timedelta(days=6)

    @property
    def week_key(self) -> str:
        return self.week_start_date.isoformat()

    def check_days(self) -> None:
        """Raise ValueError unless the plan holds Monday..Sunday in order."""
        if len(self.days) != 7:
            raise ValueError(f"A meal plan needs 7 days, got {len(self.days)}")
        for i, day in enumerate(self.days):
            expected = self.week_start_date + timedelta(days=i)
            if day.date != expected:
                raise ValueError(f"Day {i} is dated {day.date}, expected {expected}")

    def day(self, index: int) -> DayMeals:
        return self.days[index]

    def day_for(self, when: DateLike) -> Optional[DayMeals]:
        d = to_local_date(when)
        offset = (d - self.week_start_date).days
        if 0 <= offset < 7:
            return self.days[offset]
        return None

    def meal_count(self) -> int:
        return sum(day.meal_count() for day in self.days)

    def slots(self) -> Iterator[Tuple[DayMeals, MealType, MealSlot]]:
        for day in self.days:
            for meal_type, bucket in day.buckets():
                for slot in bucket:
                    yield day, meal_type, slot

    def touch(self, now: Optional[datetime] = None) -> None:
        self.updated_at = now or utcnow()


def default_title(start: date) -> str:
    return f"Week of {start.month}/{start.day}/{start.year}"


def rebase_days(days: List[DayMeals], new_start: DateLike) -> List[DayMeals]:
    """Copy a week's days onto another week, re-dated by position."""
    targets = week_dates(new_start)
    return [
        DayMeals(
            date=target,
            breakfast=[s.copy() for s in day.breakfast],
            lunch=[s.copy() for s in day.lunch],
            dinner=[s.copy() for s in day.dinner],
            snacks=[s.copy() for s in day.snacks],
            daily_notes=day.daily_notes,
        )
        for day, target in zip(days, targets)
    ]
