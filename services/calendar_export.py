"""
iCalendar (.ics) export of a weekly meal plan.

One VEVENT per planned slot at a default time for its meal type. Additional
slots in the same bucket start 15 minutes later each. Times are written as
floating local times so the calendar shows them at the planned hour in any
timezone.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import Dict, List, NamedTuple, Optional

from domain.enums import MealType
from domain.models import MealPlan, MealSlot

PRODID = "-//SmartPlates//Meal Planning//EN"
STAGGER_MINUTES = 15


class MealTime(NamedTuple):
    start: time
    duration_min: int


MEAL_TIMES: Dict[MealType, MealTime] = {
    MealType.BREAKFAST: MealTime(time(8, 0), 60),
    MealType.LUNCH: MealTime(time(12, 30), 60),
    MealType.DINNER: MealTime(time(18, 0), 90),
    MealType.SNACKS: MealTime(time(15, 0), 30),
}


class CalendarEvent(NamedTuple):
    uid: str
    start: datetime
    end: datetime
    summary: str
    description: str


def _escape(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def _fold(line: str) -> List[str]:
    """Split a content line into 75-octet chunks (RFC 5545 section 3.1)."""
    out: List[str] = []
    current = ""
    for char in line:
        limit = 75 if not out else 74
        if len((current + char).encode("utf-8")) > limit:
            out.append(current)
            current = char
        else:
            current += char
    out.append(current)
    return [out[0]] + [" " + part for part in out[1:]]


def _stamp(value: datetime) -> str:
    return value.strftime("%Y%m%dT%H%M%S")


def _describe(slot: MealSlot) -> str:
    lines = []
    if slot.recipe_name:
        lines.append(f"Recipe: {slot.recipe_name}")
    if slot.servings:
        lines.append(f"Servings: {slot.servings}")
    if slot.cooking_time:
        lines.append(f"Cooking time: {slot.cooking_time} minutes")
    if slot.prep_time:
        lines.append(f"Prep time: {slot.prep_time} minutes")
    if slot.notes:
        lines.append(f"Notes: {slot.notes}")
    lines.append("Created with SmartPlates Meal Planning")
    return "\n".join(lines)


def plan_events(plan: MealPlan) -> List[CalendarEvent]:
    events: List[CalendarEvent] = []
    for day in plan.days:
        for meal_type, bucket in day.buckets():
            slot_time = MEAL_TIMES[meal_type]
            for index, slot in enumerate(bucket):
                start = datetime.combine(day.date, slot_time.start) + timedelta(
                    minutes=STAGGER_MINUTES * index
                )
                events.append(
                    CalendarEvent(
                        uid=f"meal-{day.date.isoformat()}-{meal_type.value}-{index}@smartplates.app",
                        start=start,
                        end=start + timedelta(minutes=slot_time.duration_min),
                        summary=f"{meal_type.value.capitalize()}: {slot.recipe_name or 'Meal'}",
                        description=_describe(slot),
                    )
                )
    return events


def build_ics(plan: MealPlan, now: Optional[datetime] = None) -> str:
    """Render a plan as an iCalendar document with CRLF line endings."""
    dtstamp = _stamp((now or datetime.now(timezone.utc)).astimezone(timezone.utc)) + "Z"
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{_escape(plan.title)}",
    ]
    for event in plan_events(plan):
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{event.uid}",
                f"DTSTAMP:{dtstamp}",
                f"DTSTART:{_stamp(event.start)}",
                f"DTEND:{_stamp(event.end)}",
                f"SUMMARY:{_escape(event.summary)}",
                f"DESCRIPTION:{_escape(event.description)}",
                "STATUS:CONFIRMED",
                "TRANSP:OPAQUE",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    folded = [part for line in lines for part in _fold(line)]
    return "\r\n".join(folded) + "\r\n"
