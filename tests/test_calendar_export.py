"""Tests for the iCalendar export of a weekly plan."""

from datetime import datetime, timezone

from domain.enums import MealType
from services.calendar_export import PRODID, build_ics, plan_events
from test_fixtures import make_plan, make_slot

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def _plan():
    plan = make_plan()
    plan.days[0].bucket(MealType.BREAKFAST).append(make_slot("Pancakes", servings=2, prep_time=10, cooking_time=15))
    plan.days[0].bucket(MealType.BREAKFAST).append(make_slot("Fruit Salad"))
    plan.days[4].bucket(MealType.DINNER).append(make_slot("Fish, Chips; Peas", notes="Fry day"))
    return plan


def test_events_use_default_meal_times_and_stagger():
    events = plan_events(_plan())
    assert len(events) == 3
    pancakes, fruit, fish = events
    assert pancakes.start == datetime(2024, 3, 11, 8, 0)
    assert pancakes.end == datetime(2024, 3, 11, 9, 0)
    assert fruit.start == datetime(2024, 3, 11, 8, 15)
    assert fish.start == datetime(2024, 3, 15, 18, 0)
    assert fish.end == datetime(2024, 3, 15, 19, 30)
    assert pancakes.summary == "Breakfast: Pancakes"
    assert "Servings: 2" in pancakes.description
    assert "Prep time: 10 minutes" in pancakes.description
    assert pancakes.description.endswith("Created with SmartPlates Meal Planning")


def test_ics_document_structure():
    ics = build_ics(_plan(), now=NOW)
    lines = ics.split("\r\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert f"PRODID:{PRODID}" in lines
    assert lines[-2] == "END:VCALENDAR" and lines[-1] == ""
    assert lines.count("BEGIN:VEVENT") == 3
    assert "DTSTART:20240311T080000" in lines
    assert "DTSTAMP:20240310T120000Z" in lines
    assert "SUMMARY:Dinner: Fish\\, Chips\\; Peas" in lines


def test_long_lines_are_folded():
    plan = make_plan()
    plan.days[0].bucket(MealType.LUNCH).append(make_slot("Soup", notes="x" * 200))
    for line in build_ics(plan, now=NOW).split("\r\n"):
        assert len(line.encode("utf-8")) <= 75


def test_empty_plan_has_no_events():
    ics = build_ics(make_plan(), now=NOW)
    assert "BEGIN:VEVENT" not in ics
    assert "X-WR-CALNAME:Week of 3/11/2024" in ics


def test_carriage_returns_in_notes_are_escaped():
    plan = make_plan()
    plan.days[0].bucket(MealType.DINNER).append(make_slot("Stew", notes="Brown the meat\r\nAdd stock\rSimmer"))
    ics = build_ics(plan, now=NOW)
    for line in ics.split("\r\n"):
        assert "\r" not in line and "\n" not in line
    unfolded = ics.replace("\r\n ", "")
    assert "Brown the meat\\nAdd stock\\nSimmer" in unfolded
