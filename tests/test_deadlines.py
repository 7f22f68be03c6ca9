from datetime import date

import pytest

from boothops.domain.deadlines import (
    DeadlineThresholds,
    classify_deadline,
    design_deadlines,
    event_priority_level,
    task_priority_for_deadline,
    task_urgency,
)


@pytest.mark.parametrize(
    "days,expected",
    [(30, "on_time"), (21, "due_soon"), (14, "urgent"), (13, "missed_deadline"), (-2, "missed_deadline")],
)
def test_classify_deadline_default_thresholds(days, expected):
    assert classify_deadline(days, "pending") == expected


def test_completed_status_wins_over_dates():
    assert classify_deadline(-10, "approved") == "completed"
    assert classify_deadline(None, "completed") == "completed"


def test_missing_date_is_pending():
    assert classify_deadline(None, "in_progress") == "pending"


def test_zero_threshold_is_honored():
    thresholds = DeadlineThresholds(due=10, urgent=5, missed=0)
    assert classify_deadline(1, "pending", thresholds) == "urgent"
    assert classify_deadline(0, "pending", thresholds) == "missed_deadline"


def test_design_deadlines_physical_items_leave_room_for_production_and_shipping():
    start, deadline = design_deadlines(date(2025, 6, 30), "physical", 7, production_days=5, shipping_days=3)
    assert deadline == date(2025, 6, 22)
    assert start == date(2025, 6, 15)


def test_design_deadlines_digital_items_ignore_production():
    start, deadline = design_deadlines(date(2025, 6, 30), "digital", 7, production_days=5, shipping_days=3)
    assert deadline == date(2025, 6, 30)
    assert start == date(2025, 6, 23)


def test_task_priority_for_deadline():
    assert task_priority_for_deadline(2) == "urgent"
    assert task_priority_for_deadline(7) == "high"
    assert task_priority_for_deadline(20) == "medium"


def test_task_urgency_buckets():
    today = date(2025, 3, 10)
    assert task_urgency(None, today) == "no_due_date"
    assert task_urgency(date(2025, 3, 9), today) == "overdue"
    assert task_urgency(today, today) == "today"
    assert task_urgency(date(2025, 3, 15), today) == "this_week"
    assert task_urgency(date(2025, 4, 1), today) == "this_month"
    assert task_urgency(date(2025, 6, 1), today) == "future"


def test_event_priority_level():
    assert event_priority_level(None) == "none"
    assert event_priority_level(-1) == "none"
    assert event_priority_level(1) == "critical"
    assert event_priority_level(5) == "high"
    assert event_priority_level(10) == "medium"
    assert event_priority_level(25) == "low"
    assert event_priority_level(45) == "none"
