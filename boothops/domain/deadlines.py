"""
Deadline arithmetic shared by design items, tasks and events.

Everything here is a pure function of dates and day counts so the
dashboards can be checked without a database.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

DEFAULT_DUE_DAYS = 21
DEFAULT_URGENT_DAYS = 14
DEFAULT_MISSED_DAYS = 13

COMPLETED_STATUSES = {"completed", "approved", "cancelled"}

PHYSICAL = "physical"


@dataclass(frozen=True)
class DeadlineThresholds:
    """Day offsets before the event. None means the default applies; 0 is a real value."""

    due: Optional[int] = None
    urgent: Optional[int] = None
    missed: Optional[int] = None

    @property
    def due_days(self) -> int:
        return DEFAULT_DUE_DAYS if self.due is None else self.due

    @property
    def urgent_days(self) -> int:
        return DEFAULT_URGENT_DAYS if self.urgent is None else self.urgent

    @property
    def missed_days(self) -> int:
        return DEFAULT_MISSED_DAYS if self.missed is None else self.missed


def days_until(target: Optional[date], today: date) -> Optional[int]:
    if target is None:
        return None
    return (target - today).days


def classify_deadline(
    days_until_event: Optional[int],
    status: Optional[str],
    thresholds: DeadlineThresholds = DeadlineThresholds(),
) -> str:
    """
    Bucket a deliverable by how close its event is.

    Returns one of completed, missed_deadline, urgent, due_soon, on_time,
    or pending when there is no date to measure against.
    """
    if status in COMPLETED_STATUSES:
        return "completed"
    if days_until_event is None:
        return "pending"
    if days_until_event <= thresholds.missed_days:
        return "missed_deadline"
    if days_until_event <= thresholds.urgent_days:
        return "urgent"
    if days_until_event <= thresholds.due_days:
        return "due_soon"
    return "on_time"


def design_deadlines(
    event_date: date,
    item_type: Optional[str],
    design_days: int,
    production_days: int = 0,
    shipping_days: int = 0,
) -> tuple[date, date]:
    """
    Return (design_start_date, design_deadline) for an item due at `event_date`.

    Physical items must leave production and shipping time after design ends.
    """
    deadline = event_date
    if item_type == PHYSICAL:
        deadline = event_date - timedelta(days=(shipping_days or 0) + (production_days or 0))
    start = deadline - timedelta(days=design_days or 0)
    return start, deadline


def task_priority_for_deadline(days_until_deadline: int) -> str:
    if days_until_deadline <= 3:
        return "urgent"
    if days_until_deadline <= 7:
        return "high"
    return "medium"


def task_urgency(due_date: Optional[date], today: date) -> str:
    """Urgency label shown next to a task on the dashboard"""
    if due_date is None:
        return "no_due_date"
    days = (due_date - today).days
    if days < 0:
        return "overdue"
    if days == 0:
        return "today"
    if days <= 7:
        return "this_week"
    if days <= 30:
        return "this_month"
    return "future"


def event_priority_level(days_until_event: Optional[int]) -> str:
    if days_until_event is None or days_until_event < 0:
        return "none"
    if days_until_event <= 2:
        return "critical"
    if days_until_event <= 7:
        return "high"
    if days_until_event <= 14:
        return "medium"
    if days_until_event <= 30:
        return "low"
    return "none"
