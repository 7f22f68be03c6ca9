"""
Merge fields for client event forms

A form field can pull its initial value from event data (`prePopulateFrom`)
and write the client's answer back (`saveResponseTo`). Both reference a
merge field key of the form "<table>.<column>".
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

logger = logging.getLogger(__name__)

DISPLAY_ONLY_TYPES = {"section", "paragraph"}
DATE_VALUE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_VALUE = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


@dataclass(frozen=True)
class MergeField:
    key: str
    label: str
    type: str = "text"  # text, textarea, number, date, time, email

    @property
    def table(self) -> str:
        return self.key.split(".", 1)[0]

    @property
    def column(self) -> str:
        return self.key.split(".", 1)[1]


MERGE_FIELD_CATEGORIES: list[tuple[str, str, list[MergeField]]] = [
    (
        "event_details",
        "Event Details",
        [
            MergeField("events.id", "Event ID"),
            MergeField("events.title", "Event Title"),
            MergeField("events.description", "Event Description", "textarea"),
            MergeField("events.guest_count", "Guest Count", "number"),
            MergeField("events.dress_code", "Dress Code"),
            MergeField("events.event_notes", "Event Notes", "textarea"),
        ],
    ),
    (
        "event_dates_times",
        "Event Dates & Times",
        [
            MergeField("event_dates.event_date", "Event Date", "date"),
            MergeField("event_dates.setup_time", "Setup Time", "time"),
            MergeField("event_dates.start_time", "Start Time", "time"),
            MergeField("event_dates.end_time", "End Time", "time"),
            MergeField("event_dates.notes", "Date Notes", "textarea"),
            MergeField("events.load_in_notes", "Load-in Notes", "textarea"),
            MergeField("events.parking_notes", "Parking Notes", "textarea"),
        ],
    ),
    (
        "venue_location",
        "Venue / Location",
        [
            MergeField("locations.name", "Venue Name"),
            MergeField("locations.address_line1", "Venue Address Line 1"),
            MergeField("locations.address_line2", "Venue Address Line 2"),
            MergeField("locations.city", "Venue City"),
            MergeField("locations.state", "Venue State"),
            MergeField("locations.postal_code", "Venue Postal Code"),
            MergeField("locations.country", "Venue Country"),
            MergeField("locations.contact_name", "Venue Contact Name"),
            MergeField("locations.contact_phone", "Venue Contact Phone"),
            MergeField("locations.contact_email", "Venue Contact Email", "email"),
            MergeField("locations.notes", "Venue Notes", "textarea"),
        ],
    ),
    (
        "client_account",
        "Client Info (Account)",
        [
            MergeField("accounts.name", "Account/Company Name"),
            MergeField("accounts.phone", "Account Phone"),
            MergeField("accounts.email", "Account Email", "email"),
            MergeField("accounts.website", "Account Website"),
            MergeField("accounts.billing_address_line1", "Billing Address Line 1"),
            MergeField("accounts.billing_address_line2", "Billing Address Line 2"),
            MergeField("accounts.billing_city", "Billing City"),
            MergeField("accounts.billing_state", "Billing State"),
            MergeField("accounts.billing_zip_code", "Billing Zip Code"),
        ],
    ),
    (
        "primary_contact",
        "Primary Contact",
        [
            MergeField("contacts.first_name", "Contact First Name"),
            MergeField("contacts.last_name", "Contact Last Name"),
            MergeField("contacts.email", "Contact Email", "email"),
            MergeField("contacts.phone", "Contact Phone"),
            MergeField("contacts.job_title", "Contact Job Title"),
            MergeField("contacts.address_line1", "Contact Address Line 1"),
            MergeField("contacts.address_line2", "Contact Address Line 2"),
            MergeField("contacts.city", "Contact City"),
            MergeField("contacts.state", "Contact State"),
            MergeField("contacts.zip_code", "Contact Zip Code"),
        ],
    ),
    (
        "event_planner",
        "Event Planner",
        [
            MergeField("events.event_planner_name", "Event Planner Name"),
            MergeField("events.event_planner_phone", "Event Planner Phone"),
            MergeField("events.event_planner_email", "Event Planner Email", "email"),
        ],
    ),
    (
        "onsite_contact",
        "Onsite Contact",
        [
            MergeField("events.onsite_contact_name", "Onsite Contact Name"),
            MergeField("events.onsite_contact_phone", "Onsite Contact Phone"),
            MergeField("events.onsite_contact_email", "Onsite Contact Email", "email"),
        ],
    ),
]

MERGE_FIELDS: dict[str, MergeField] = {
    field.key: field for _, _, fields in MERGE_FIELD_CATEGORIES for field in fields
}


def get_merge_field(key: Optional[str]) -> Optional[MergeField]:
    return MERGE_FIELDS.get(key) if key else None


def merge_field_catalog() -> list[dict]:
    return [
        {
            "id": category_id,
            "label": label,
            "fields": [
                {"key": f.key, "label": f.label, "type": f.type, "table": f.table, "column": f.column}
                for f in fields
            ],
        }
        for category_id, label, fields in MERGE_FIELD_CATEGORIES
    ]


def format_prefill_value(value: Any) -> Optional[str]:
    """Render a stored column value as the string a form input expects"""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def convert_response_value(value: Any, field_type: str) -> Any:
    """
    Convert a submitted answer to the column's type.
    Multiselect answers are joined with ", ". Returns None when the
    answer is blank or does not parse for a number, date or time field.
    """
    if value is None:
        return None
    if isinstance(value, list):
        joined = ", ".join(str(v) for v in value if v not in (None, ""))
        return joined or None

    text = str(value).strip()
    if not text:
        return None

    if field_type == "number":
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    if field_type == "date":
        if not DATE_VALUE.match(text):
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    if field_type == "time":
        return text if TIME_VALUE.match(text) else None
    return text


def group_responses_by_table(fields: list[dict], responses: dict) -> dict[str, dict[str, Any]]:
    """Map each table to the column updates the submitted answers ask for"""
    updates: dict[str, dict[str, Any]] = {}
    for field in fields or []:
        target = field.get("saveResponseTo")
        if not target or field.get("type") in DISPLAY_ONLY_TYPES:
            continue
        merge_field = get_merge_field(target)
        if not merge_field:
            logger.warning(f"⚠️ Unknown merge field '{target}' for save-back")
            continue
        if merge_field.column == "id":
            continue
        raw = responses.get(field.get("id"))
        if raw is None or raw == "" or raw == []:
            continue
        value = convert_response_value(raw, merge_field.type)
        if value is None:
            continue
        updates.setdefault(merge_field.table, {})[merge_field.column] = value
    return updates
