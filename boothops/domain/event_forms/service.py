"""Event form service - Client questionnaires with merge-field prefill and save-back"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Account, Contact, Location
from ...models_event import Event, EventDate, EventForm, EventFormTemplate
from ...security_utils import generate_public_id
from ...utils.dates import utcnow
from ...utils.sanitization import sanitize_string
from ..settings.repository import SettingsRepository
from .merge_fields import format_prefill_value, get_merge_field, group_responses_by_table
from .schemas import EventFormCreate, EventFormUpdate

logger = logging.getLogger(__name__)

MIN_PUBLIC_ID_LENGTH = 8
FORM_STATUSES = {"draft", "sent", "viewed", "completed"}
PLAIN_TEXT_TYPES = {"text", "textarea", "email"}


class EventFormService:
    """Service layer for client event forms"""

    def __init__(self, db: Session, tenant_id: str, user_id: Optional[str] = None):
        self.db = db
        self.tenant_id = tenant_id
        self.user_id = user_id

    # ------------------------------------------------------------------
    # Staff side
    # ------------------------------------------------------------------

    def list_forms(self, event: Event) -> list[EventForm]:
        return (
            self.db.query(EventForm)
            .filter(EventForm.tenant_id == self.tenant_id, EventForm.event_id == event.id)
            .order_by(EventForm.created_at)
            .all()
        )

    def get_form(self, event: Event, form_id: str) -> EventForm:
        form = (
            self.db.query(EventForm)
            .filter(EventForm.id == form_id, EventForm.tenant_id == self.tenant_id, EventForm.event_id == event.id)
            .first()
        )
        if not form:
            raise HTTPException(status_code=404, detail="Form not found")
        return form

    def create_form(self, event: Event, data: EventFormCreate) -> EventForm:
        name, fields = data.name, data.fields
        if data.template_id:
            template = (
                self.db.query(EventFormTemplate)
                .filter(EventFormTemplate.id == data.template_id, EventFormTemplate.tenant_id == self.tenant_id)
                .first()
            )
            if not template:
                raise HTTPException(status_code=404, detail="Template not found")
            name = name or template.name
            fields = fields or template.fields or []

        name = sanitize_string(name)
        if not name:
            raise HTTPException(status_code=400, detail="Form name is required")

        form = EventForm(
            tenant_id=self.tenant_id,
            event_id=event.id,
            template_id=data.template_id,
            public_id=generate_public_id(),
            name=name,
            fields=fields,
            status="draft",
            created_by=self.user_id,
        )
        self.db.add(form)
        self.db.commit()
        self.db.refresh(form)
        logger.info(f"📝 Created event form {form.id} for event {event.id}")
        return form

    def update_form(self, event: Event, form_id: str, data: EventFormUpdate) -> EventForm:
        form = self.get_form(event, form_id)
        updates = data.model_dump(exclude_unset=True)

        if "name" in updates:
            updates["name"] = sanitize_string(updates["name"])
            if not updates["name"]:
                raise HTTPException(status_code=400, detail="Form name is required")
        if "status" in updates:
            if updates["status"] not in FORM_STATUSES:
                raise HTTPException(status_code=400, detail=f"Invalid status: {updates['status']}")
            if updates["status"] == "sent" and not form.sent_at:
                form.sent_at = utcnow()
        if updates.get("fields") is None:
            updates.pop("fields", None)

        for key, value in updates.items():
            setattr(form, key, value)
        self.db.commit()
        self.db.refresh(form)
        return form

    def delete_form(self, event: Event, form_id: str) -> dict:
        form = self.get_form(event, form_id)
        self.db.delete(form)
        self.db.commit()
        logger.info(f"🗑️ Deleted event form {form_id}")
        return {"success": True}

    # ------------------------------------------------------------------
    # Merge fields
    # ------------------------------------------------------------------

    def _first_event_date(self, event: Event) -> Optional[EventDate]:
        return (
            self.db.query(EventDate)
            .filter(EventDate.tenant_id == self.tenant_id, EventDate.event_id == event.id)
            .order_by(EventDate.event_date)
            .first()
        )

    def _linked_rows(self, event: Event) -> dict[str, Any]:
        """The rows each merge field table resolves to for this event"""
        first_date = self._first_event_date(event)
        location_id = (first_date.location_id if first_date else None) or event.location_id

        def by_id(model, row_id):
            if not row_id:
                return None
            return self.db.query(model).filter(model.id == row_id, model.tenant_id == self.tenant_id).first()

        return {
            "events": event,
            "event_dates": first_date,
            "accounts": by_id(Account, event.account_id),
            "contacts": by_id(Contact, event.primary_contact_id),
            "locations": by_id(Location, location_id),
        }

    def resolve_prefill(self, event: Event, fields: list[dict]) -> dict[str, str]:
        """Initial answers for fields mapped with prePopulateFrom"""
        mapped = [(f, get_merge_field(f.get("prePopulateFrom"))) for f in fields or [] if f.get("prePopulateFrom")]
        if not mapped:
            return {}

        rows = self._linked_rows(event)
        prefilled = {}
        for field, merge_field in mapped:
            if not merge_field:
                continue
            row = rows.get(merge_field.table)
            value = format_prefill_value(getattr(row, merge_field.column, None)) if row else None
            if value is not None:
                prefilled[field["id"]] = value
        return prefilled

    def save_responses_to_event(self, event: Event, fields: list[dict], responses: dict) -> dict:
        """
        Write answers for fields mapped with saveResponseTo back to the
        event's records. Tables with no linked row are reported in `errors`.
        """
        result = {"success": True, "updatedTables": [], "errors": []}
        table_updates = group_responses_by_table(fields, responses)
        if not table_updates:
            logger.debug("No save-back mappings found in form fields")
            return result

        rows = self._linked_rows(event)
        missing = {
            "accounts": "No account linked to event",
            "contacts": "No primary contact linked to event",
            "locations": "No location linked to event",
            "event_dates": "No event dates found",
        }
        for table, updates in table_updates.items():
            row = rows.get(table)
            if row is None:
                logger.warning(f"⚠️ Cannot save form answers to {table} for event {event.id}")
                result["errors"].append(missing.get(table, f"Unsupported table: {table}"))
                continue
            for column, value in updates.items():
                merge_field = get_merge_field(f"{table}.{column}")
                if isinstance(value, str) and merge_field.type in PLAIN_TEXT_TYPES:
                    value = sanitize_string(value)
                setattr(row, column, value)
            result["updatedTables"].append(table)

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error saving form answers to event {event.id}: {e}")
            return {"success": False, "updatedTables": [], "errors": [str(e)]}

        logger.info(f"✅ Saved form answers to {', '.join(result['updatedTables']) or 'nothing'} for event {event.id}")
        return result

    # ------------------------------------------------------------------
    # Public side
    # ------------------------------------------------------------------

    def _get_public_form(self, public_id: str) -> EventForm:
        if not public_id or len(public_id) < MIN_PUBLIC_ID_LENGTH:
            raise HTTPException(status_code=400, detail="Invalid form ID")
        form = (
            self.db.query(EventForm)
            .filter(EventForm.public_id == public_id, EventForm.tenant_id == self.tenant_id)
            .first()
        )
        if not form:
            raise HTTPException(status_code=404, detail="Form not found")
        if form.status == "draft":
            raise HTTPException(status_code=404, detail="Form not available")
        return form

    def _event_dates(self, event: Event) -> list[dict]:
        dates = (
            self.db.query(EventDate)
            .filter(EventDate.tenant_id == self.tenant_id, EventDate.event_id == event.id)
            .order_by(EventDate.event_date)
            .all()
        )
        location_ids = {d.location_id for d in dates if d.location_id}
        names = (
            {
                loc.id: loc.name
                for loc in self.db.query(Location)
                .filter(Location.tenant_id == self.tenant_id, Location.id.in_(location_ids))
                .all()
            }
            if location_ids
            else {}
        )
        return [
            {
                "id": d.id,
                "event_date": d.event_date,
                "start_time": d.start_time,
                "end_time": d.end_time,
                "location_name": names.get(d.location_id),
            }
            for d in dates
        ]

    def view_public_form(self, public_id: str) -> dict:
        form = self._get_public_form(public_id)
        event = self.db.query(Event).filter(Event.id == form.event_id).first()
        event_dates = self._event_dates(event) if event else []
        is_multi_day = len(event_dates) > 1

        if not form.viewed_at and form.status == "sent":
            form.viewed_at = utcnow()
            form.status = "viewed"
            self.db.commit()
            self.db.refresh(form)

        prefilled: dict[str, str] = {}
        if event:
            try:
                prefilled = self.resolve_prefill(event, form.fields or [])
            except Exception as e:
                logger.error(f"❌ Error resolving prefill values for form {form.id}: {e}")

        return {
            "form": {
                "id": form.id,
                "name": form.name,
                "fields": form.fields or [],
                "status": form.status,
                "responses": form.responses,
                "completed_at": form.completed_at,
            },
            "event": {"title": event.title, "start_date": event.start_date} if event else None,
            "isMultiDay": is_multi_day,
            "eventDates": event_dates if is_multi_day else None,
            "tenant": {"logoUrl": SettingsRepository.get_value(self.db, self.tenant_id, "appearance.logoUrl")},
            "prefilled": prefilled,
        }

    def submit_public_form(self, public_id: str, responses: Optional[dict]) -> dict:
        if not public_id or len(public_id) < MIN_PUBLIC_ID_LENGTH:
            raise HTTPException(status_code=400, detail="Invalid form ID")
        if not isinstance(responses, dict):
            raise HTTPException(status_code=400, detail="Responses are required")

        form = self._get_public_form(public_id)
        if form.status == "completed":
            raise HTTPException(status_code=400, detail="Form already submitted")

        now = utcnow()
        form.responses = {**responses, "_submittedAt": now.isoformat()}
        form.status = "completed"
        form.completed_at = now
        self.db.commit()
        logger.info(f"✅ Event form {form.id} submitted")

        fields = form.fields or []
        if any(f.get("saveResponseTo") for f in fields):
            event = self.db.query(Event).filter(Event.id == form.event_id).first()
            if event:
                try:
                    result = self.save_responses_to_event(event, fields, responses)
                    if result["errors"]:
                        logger.warning(f"⚠️ Some form answers were not saved for form {form.id}: {result['errors']}")
                except Exception as e:
                    self.db.rollback()
                    logger.error(f"❌ Error applying save-back for form {form.id}: {e}")

        return {"success": True}
