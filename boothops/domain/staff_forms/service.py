"""Staff form service - Post-event recap forms for event staff"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL, MAX_UPLOAD_SIZE_BYTES
from ...email_service import send_staff_form_request
from ...models import Attachment, Location
from ...models_event import Event, EventDate, EventFormTemplate, EventStaffAssignment, StaffForm, Task
from ...security_utils import generate_public_id
from ...services import storage
from ...utils.dates import parse_time_of_day, utcnow
from ...utils.sanitization import sanitize_string
from ...utils.serialization import row_to_dict
from ..settings.repository import SettingsRepository
from .schemas import FormTemplateCreate, StaffFormSend

logger = logging.getLogger(__name__)

MIN_PUBLIC_ID_LENGTH = 8
ALLOWED_UPLOAD_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
    "application/pdf",
}


def recap_due_date(event: Event, event_date: Optional[EventDate], now: Optional[datetime] = None) -> datetime:
    """24h after the date's end time, else 24h after the event's end date, else 48h from now"""
    if event_date and event_date.event_date:
        end_time = parse_time_of_day(event_date.end_time)
        if end_time:
            ends = datetime.combine(event_date.event_date, end_time, tzinfo=timezone.utc)
            return ends + timedelta(hours=24)
    if event.end_date:
        return datetime.combine(event.end_date, datetime.min.time(), tzinfo=timezone.utc) + timedelta(hours=24)
    return (now or utcnow()) + timedelta(hours=48)


def date_label(value: Optional[date]) -> str:
    return f"{value.strftime('%b')} {value.day}" if value else ""


class StaffFormService:
    """Service layer for staff recap forms"""

    def __init__(
        self,
        db: Session,
        tenant_id: str,
        tenant_name: str = "",
        tenant_subdomain: str = "",
        user_id: Optional[str] = None,
    ):
        self.db = db
        self.tenant_id = tenant_id
        self.tenant_name = tenant_name
        self.tenant_subdomain = tenant_subdomain
        self.user_id = user_id

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def list_templates(self) -> list[EventFormTemplate]:
        return (
            self.db.query(EventFormTemplate)
            .filter(EventFormTemplate.tenant_id == self.tenant_id, EventFormTemplate.is_active.is_(True))
            .order_by(EventFormTemplate.name.asc())
            .all()
        )

    def create_template(self, data: FormTemplateCreate) -> EventFormTemplate:
        name = sanitize_string(data.name)
        if not name:
            raise HTTPException(status_code=400, detail="Template name is required")
        template = EventFormTemplate(
            tenant_id=self.tenant_id,
            name=name,
            description=sanitize_string(data.description),
            form_type=data.form_type,
            fields=data.fields,
        )
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        return template

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def form_url(self, public_id: str) -> str:
        return f"{FRONTEND_URL}/{self.tenant_subdomain}/staff-form/{public_id}"

    def _create_form(
        self,
        event: Event,
        template: EventFormTemplate,
        assignment: EventStaffAssignment,
        event_date: Optional[EventDate],
        per_date: bool,
    ) -> StaffForm:
        public_id = generate_public_id()
        url = self.form_url(public_id)
        label = date_label(event_date.event_date) if event_date else ""

        if per_date and event_date:
            title = f"Complete Post-Event Recap ({label})"
            description = f'Please complete your recap form for "{event.title}" - {label}.\n\nForm link: {url}'
        else:
            title = "Complete Post-Event Recap"
            description = f'Please complete your recap form for "{event.title}".\n\nForm link: {url}'

        task = Task(
            tenant_id=self.tenant_id,
            title=title,
            description=description,
            task_type="post_event",
            department="operations",
            entity_type="event",
            entity_id=event.id,
            assigned_to=assignment.user_id,
            assigned_at=utcnow(),
            created_by=self.user_id,
            due_date=recap_due_date(event, event_date),
            status="pending",
        )
        self.db.add(task)
        self.db.flush()

        form = StaffForm(
            tenant_id=self.tenant_id,
            public_id=public_id,
            event_id=event.id,
            event_date_id=event_date.id if (per_date and event_date) else None,
            staff_assignment_id=assignment.id,
            template_id=template.id,
            task_id=task.id,
            title=template.name,
            description=template.description,
            fields=template.fields,
            status="sent",
            sent_at=utcnow(),
        )
        self.db.add(form)
        self.db.commit()
        self.db.refresh(form)
        return form

    async def _email_form(self, form: StaffForm, assignment: EventStaffAssignment, event: Event, label: str) -> None:
        user = assignment.user
        if not user or not user.email:
            return
        company = SettingsRepository.get_value(self.db, self.tenant_id, "company.name", self.tenant_name)
        try:
            await send_staff_form_request(
                user.email, company, user.full_name or "there", event.title, label, self.form_url(form.public_id)
            )
        except Exception as e:
            logger.warning(f"⚠️ Failed to email staff form {form.id} to {user.email}: {e}")

    async def send_forms(self, data: StaffFormSend) -> dict:
        """
        Create a recap form and a linked post-event task for each staff assignment.

        Multi-day events get one form per assignment per date. Existing
        (assignment, date) combinations are skipped; failures are collected
        per item instead of aborting the batch.
        """
        if not data.event_id or not data.template_id or not data.staff_assignment_ids:
            raise HTTPException(
                status_code=400,
                detail="Missing required fields: event_id, template_id, staff_assignment_ids",
            )

        template = (
            self.db.query(EventFormTemplate)
            .filter(EventFormTemplate.id == data.template_id, EventFormTemplate.tenant_id == self.tenant_id)
            .first()
        )
        if not template:
            raise HTTPException(status_code=404, detail="Template not found")

        event = (
            self.db.query(Event)
            .filter(Event.id == data.event_id, Event.tenant_id == self.tenant_id)
            .first()
        )
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")

        dates_query = self.db.query(EventDate).filter(
            EventDate.tenant_id == self.tenant_id, EventDate.event_id == event.id
        )
        if data.event_date_ids:
            dates_query = dates_query.filter(EventDate.id.in_(data.event_date_ids))
        event_dates = dates_query.order_by(EventDate.event_date.asc()).all()
        is_multi_day = len(event_dates) > 1

        assignments = (
            self.db.query(EventStaffAssignment)
            .filter(
                EventStaffAssignment.tenant_id == self.tenant_id,
                EventStaffAssignment.event_id == event.id,
                EventStaffAssignment.id.in_(data.staff_assignment_ids),
            )
            .all()
        )

        existing = {
            (form.staff_assignment_id, form.event_date_id)
            for form in self.db.query(StaffForm).filter(
                StaffForm.tenant_id == self.tenant_id,
                StaffForm.event_id == event.id,
                StaffForm.staff_assignment_id.in_(data.staff_assignment_ids),
            )
        }

        created, errors, skipped = [], [], 0
        for assignment in assignments:
            targets = event_dates if is_multi_day else [event_dates[0] if event_dates else None]
            for event_date in targets:
                combo_date_id = event_date.id if is_multi_day else None
                if (assignment.id, combo_date_id) in existing:
                    skipped += 1
                    continue
                try:
                    form = self._create_form(event, template, assignment, event_date, per_date=is_multi_day)
                except Exception as e:
                    self.db.rollback()
                    logger.error(f"❌ Failed to create staff form for assignment {assignment.id}: {e}")
                    errors.append(
                        {"assignment_id": assignment.id, "event_date_id": combo_date_id, "error": str(e)}
                    )
                    continue
                created.append(
                    {
                        "id": form.id,
                        "public_id": form.public_id,
                        "task_id": form.task_id,
                        "event_date_id": form.event_date_id,
                    }
                )
                await self._email_form(
                    form, assignment, event, date_label(event_date.event_date) if event_date else ""
                )

        logger.info(
            f"📋 Staff forms sent for event {event.id}: created={len(created)} "
            f"errors={len(errors)} skipped={skipped} multi_day={is_multi_day}"
        )
        result = {
            "success": True,
            "created": len(created),
            "forms": created,
            "skipped": skipped,
            "isMultiDay": is_multi_day,
        }
        if errors:
            result["errors"] = errors
        return result

    def list_event_forms(self, event_id: str) -> list[dict]:
        forms = (
            self.db.query(StaffForm)
            .filter(StaffForm.tenant_id == self.tenant_id, StaffForm.event_id == event_id)
            .order_by(StaffForm.created_at.asc())
            .all()
        )
        return [row_to_dict(form) for form in forms]

    # ------------------------------------------------------------------
    # Public access
    # ------------------------------------------------------------------

    def _get_public_form(self, public_id: str) -> StaffForm:
        if not public_id or len(public_id) < MIN_PUBLIC_ID_LENGTH:
            raise HTTPException(status_code=400, detail="Invalid form ID")
        form = (
            self.db.query(StaffForm)
            .filter(StaffForm.public_id == public_id, StaffForm.tenant_id == self.tenant_id)
            .first()
        )
        if not form:
            raise HTTPException(status_code=404, detail="Form not found")
        if form.status == "pending":
            raise HTTPException(status_code=404, detail="Form not available")
        return form

    def _other_dates(self, form: StaffForm) -> list[dict]:
        dates = (
            self.db.query(EventDate)
            .filter(EventDate.event_id == form.event_id, EventDate.tenant_id == self.tenant_id)
            .order_by(EventDate.event_date.asc())
            .all()
        )
        statuses = {
            other.event_date_id: other.status
            for other in self.db.query(StaffForm).filter(
                StaffForm.event_id == form.event_id,
                StaffForm.staff_assignment_id == form.staff_assignment_id,
                StaffForm.event_date_id.isnot(None),
            )
        }
        return [
            {
                "id": d.id,
                "event_date": d.event_date,
                "has_form": d.id in statuses,
                "form_status": statuses.get(d.id),
            }
            for d in dates
            if d.id != form.event_date_id
        ]

    def view_public_form(self, public_id: str) -> dict:
        form = self._get_public_form(public_id)
        event = self.db.query(Event).filter(Event.id == form.event_id).first()

        event_date_info = None
        other_dates: list[dict] = []
        if form.event_date_id and form.event_date:
            event_date = form.event_date
            location = (
                self.db.query(Location).filter(Location.id == event_date.location_id).first()
                if event_date.location_id
                else None
            )
            event_date_info = {
                "id": event_date.id,
                "event_date": event_date.event_date,
                "start_time": event_date.start_time,
                "end_time": event_date.end_time,
                "location_name": location.name if location else None,
            }
            other_dates = self._other_dates(form)

        assignment = form.staff_assignment
        user = assignment.user if assignment else None
        role = assignment.staff_role if assignment else None

        if not form.viewed_at and form.status == "sent":
            form.viewed_at = utcnow()
            form.status = "viewed"
            self.db.commit()
            self.db.refresh(form)

        payload: dict[str, Any] = {
            "form": {
                "id": form.id,
                "title": form.title,
                "description": form.description,
                "fields": form.fields or [],
                "status": form.status,
                "responses": form.responses,
                "completed_at": form.completed_at,
                "event_date_id": form.event_date_id,
            },
            "event": {"id": event.id, "title": event.title, "start_date": event.start_date} if event else None,
            "eventDate": event_date_info,
            "staff": {
                "name": user.full_name if user else "Team Member",
                "role": role.name if role else None,
            },
            "tenant": {
                "name": SettingsRepository.get_value(self.db, self.tenant_id, "company.name", "Our Company"),
                "logoUrl": SettingsRepository.get_value(self.db, self.tenant_id, "appearance.logoUrl"),
            },
        }
        if other_dates:
            payload["otherDates"] = other_dates
        return payload

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
        logger.info(f"✅ Staff form {form.id} submitted")

        if form.task_id:
            try:
                task = self.db.query(Task).filter(Task.id == form.task_id).first()
                if task:
                    task.status = "completed"
                    task.completed_at = now
                    self.db.commit()
                    logger.info(f"✅ Linked task {task.id} marked as completed")
            except Exception as e:
                self.db.rollback()
                logger.warning(f"⚠️ Failed to mark task {form.task_id} as completed: {e}")

        return {"success": True}

    async def upload_attachment(self, public_id: str, file: UploadFile) -> dict:
        form = self._get_public_form(public_id)
        if form.status == "completed":
            raise HTTPException(status_code=400, detail="Form already submitted")
        if file.content_type not in ALLOWED_UPLOAD_TYPES:
            raise HTTPException(status_code=400, detail="Invalid file type. Only images and PDF files are allowed.")

        filename = file.filename or "upload"
        if any(char in filename for char in ("..", "/", "\\")):
            raise HTTPException(status_code=400, detail="Invalid filename")

        content = await file.read()
        if not content:
            raise HTTPException(status_code=400, detail="File is empty")
        if len(content) > MAX_UPLOAD_SIZE_BYTES:
            raise HTTPException(status_code=400, detail="File is too large")

        key = storage.build_object_key(f"staff-forms/{self.tenant_id}/{form.id}", filename)
        try:
            storage.upload_bytes(key, content, file.content_type)
        except Exception:
            raise HTTPException(status_code=502, detail="Failed to upload file")

        attachment = Attachment(
            tenant_id=self.tenant_id,
            entity_type="staff_form",
            entity_id=form.id,
            file_name=filename,
            file_key=key,
            file_type=file.content_type,
            file_size=len(content),
        )
        self.db.add(attachment)
        self.db.commit()
        self.db.refresh(attachment)
        logger.info(f"📎 Stored upload {attachment.id} for staff form {form.id}")
        return {"success": True, "attachment": row_to_dict(attachment)}
