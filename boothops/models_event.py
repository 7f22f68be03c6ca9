import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import TenantBase


def generate_uuid():
    return str(uuid.uuid4())


class Event(TenantBase):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(String(100), nullable=True)
    status = Column(String(50), default="scheduled", nullable=False)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    primary_contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    opportunity_id = Column(String(36), ForeignKey("opportunities.id"), nullable=True)
    location = Column(String(500), nullable=True)  # free-text fallback
    location_id = Column(String(36), ForeignKey("locations.id"), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(String(10), nullable=True)
    end_time = Column(String(10), nullable=True)
    guest_count = Column(Integer, nullable=True)

    # Planner can be a contact record or free text
    event_planner_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    event_planner_name = Column(String(255), nullable=True)
    event_planner_phone = Column(String(50), nullable=True)
    event_planner_email = Column(String(255), nullable=True)
    onsite_contact_name = Column(String(255), nullable=True)
    onsite_contact_phone = Column(String(50), nullable=True)
    onsite_contact_email = Column(String(255), nullable=True)

    load_in_notes = Column(Text, nullable=True)
    parking_notes = Column(Text, nullable=True)
    dress_code = Column(String(255), nullable=True)
    event_notes = Column(Text, nullable=True)

    staff_brief_token = Column(String(64), unique=True, index=True, nullable=True)
    staff_brief_enabled = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    dates = relationship(
        "EventDate",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventDate.event_date",
    )
    staff_assignments = relationship(
        "EventStaffAssignment", back_populates="event", cascade="all, delete-orphan"
    )


class EventDate(TenantBase):
    __tablename__ = "event_dates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    event_date = Column(Date, nullable=False)
    start_time = Column(String(10), nullable=True)  # HH:MM
    end_time = Column(String(10), nullable=True)
    setup_time = Column(String(10), nullable=True)
    location_id = Column(String(36), ForeignKey("locations.id"), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(50), default="scheduled", nullable=False)

    event = relationship("Event", back_populates="dates")


class StaffRole(TenantBase):
    __tablename__ = "staff_roles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    type = Column(String(50), nullable=True)  # operations, event_staff, design
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)


class EventStaffAssignment(TenantBase):
    __tablename__ = "event_staff_assignments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    staff_role_id = Column(String(36), ForeignKey("staff_roles.id"), nullable=True)
    event_date_id = Column(String(36), ForeignKey("event_dates.id"), nullable=True)
    role = Column(String(100), nullable=True)  # free-text role when no staff_role is set
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="staff_assignments")
    user = relationship("User")
    staff_role = relationship("StaffRole")


class TaskTemplate(TenantBase):
    __tablename__ = "task_templates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    department = Column(String(50), nullable=True)
    task_type = Column(String(50), nullable=True)
    days_before_event = Column(Integer, nullable=True)
    urgent_threshold_days = Column(Integer, nullable=True)
    missed_deadline_days = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)


class Task(TenantBase):
    """Unified task table shared by every department"""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    task_type = Column(String(50), default="general", nullable=False)  # design, post_event...
    department = Column(String(50), nullable=True)
    entity_type = Column(String(50), nullable=True)  # event, opportunity, account...
    entity_id = Column(String(36), nullable=True, index=True)
    assigned_to = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)
    status = Column(String(50), default="pending", nullable=False)
    priority = Column(String(20), default="medium", nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    design_start_date = Column(Date, nullable=True)
    design_deadline = Column(Date, nullable=True)
    design_item_type_id = Column(String(36), ForeignKey("design_item_types.id"), nullable=True)
    template_id = Column(String(36), ForeignKey("task_templates.id"), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    assignee = relationship("User")
    design_item_type = relationship("DesignItemType")
    template = relationship("TaskTemplate")


class DesignItemType(TenantBase):
    __tablename__ = "design_item_types"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), default="digital", nullable=False)  # digital, physical
    category = Column(String(100), nullable=True)
    default_design_days = Column(Integer, default=7, nullable=False)
    default_production_days = Column(Integer, default=0, nullable=False)
    default_shipping_days = Column(Integer, default=0, nullable=False)
    client_approval_buffer_days = Column(Integer, nullable=True)
    # Classification thresholds in days before the event
    days_before_event = Column(Integer, nullable=True)
    urgent_threshold_days = Column(Integer, nullable=True)
    missed_deadline_days = Column(Integer, nullable=True)
    is_auto_added = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EventDesignItem(TenantBase):
    __tablename__ = "event_design_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    design_item_type_id = Column(String(36), ForeignKey("design_item_types.id"), nullable=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=True)
    item_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(50), default="pending", nullable=False)
    assigned_designer_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    design_start_date = Column(Date, nullable=True)
    design_deadline = Column(Date, nullable=True)
    custom_design_days = Column(Integer, nullable=True)
    quantity = Column(Integer, default=1, nullable=False)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    design_item_type = relationship("DesignItemType")


class EventFormTemplate(TenantBase):
    __tablename__ = "event_form_templates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    form_type = Column(String(50), default="staff_recap", nullable=False)
    fields = Column(JSON, nullable=True)  # list of {id, label, type, required, options}
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class StaffForm(TenantBase):
    __tablename__ = "staff_forms"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    public_id = Column(String(32), unique=True, index=True, nullable=False)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    event_date_id = Column(String(36), ForeignKey("event_dates.id"), nullable=True)
    staff_assignment_id = Column(
        String(36), ForeignKey("event_staff_assignments.id"), nullable=False, index=True
    )
    template_id = Column(String(36), ForeignKey("event_form_templates.id"), nullable=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=True)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    fields = Column(JSON, nullable=True)  # snapshot of template fields at send time
    responses = Column(JSON, nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, sent, viewed, completed
    sent_at = Column(DateTime(timezone=True), nullable=True)
    viewed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    staff_assignment = relationship("EventStaffAssignment")
    event_date = relationship("EventDate")


class EventForm(TenantBase):
    """Client questionnaire attached to an event"""

    __tablename__ = "event_forms"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    template_id = Column(String(36), ForeignKey("event_form_templates.id"), nullable=True)
    public_id = Column(String(32), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    # list of {id, type, label, required, options, prePopulateFrom, saveResponseTo}
    fields = Column(JSON, nullable=True)
    responses = Column(JSON, nullable=True)
    status = Column(String(20), default="draft", nullable=False)  # draft, sent, viewed, completed
    sent_at = Column(DateTime(timezone=True), nullable=True)
    viewed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
