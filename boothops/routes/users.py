import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import joinedload

from ..auth import TenantContext, get_tenant_context
from ..models import User
from ..models_event import Event, EventStaffAssignment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

DEPARTMENT_ROLES = {"manager", "supervisor", "member"}


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    department_role: Optional[str] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    id: str
    first_name: Optional[str]
    last_name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    role: str
    department: Optional[str]
    department_role: Optional[str]
    is_active: bool

    class Config:
        from_attributes = True


def event_calendar_dates(event: Event) -> set[date]:
    dates = {d.event_date for d in event.dates if d.event_date}
    if not dates and event.start_date:
        dates.add(event.start_date)
    return dates


@router.get("", response_model=list[UserResponse])
async def list_users(
    department: Optional[str] = Query(None),
    include_inactive: bool = Query(False),
    ctx: TenantContext = Depends(get_tenant_context),
):
    query = ctx.db.query(User).filter(User.tenant_id == ctx.tenant_id)
    if department:
        query = query.filter(User.department == department)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.first_name, User.last_name).all()


@router.get("/available")
async def list_available_users(
    event_id: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    ctx: TenantContext = Depends(get_tenant_context),
):
    """Department staff with any conflicting assignments on the event's dates"""
    if not event_id:
        raise HTTPException(status_code=400, detail="event_id is required")
    if not department:
        raise HTTPException(status_code=400, detail="department is required")

    event = (
        ctx.db.query(Event)
        .options(joinedload(Event.dates))
        .filter(Event.id == event_id, Event.tenant_id == ctx.tenant_id)
        .first()
    )
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    wanted_dates = event_calendar_dates(event)
    if not wanted_dates:
        raise HTTPException(status_code=400, detail="Event has no dates")

    users = (
        ctx.db.query(User)
        .filter(
            User.tenant_id == ctx.tenant_id,
            User.is_active.is_(True),
            User.department == department,
        )
        .order_by(User.first_name)
        .all()
    )
    if not users:
        return []

    assignments = (
        ctx.db.query(EventStaffAssignment)
        .options(joinedload(EventStaffAssignment.event).joinedload(Event.dates))
        .filter(
            EventStaffAssignment.tenant_id == ctx.tenant_id,
            EventStaffAssignment.user_id.in_([u.id for u in users]),
            EventStaffAssignment.event_id != event.id,
        )
        .all()
    )

    conflicts: dict[str, list[dict]] = {}
    for assignment in assignments:
        other = assignment.event
        if not other or other.status == "cancelled":
            continue
        for overlap in sorted(event_calendar_dates(other) & wanted_dates):
            conflicts.setdefault(assignment.user_id, []).append(
                {"event_id": other.id, "event_title": other.title, "event_date": overlap}
            )

    return [
        {
            **UserResponse.model_validate(user).model_dump(),
            "is_available": user.id not in conflicts,
            "conflicts": conflicts.get(user.id, []),
        }
        for user in users
    ]


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, data: UserUpdate, ctx: TenantContext = Depends(get_tenant_context)):
    if not ctx.is_admin and ctx.user_id != user_id:
        raise HTTPException(status_code=403, detail="You can only update your own profile")

    user = ctx.db.query(User).filter(User.id == user_id, User.tenant_id == ctx.tenant_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    updates = data.model_dump(exclude_unset=True)
    if "department_role" in updates and updates["department_role"] not in DEPARTMENT_ROLES | {None}:
        raise HTTPException(status_code=400, detail="Invalid department role")
    if not ctx.is_admin:
        # Only administrators manage departments and activation
        for key in ("department", "department_role", "is_active"):
            updates.pop(key, None)

    for key, value in updates.items():
        setattr(user, key, value)
    ctx.db.commit()
    ctx.db.refresh(user)
    logger.info(f"✅ Updated user {user.id}")
    return user
