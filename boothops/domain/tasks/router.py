"""Task router - FastAPI endpoints for the unified task table"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_tenant_context
from .schemas import TaskCreate, TaskResponse, TaskUpdate
from .service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


def get_task_service(ctx: TenantContext = Depends(get_tenant_context)) -> TaskService:
    """Dependency injection for TaskService"""
    role = ctx.app_user.role if ctx.app_user else None
    return TaskService(ctx.db, ctx.tenant_id, ctx.user_id, role)


@router.get("/dashboard")
async def task_dashboard(
    department: Optional[str] = Query(None),
    assignedTo: Optional[str] = Query(None),
    service: TaskService = Depends(get_task_service),
):
    return service.dashboard(department, assignedTo)


@router.get("/by-type/{task_type}")
async def tasks_by_type(
    task_type: str,
    status: Optional[str] = Query(None),
    assigned_to: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[str] = Query(None),
    include_completed: bool = Query(False),
    service: TaskService = Depends(get_task_service),
):
    return service.tasks_by_type(
        task_type,
        status=status,
        assigned_to=assigned_to,
        entity_type=entity_type,
        entity_id=entity_id,
        include_completed=include_completed,
    )


@router.post("", response_model=TaskResponse)
async def create_task(data: TaskCreate, service: TaskService = Depends(get_task_service)):
    return service.create_task(data)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return service.get_task(task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, data: TaskUpdate, service: TaskService = Depends(get_task_service)):
    return service.update_task(task_id, data)
