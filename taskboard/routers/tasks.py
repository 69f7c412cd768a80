from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from taskboard.core.config import settings
from taskboard.core.database import get_db
from taskboard.models.user import User
from taskboard.routers.auth import get_current_user
from taskboard.schemas.task import MessageResponse, TaskCreate, TaskPage, TaskResponse, TaskStatus, TaskUpdate
from taskboard.services.tasks import TaskQueryService

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={403: {"description": "Not the task owner"}, 404: {"description": "Not found"}},
)

def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskQueryService:
    return TaskQueryService(db)

@router.get("", response_model=TaskPage)
async def list_tasks(
    search: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
    current_user: User = Depends(get_current_user),
    service: TaskQueryService = Depends(get_task_service),
):
    return await service.list_tasks(
        current_user.id, search=search, status=status, page=page, per_page=per_page
    )

@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    current_user: User = Depends(get_current_user),
    service: TaskQueryService = Depends(get_task_service),
):
    return await service.create_task(current_user.id, task_in)

@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskQueryService = Depends(get_task_service),
):
    return await service.get_task(current_user.id, task_id)

@router.put("/{task_id}", response_model=TaskResponse)
@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    current_user: User = Depends(get_current_user),
    service: TaskQueryService = Depends(get_task_service),
):
    return await service.update_task(current_user.id, task_id, task_in)

@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskQueryService = Depends(get_task_service),
):
    await service.delete_task(current_user.id, task_id)
    return {"message": "Task deleted successfully"}
