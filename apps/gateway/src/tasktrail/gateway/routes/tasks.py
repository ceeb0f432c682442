"""任务路由 -- 创建 / 查询 / 更新 / 删除 / 活动历史

所有路由需要 bearer token；业务逻辑全部在 TaskService 中。
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from tasktrail.core.models import TaskInput, TaskStatus, UserSnapshot

from ..deps import get_acting_user, get_ledger, get_store_group
from ..services.task_service import TaskService

router = APIRouter()


class StatusUpdateRequest(BaseModel):
    """状态更新请求体"""

    status: TaskStatus


def get_task_service(
    store_group=Depends(get_store_group),
    ledger=Depends(get_ledger),
) -> TaskService:
    return TaskService(store_group, ledger)


@router.post("/tasks", status_code=201)
async def create_task(
    body: TaskInput,
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    """创建任务，返回 201 + 完整任务"""
    task = await service.create_task(body, user)
    return task.to_api()


@router.get("/tasks")
async def list_tasks(
    status: str | None = Query(default=None, description="按状态筛选"),
    search: str | None = Query(default=None, description="标题/描述/状态关键字"),
    sort: str | None = Query(default=None, description="dueDate-asc 等排序键"),
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    """任务列表，默认按 createdAt 倒序"""
    tasks = await service.list_tasks(status=status, search=search, sort=sort)
    return [t.to_api() for t in tasks]


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_task(task_id)
    return task.to_api()


@router.get("/tasks/{task_id}/activity")
async def get_task_activity(
    task_id: str,
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    """活动历史：日志条目 + 可读摘要"""
    return await service.get_activity(task_id)


@router.patch("/tasks/{task_id}/status")
async def update_task_status(
    task_id: str,
    body: StatusUpdateRequest,
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.update_status(task_id, body.status, user)
    return task.to_api()


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str,
    body: TaskInput,
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    """全量更新任务"""
    task = await service.update_task(task_id, body, user)
    return task.to_api()


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    user: UserSnapshot = Depends(get_acting_user),
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(task_id, user)
    return {"message": "Task deleted successfully"}
