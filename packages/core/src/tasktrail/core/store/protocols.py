"""Store Protocol 接口定义

定义 TaskStore、ActivityStore、UserStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from datetime import datetime
from typing import Any, Protocol

from ..models.activity import ActivityEntry
from ..models.enums import StatKind
from ..models.task import Task
from ..models.user import UserProfile


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务（含活动日志）"""
        ...

    async def list_tasks(self, status: str | None = None) -> list[Task]:
        """查询任务列表，支持按状态筛选"""
        ...

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> None:
        """按字段更新任务"""
        ...

    async def delete_task(self, task_id: str) -> None:
        """物理删除任务"""
        ...


class ActivityStore(Protocol):
    """活动日志存储接口

    append-only：只允许插入，条目仅随任务物理删除一并移除。
    """

    async def append_entry(self, task_id: str, entry: ActivityEntry) -> None:
        """追加日志条目"""
        ...

    async def get_entries_for_task(self, task_id: str) -> list[ActivityEntry]:
        """查询指定任务的全部条目"""
        ...

    async def delete_entries_for_task(self, task_id: str) -> None:
        """删除指定任务的全部条目"""
        ...


class UserStore(Protocol):
    """用户档案与统计计数器存储接口"""

    async def create_profile(self, profile: UserProfile) -> None:
        """创建用户档案"""
        ...

    async def get_profile(self, uid: str) -> UserProfile | None:
        """查询用户档案"""
        ...

    async def list_profiles(self) -> list[UserProfile]:
        """查询全部用户档案"""
        ...

    async def increment_stat(self, uid: str, kind: StatKind, now: datetime) -> bool:
        """计数器原子 +1，返回是否命中档案"""
        ...

    async def decrement_stat_guarded(
        self, uid: str, kind: StatKind, now: datetime
    ) -> bool:
        """计数器原子 -1 且不低于 0，返回是否命中档案"""
        ...
