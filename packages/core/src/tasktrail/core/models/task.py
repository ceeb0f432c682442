"""Task Domain Model

activity_log 为只追加的历史记录，第一条必为 created。
assigned_users 视为集合：去重，顺序无意义。
"""

from datetime import datetime

from pydantic import Field, field_validator

from .activity import ActivityEntry
from .base import CamelModel
from .enums import TaskStatus
from .snapshot import UserSnapshot


class TaskInput(CamelModel):
    """创建 / 全量更新任务的输入

    title 与 due_date 的必填校验由 TaskService 完成，
    以便统一返回 "Title and due date are required"。
    """

    title: str | None = Field(default=None, description="标题")
    description: str | None = Field(default=None, description="描述")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="状态")
    due_date: str | None = Field(default=None, description="截止日期 YYYY-MM-DD")
    due_time: str | None = Field(default=None, description="截止时间 HH:MM，可选")
    assigned_users: list[str] = Field(default_factory=list, description="指派用户 ID")

    @field_validator("assigned_users")
    @classmethod
    def _dedupe_assigned_users(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class Task(CamelModel):
    """Task 数据模型"""

    task_id: str = Field(alias="id", description="唯一标识，ULID 格式")
    title: str = Field(description="标题")
    description: str = Field(default="", description="描述")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    due_date: datetime = Field(description="截止时间（UTC）")
    has_time: bool = Field(default=False, description="due_date 是否带有效时刻")
    created_by: UserSnapshot = Field(description="创建者快照")
    last_updated_by: UserSnapshot | None = Field(default=None, description="最近更新者快照")
    assigned_users: list[str] = Field(default_factory=list, description="指派用户 ID")
    activity_log: list[ActivityEntry] = Field(default_factory=list, description="活动日志")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
