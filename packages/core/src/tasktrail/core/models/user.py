"""UserProfile Domain Model

stats 仅由 StatsLedger 修改；为 None 表示计数器从未初始化，
此时 get_stats 回退为全量重算。
"""

from datetime import datetime

from pydantic import Field

from .base import CamelModel
from .enums import UserRole


class UserStats(CamelModel):
    """用户任务统计计数器"""

    tasks_created: int = Field(default=0, ge=0)
    tasks_assigned: int = Field(default=0, ge=0)
    tasks_completed: int = Field(default=0, ge=0)
    last_task_completed_at: datetime | None = None


class StatsSummary(CamelModel):
    """get_stats 返回值"""

    created: int = Field(default=0, ge=0)
    assigned: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)


class UserProfile(CamelModel):
    """用户档案"""

    uid: str = Field(description="用户 ID（来自身份提供方）")
    email: str = Field(default="", description="邮箱")
    name: str = Field(default="", description="显示名称")
    role: UserRole = Field(default=UserRole.USER, description="角色")
    stats: UserStats | None = Field(default=None, description="统计计数器")
    created_at: datetime = Field(description="创建时间")
    last_login: datetime = Field(description="最近登录时间")
    updated_at: datetime = Field(description="更新时间")
