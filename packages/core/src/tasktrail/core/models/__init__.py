"""TaskTrail Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .activity import (
    ActivityEntry,
    AssignmentChange,
    CreatedDetails,
    FieldChange,
    FrozenDetails,
    StatusUpdatedDetails,
)
from .base import CamelModel
from .enums import (
    COMPLETION_TRANSITIONS,
    STATUS_ORDER,
    ActivityAction,
    CompletionEffect,
    StatKind,
    TaskStatus,
    UserRole,
    completion_effect,
)
from .snapshot import UserSnapshot
from .task import Task, TaskInput
from .user import StatsSummary, UserProfile, UserStats

__all__ = [
    # 枚举
    "TaskStatus",
    "ActivityAction",
    "StatKind",
    "UserRole",
    "CompletionEffect",
    # 状态流转
    "STATUS_ORDER",
    "COMPLETION_TRANSITIONS",
    "completion_effect",
    # Task
    "CamelModel",
    "Task",
    "TaskInput",
    "UserSnapshot",
    # Activity
    "ActivityEntry",
    "FrozenDetails",
    "CreatedDetails",
    "StatusUpdatedDetails",
    "FieldChange",
    "AssignmentChange",
    # User
    "UserProfile",
    "UserStats",
    "StatsSummary",
]
