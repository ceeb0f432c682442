"""枚举定义 -- TaskStatus、ActivityAction、StatKind、UserRole

包含任务状态的排序表 STATUS_ORDER，以及 COMPLETION_TRANSITIONS
"进入/离开 Completed" 的完整流转表（九种组合全部显式列出）。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态 -- 三态闭集"""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def _missing_(cls, value):
        # 兼容无空格写法 "InProgress"
        if isinstance(value, str) and value.replace(" ", "").lower() == "inprogress":
            return cls.IN_PROGRESS
        return None


# 排序权重：Pending < In Progress < Completed
STATUS_ORDER: dict[TaskStatus, int] = {
    TaskStatus.PENDING: 1,
    TaskStatus.IN_PROGRESS: 2,
    TaskStatus.COMPLETED: 3,
}


class CompletionEffect(StrEnum):
    """状态流转对 tasksCompleted 计数的影响"""

    NONE = "none"
    COMPLETED = "completed"
    REOPENED = "reopened"


COMPLETION_TRANSITIONS: dict[tuple[TaskStatus, TaskStatus], CompletionEffect] = {
    (TaskStatus.PENDING, TaskStatus.PENDING): CompletionEffect.NONE,
    (TaskStatus.PENDING, TaskStatus.IN_PROGRESS): CompletionEffect.NONE,
    (TaskStatus.PENDING, TaskStatus.COMPLETED): CompletionEffect.COMPLETED,
    (TaskStatus.IN_PROGRESS, TaskStatus.PENDING): CompletionEffect.NONE,
    (TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS): CompletionEffect.NONE,
    (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED): CompletionEffect.COMPLETED,
    (TaskStatus.COMPLETED, TaskStatus.PENDING): CompletionEffect.REOPENED,
    (TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS): CompletionEffect.REOPENED,
    (TaskStatus.COMPLETED, TaskStatus.COMPLETED): CompletionEffect.NONE,
}


class ActivityAction(StrEnum):
    """活动日志动作类型"""

    CREATED = "created"
    UPDATED = "updated"
    STATUS_UPDATED = "status_updated"
    DELETED = "deleted"


class StatKind(StrEnum):
    """用户统计计数器名称"""

    TASKS_CREATED = "tasksCreated"
    TASKS_ASSIGNED = "tasksAssigned"
    TASKS_COMPLETED = "tasksCompleted"


class UserRole(StrEnum):
    """用户角色"""

    USER = "user"
    ADMIN = "admin"


def completion_effect(from_status: TaskStatus, to_status: TaskStatus) -> CompletionEffect:
    """查询状态流转对完成计数的影响

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        CompletionEffect.COMPLETED 进入完成态，REOPENED 离开完成态，否则 NONE
    """
    return COMPLETION_TRANSITIONS[(TaskStatus(from_status), TaskStatus(to_status))]
