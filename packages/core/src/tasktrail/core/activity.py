"""活动日志构建与渲染

- build_entry: 按 action 构建不可变 ActivityEntry
- diff_task: 计算全量更新的字段级差异（updated 条目 details）
- describe_entry: 把条目渲染为一句可读的历史记录
"""

from datetime import UTC, datetime
from typing import Any

from .models.activity import (
    ActivityEntry,
    AssignmentChange,
    CreatedDetails,
    FieldChange,
    StatusUpdatedDetails,
)
from .models.enums import ActivityAction, TaskStatus
from .models.snapshot import UserSnapshot
from .models.task import Task

# updated 条目中参与比较的标量字段（details key -> Task 属性）
DIFFED_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "dueDate": "due_date",
    "hasTime": "has_time",
}

# describe_entry 中字段的可读名称
_FIELD_LABELS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "dueDate": "due date",
    "hasTime": "due time",
    "assignedUsers": "assignees",
}


def build_entry(
    action: ActivityAction,
    user: UserSnapshot,
    details: dict[str, Any] | None = None,
    timestamp: datetime | None = None,
) -> ActivityEntry:
    """构建一条活动日志条目"""
    return ActivityEntry(
        action=action,
        timestamp=timestamp or datetime.now(UTC),
        acting_user=user,
        details=details or {},
    )


def created_entry(
    user: UserSnapshot,
    initial_status: TaskStatus,
    assigned_users: list[str],
    timestamp: datetime | None = None,
) -> ActivityEntry:
    details = CreatedDetails(
        initial_status=initial_status,
        assigned_users=list(assigned_users),
    )
    return build_entry(
        ActivityAction.CREATED,
        user,
        details.model_dump(mode="json", by_alias=True),
        timestamp,
    )


def status_updated_entry(
    user: UserSnapshot,
    previous_status: TaskStatus,
    new_status: TaskStatus,
    timestamp: datetime | None = None,
) -> ActivityEntry:
    details = StatusUpdatedDetails(
        previous_status=previous_status,
        new_status=new_status,
    )
    return build_entry(
        ActivityAction.STATUS_UPDATED,
        user,
        details.model_dump(mode="json", by_alias=True),
        timestamp,
    )


def diff_task(
    current: Task,
    new_values: dict[str, Any],
    users_added: list[str],
    users_removed: list[str],
    new_assigned: list[str],
) -> dict[str, Any]:
    """计算 updated 条目的 details，仅包含实际变化的字段

    Args:
        current: 更新前的任务
        new_values: 新值，key 为 Task 属性名（title/description/status/due_date/has_time）
        users_added: 新增的指派用户
        users_removed: 移除的指派用户
        new_assigned: 更新后的完整指派列表

    Returns:
        details 字典；无任何变化时为空字典
    """
    changes: dict[str, Any] = {}
    for key, attr in DIFFED_FIELDS.items():
        before = getattr(current, attr)
        after = new_values[attr]
        if before != after:
            changes[key] = FieldChange(from_=before, to=after).model_dump(
                mode="json", by_alias=True
            )

    if users_added or users_removed:
        changes["assignedUsers"] = AssignmentChange(
            added=users_added,
            removed=users_removed,
            current=new_assigned,
        ).model_dump(mode="json", by_alias=True)

    return changes


def describe_entry(entry: ActivityEntry) -> str:
    """把活动日志条目渲染为一句可读文本"""
    who = entry.acting_user.name or entry.acting_user.email or entry.acting_user.uid
    details = entry.details

    if entry.action == ActivityAction.CREATED:
        status = details.get("initialStatus", TaskStatus.PENDING.value)
        count = len(details.get("assignedUsers", []))
        return f"{who} created the task (status: {status}, {count} assignee(s))"

    if entry.action == ActivityAction.STATUS_UPDATED:
        previous = details.get("previousStatus")
        new = details.get("newStatus")
        if previous == new:
            return f"{who} re-submitted status {new}"
        return f"{who} changed status from {previous} to {new}"

    if entry.action == ActivityAction.UPDATED:
        labels = [_FIELD_LABELS.get(key, key) for key in details]
        if not labels:
            return f"{who} saved the task without changes"
        return f"{who} updated {_join_labels(labels)}"

    return f"{who} deleted the task"


def _join_labels(labels: list[str]) -> str:
    if len(labels) == 1:
        return labels[0]
    return ", ".join(labels[:-1]) + " and " + labels[-1]
