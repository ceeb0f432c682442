"""领域模型单元测试

测试内容：
1. TaskStatus 线上取值与 "InProgress" 兼容写法
2. camelCase 序列化
3. ActivityEntry 不可变（含 details）
4. TaskInput 指派用户去重
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from tasktrail.core.models import (
    ActivityAction,
    ActivityEntry,
    FrozenDetails,
    StatKind,
    TaskInput,
    TaskStatus,
    UserProfile,
    UserSnapshot,
    UserStats,
)


class TestTaskStatus:
    """TaskStatus 枚举"""

    def test_wire_values(self):
        assert TaskStatus.PENDING.value == "Pending"
        assert TaskStatus.IN_PROGRESS.value == "In Progress"
        assert TaskStatus.COMPLETED.value == "Completed"

    def test_in_progress_without_space(self):
        """"InProgress" 视为 In Progress"""
        assert TaskStatus("InProgress") is TaskStatus.IN_PROGRESS

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            TaskStatus("Done")

    def test_stat_kind_values(self):
        assert {k.value for k in StatKind} == {
            "tasksCreated",
            "tasksAssigned",
            "tasksCompleted",
        }


class TestTaskInput:
    """TaskInput 输入模型"""

    def test_defaults(self):
        data = TaskInput(title="A", dueDate="2024-06-01")
        assert data.status == TaskStatus.PENDING
        assert data.assigned_users == []
        assert data.due_time is None

    def test_assigned_users_deduplicated_keeping_first(self):
        data = TaskInput.model_validate(
            {"title": "A", "dueDate": "2024-06-01", "assignedUsers": ["u2", "u1", "u2"]}
        )
        assert data.assigned_users == ["u2", "u1"]

    def test_status_accepts_in_progress_alias(self):
        data = TaskInput.model_validate({"status": "InProgress"})
        assert data.status == TaskStatus.IN_PROGRESS

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            TaskInput.model_validate({"status": "Archived"})


class TestActivityEntry:
    """ActivityEntry 模型"""

    def test_entry_is_frozen(self):
        entry = ActivityEntry(
            action=ActivityAction.CREATED,
            timestamp=datetime.now(UTC),
            acting_user=UserSnapshot(uid="u0"),
        )
        with pytest.raises(ValidationError):
            entry.action = ActivityAction.DELETED

    def test_api_shape_is_camel_case(self):
        entry = ActivityEntry(
            action=ActivityAction.STATUS_UPDATED,
            timestamp=datetime(2024, 6, 1, tzinfo=UTC),
            acting_user=UserSnapshot(uid="u0", name="Alice"),
            details={"previousStatus": "Pending", "newStatus": "Completed"},
        )
        data = entry.to_api()
        assert data["action"] == "status_updated"
        assert data["actingUser"] == {"uid": "u0", "name": "Alice", "email": ""}
        assert data["details"]["newStatus"] == "Completed"

    def test_details_are_read_only(self):
        source = {"previousStatus": "Pending", "newStatus": "Completed"}
        entry = ActivityEntry(
            action=ActivityAction.STATUS_UPDATED,
            timestamp=datetime(2024, 6, 1, tzinfo=UTC),
            acting_user=UserSnapshot(uid="u0"),
            details=source,
        )
        with pytest.raises(TypeError):
            entry.details["newStatus"] = "Pending"
        with pytest.raises(TypeError):
            entry.details.update(newStatus="Pending")
        with pytest.raises(TypeError):
            del entry.details["previousStatus"]

        # 原始字典的后续修改不影响条目
        source["newStatus"] = "Pending"
        assert entry.details["newStatus"] == "Completed"
        assert entry.to_api()["details"] == {
            "previousStatus": "Pending",
            "newStatus": "Completed",
        }

    def test_default_details_are_read_only(self):
        entry = ActivityEntry(
            action=ActivityAction.DELETED,
            timestamp=datetime.now(UTC),
            acting_user=UserSnapshot(uid="u0"),
        )
        assert isinstance(entry.details, FrozenDetails)
        with pytest.raises(TypeError):
            entry.details.setdefault("reason", "x")


class TestUserProfile:
    """UserProfile 模型"""

    def test_stats_default_none(self):
        now = datetime.now(UTC)
        profile = UserProfile(uid="u1", created_at=now, last_login=now, updated_at=now)
        assert profile.stats is None
        assert profile.to_api()["stats"] is None

    def test_negative_counter_rejected(self):
        with pytest.raises(ValidationError):
            UserStats(tasks_completed=-1)
