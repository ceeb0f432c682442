"""TaskService -- 任务变更与查询业务逻辑

每次变更（创建 / 全量更新 / 状态更新 / 删除）的流程：
1. 校验输入，与存储中的当前状态比较
2. 在同一事务内写入任务字段 + 一条活动日志
3. 按受影响用户逐个调用 StatsLedger（每次调用独立原子，失败仅记录日志）
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import structlog
from tasktrail.core.activity import (
    build_entry,
    created_entry,
    describe_entry,
    diff_task,
    status_updated_entry,
)
from tasktrail.core.config import TASK_SORT_KEYS
from tasktrail.core.due_date import combine_due_date
from tasktrail.core.exceptions import NotFoundError, ValidationError
from tasktrail.core.ledger import StatsLedger
from tasktrail.core.models import (
    STATUS_ORDER,
    ActivityAction,
    CompletionEffect,
    StatKind,
    Task,
    TaskInput,
    TaskStatus,
    UserSnapshot,
    completion_effect,
)
from tasktrail.core.store import StoreGroup
from tasktrail.core.store.transaction import (
    append_entry_only,
    create_task_with_entry,
    delete_task_with_history,
    update_task_with_entry,
)
from ulid import ULID

log = structlog.get_logger()

REQUIRED_FIELDS_MESSAGE = "Title and due date are required"


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup, ledger: StatsLedger | None = None) -> None:
        self._stores = store_group
        self._ledger = ledger or StatsLedger(store_group)

    async def create_task(self, data: TaskInput, user: UserSnapshot) -> Task:
        """创建任务

        创建者 tasksCreated +1；每个指派用户 tasksAssigned +1；
        初始状态为 Completed 时指派用户 tasksCompleted +1。
        """
        title, description, due_date, has_time = self._validate_input(data)

        now = datetime.now(UTC)
        task_id = str(ULID())
        task = Task(
            task_id=task_id,
            title=title,
            description=description,
            status=data.status,
            due_date=due_date,
            has_time=has_time,
            created_by=user,
            assigned_users=data.assigned_users,
            created_at=now,
            updated_at=now,
        )
        entry = created_entry(user, data.status, data.assigned_users, now)

        async with self._stores.write_lock:
            await create_task_with_entry(
                self._stores.conn,
                self._stores.task_store,
                self._stores.activity_store,
                task,
                entry,
            )

        await log.ainfo(
            "task_created",
            task_id=task_id,
            status=data.status.value,
            assignee_count=len(data.assigned_users),
        )

        await self._bump(self._ledger.increment, user.uid, StatKind.TASKS_CREATED)
        for uid in data.assigned_users:
            await self._bump(self._ledger.increment, uid, StatKind.TASKS_ASSIGNED)
        if data.status == TaskStatus.COMPLETED:
            for uid in data.assigned_users:
                await self._bump(self._ledger.increment, uid, StatKind.TASKS_COMPLETED)

        return await self._load_task(task_id)

    async def update_status(
        self, task_id: str, new_status: TaskStatus | str, user: UserSnapshot
    ) -> Task:
        """仅更新状态

        状态未变化时同样追加 status_updated 条目，但不产生统计变更。
        """
        status = self._coerce_status(new_status)

        async with self._stores.write_lock:
            task = await self._require_task(task_id)
            now = datetime.now(UTC)
            entry = status_updated_entry(user, task.status, status, now)
            await update_task_with_entry(
                self._stores.conn,
                self._stores.task_store,
                self._stores.activity_store,
                task_id,
                {"status": status, "last_updated_by": user, "updated_at": now},
                entry,
            )

        await log.ainfo(
            "task_status_updated",
            task_id=task_id,
            from_status=task.status.value,
            to_status=status.value,
        )

        if task.status != status:
            await self._apply_transition(task.status, status, task.assigned_users)

        return await self._load_task(task_id)

    async def update_task(self, task_id: str, data: TaskInput, user: UserSnapshot) -> Task:
        """全量更新任务

        统计变更顺序：
        (a) 状态变化时，按新指派集合应用流转效果
        (b) 新增指派用户 tasksAssigned +1；新状态为 Completed 时再 tasksCompleted +1
        (c) 被移除的用户不回退 tasksAssigned
        """
        # 日期解析先于任何写入与统计调用
        title, description, due_date, has_time = self._validate_input(data)
        new_assigned = data.assigned_users

        async with self._stores.write_lock:
            task = await self._require_task(task_id)
            old_assigned = task.assigned_users
            users_added = [uid for uid in new_assigned if uid not in old_assigned]
            users_removed = [uid for uid in old_assigned if uid not in new_assigned]

            new_values = {
                "title": title,
                "description": description,
                "status": data.status,
                "due_date": due_date,
                "has_time": has_time,
            }
            details = diff_task(task, new_values, users_added, users_removed, new_assigned)
            now = datetime.now(UTC)
            entry = build_entry(ActivityAction.UPDATED, user, details, now)

            await update_task_with_entry(
                self._stores.conn,
                self._stores.task_store,
                self._stores.activity_store,
                task_id,
                {
                    **new_values,
                    "assigned_users": new_assigned,
                    "last_updated_by": user,
                    "updated_at": now,
                },
                entry,
            )

        await log.ainfo(
            "task_updated",
            task_id=task_id,
            changed_fields=sorted(details),
            users_added=users_added,
            users_removed=users_removed,
        )

        if task.status != data.status:
            await self._apply_transition(task.status, data.status, new_assigned)

        for uid in users_added:
            await self._bump(self._ledger.increment, uid, StatKind.TASKS_ASSIGNED)
            if data.status == TaskStatus.COMPLETED:
                await self._bump(self._ledger.increment, uid, StatKind.TASKS_COMPLETED)

        return await self._load_task(task_id)

    async def delete_task(self, task_id: str, user: UserSnapshot) -> None:
        """删除任务

        deleted 条目单独提交后再物理删除任务与日志；不回退任何统计。
        """
        async with self._stores.write_lock:
            await self._require_task(task_id)
            entry = build_entry(ActivityAction.DELETED, user)
            try:
                await append_entry_only(
                    self._stores.conn, self._stores.activity_store, task_id, entry
                )
            except Exception as e:
                await log.awarning(
                    "task_delete_entry_failed",
                    task_id=task_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )

            await delete_task_with_history(
                self._stores.conn,
                self._stores.task_store,
                self._stores.activity_store,
                task_id,
            )

        await log.ainfo("task_deleted", task_id=task_id, deleted_by=user.uid)

    async def get_task(self, task_id: str) -> Task:
        """查询任务详情（含活动日志）

        Raises:
            NotFoundError: 任务不存在
        """
        return await self._load_task(task_id)

    async def list_tasks(
        self,
        status: TaskStatus | str | None = None,
        search: str | None = None,
        sort: str | None = None,
    ) -> list[Task]:
        """查询任务列表

        默认按 createdAt 倒序；search 对 title/description/status 做不区分大小写的子串匹配；
        sort 取值见 TASK_SORT_KEYS。
        """
        if sort and sort not in TASK_SORT_KEYS:
            raise ValidationError(
                f"Invalid sort option: {sort} (expected one of {', '.join(TASK_SORT_KEYS)})"
            )
        status_filter = self._coerce_status(status).value if status else None

        async with self._stores.write_lock:
            tasks = await self._stores.task_store.list_tasks(status_filter)

        term = (search or "").strip().lower()
        if term:
            tasks = [
                t
                for t in tasks
                if term in t.title.lower()
                or term in t.description.lower()
                or term in t.status.value.lower()
            ]

        if sort:
            field, direction = sort.split("-")
            if field == "dueDate":
                tasks.sort(key=lambda t: t.due_date, reverse=direction == "desc")
            else:
                tasks.sort(key=lambda t: STATUS_ORDER[t.status], reverse=direction == "desc")

        return tasks

    async def get_activity(self, task_id: str) -> list[dict]:
        """任务活动历史：每条日志附带一句可读摘要"""
        task = await self._load_task(task_id)
        return [
            {**entry.to_api(), "summary": describe_entry(entry)}
            for entry in task.activity_log
        ]

    # ---- 内部方法 ----

    @staticmethod
    def _validate_input(data: TaskInput) -> tuple[str, str, datetime, bool]:
        """校验必填字段并解析截止日期

        Returns:
            (title, description, due_date, has_time)
        """
        title = (data.title or "").strip()
        if not title or not data.due_date:
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        due_date, has_time = combine_due_date(data.due_date, data.due_time)
        return title, data.description or "", due_date, has_time

    @staticmethod
    def _coerce_status(value: TaskStatus | str) -> TaskStatus:
        try:
            return TaskStatus(value)
        except ValueError as e:
            raise ValidationError(f"Invalid status: {value}") from e

    async def _apply_transition(
        self,
        from_status: TaskStatus,
        to_status: TaskStatus,
        assigned_users: list[str],
    ) -> None:
        """对每个指派用户应用状态流转对 tasksCompleted 的影响"""
        effect = completion_effect(from_status, to_status)
        if effect == CompletionEffect.COMPLETED:
            for uid in assigned_users:
                await self._bump(self._ledger.increment, uid, StatKind.TASKS_COMPLETED)
        elif effect == CompletionEffect.REOPENED:
            for uid in assigned_users:
                await self._bump(
                    self._ledger.decrement_guarded, uid, StatKind.TASKS_COMPLETED
                )

    async def _bump(
        self,
        op: Callable[[str, StatKind], Awaitable[bool]],
        uid: str,
        kind: StatKind,
    ) -> None:
        """调用账本；失败只记录日志，不影响已提交的任务变更"""
        try:
            await op(uid, kind)
        except Exception as e:
            await log.aerror(
                "stats_update_failed",
                uid=uid,
                kind=kind.value,
                error_type=type(e).__name__,
                error=str(e),
            )

    async def _load_task(self, task_id: str) -> Task:
        """加锁读取，避免读到同一连接上未提交的写入"""
        async with self._stores.write_lock:
            return await self._require_task(task_id)

    async def _require_task(self, task_id: str) -> Task:
        # 调用方须已持有 write_lock
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task
