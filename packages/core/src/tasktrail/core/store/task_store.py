"""TaskStore SQLite 实现

tasks 表保存任务当前字段；活动日志在 task_activity 表中，
读取时由 SqliteActivityStore 装配进 Task.activity_log。
"""

import json
from datetime import datetime
from typing import Any

import aiosqlite

from ..models.enums import TaskStatus
from ..models.snapshot import UserSnapshot
from ..models.task import Task
from .activity_store import SqliteActivityStore

_SELECT_COLUMNS = (
    "task_id, title, description, status, due_date, has_time, "
    "created_by, last_updated_by, assigned_users, created_at, updated_at"
)

# update_task 允许写入的列 -> 值编码函数
_UPDATABLE_COLUMNS = {
    "title": str,
    "description": str,
    "status": lambda v: TaskStatus(v).value,
    "due_date": lambda v: v.isoformat(),
    "has_time": lambda v: 1 if v else 0,
    "last_updated_by": lambda v: v.model_dump_json() if v is not None else None,
    "assigned_users": lambda v: json.dumps(list(v), ensure_ascii=False),
    "updated_at": lambda v: v.isoformat(),
}


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        activity_store: SqliteActivityStore,
    ) -> None:
        self._conn = conn
        self._activity_store = activity_store

    async def create_task(self, task: Task) -> None:
        """创建任务记录（不含日志条目，不自动提交）"""
        await self._conn.execute(
            f"""
            INSERT INTO tasks ({_SELECT_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.title,
                task.description,
                task.status.value,
                task.due_date.isoformat(),
                1 if task.has_time else 0,
                task.created_by.model_dump_json(),
                task.last_updated_by.model_dump_json() if task.last_updated_by else None,
                json.dumps(task.assigned_users, ensure_ascii=False),
                task.created_at.isoformat(),
                task.updated_at.isoformat(),
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务（含完整活动日志）"""
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        task = self._row_to_task(row)
        task.activity_log = await self._activity_store.get_entries_for_task(task_id)
        return task

    async def list_tasks(self, status: str | None = None) -> list[Task]:
        """查询任务列表，支持按状态筛选，按 created_at 倒序"""
        if status:
            cursor = await self._conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM tasks WHERE status = ? "
                "ORDER BY created_at DESC",
                (status,),
            )
        else:
            cursor = await self._conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM tasks ORDER BY created_at DESC"
            )
        rows = await cursor.fetchall()
        tasks = [self._row_to_task(row) for row in rows]

        entries = await self._activity_store.get_entries_for_tasks(
            [t.task_id for t in tasks]
        )
        for task in tasks:
            task.activity_log = entries.get(task.task_id, [])
        return tasks

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> None:
        """按字段更新任务（不自动提交）

        Raises:
            ValueError: 包含不允许更新的字段
        """
        unknown = set(fields) - set(_UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update task fields: {sorted(unknown)}")
        if not fields:
            return

        assignments = ", ".join(f"{column} = ?" for column in fields)
        values = [_UPDATABLE_COLUMNS[column](value) for column, value in fields.items()]
        await self._conn.execute(
            f"UPDATE tasks SET {assignments} WHERE task_id = ?",
            (*values, task_id),
        )

    async def delete_task(self, task_id: str) -> None:
        """物理删除任务记录（不自动提交）"""
        await self._conn.execute(
            "DELETE FROM tasks WHERE task_id = ?",
            (task_id,),
        )

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型（activity_log 由调用方装配）"""
        return Task(
            task_id=row[0],
            title=row[1],
            description=row[2],
            status=TaskStatus(row[3]),
            due_date=datetime.fromisoformat(row[4]),
            has_time=bool(row[5]),
            created_by=UserSnapshot.model_validate_json(row[6]),
            last_updated_by=(
                UserSnapshot.model_validate_json(row[7]) if row[7] else None
            ),
            assigned_users=json.loads(row[8]) if row[8] else [],
            created_at=datetime.fromisoformat(row[9]),
            updated_at=datetime.fromisoformat(row[10]),
        )
