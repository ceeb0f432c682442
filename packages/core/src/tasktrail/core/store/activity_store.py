"""ActivityStore SQLite 实现

task_activity 表 append-only：只允许插入，条目仅随任务物理删除一并移除。
seq 同一 task 内严格单调递增，在 INSERT 语句内原子计算。
"""

import json
from collections import defaultdict
from datetime import datetime

import aiosqlite
from ulid import ULID

from ..models.activity import ActivityEntry
from ..models.enums import ActivityAction
from ..models.snapshot import UserSnapshot

_SELECT_COLUMNS = "task_id, seq, action, ts, acting_user, details"


class SqliteActivityStore:
    """ActivityStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_entry(self, task_id: str, entry: ActivityEntry) -> None:
        """追加日志条目（append-only）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO task_activity (entry_id, task_id, seq, action, ts,
                                       acting_user, details)
            SELECT ?, ?, COALESCE(MAX(seq), 0) + 1, ?, ?, ?, ?
            FROM task_activity WHERE task_id = ?
            """,
            (
                str(ULID()),
                task_id,
                entry.action.value,
                entry.timestamp.isoformat(),
                entry.acting_user.model_dump_json(),
                json.dumps(entry.details, ensure_ascii=False),
                task_id,
            ),
        )

    async def get_entries_for_task(self, task_id: str) -> list[ActivityEntry]:
        """查询指定任务的全部条目，按 seq 正序"""
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM task_activity WHERE task_id = ? ORDER BY seq ASC",
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    async def get_entries_for_tasks(
        self, task_ids: list[str]
    ) -> dict[str, list[ActivityEntry]]:
        """批量查询多个任务的条目，返回 task_id -> 有序条目列表"""
        grouped: dict[str, list[ActivityEntry]] = defaultdict(list)
        if not task_ids:
            return grouped
        placeholders = ", ".join("?" for _ in task_ids)
        cursor = await self._conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS} FROM task_activity
            WHERE task_id IN ({placeholders})
            ORDER BY task_id, seq ASC
            """,
            tuple(task_ids),
        )
        rows = await cursor.fetchall()
        for row in rows:
            grouped[row[0]].append(self._row_to_entry(row))
        return grouped

    async def count_entries(self, task_id: str) -> int:
        """统计指定任务的条目数"""
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM task_activity WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def delete_entries_for_task(self, task_id: str) -> None:
        """随任务物理删除一并移除全部条目（不自动提交）"""
        await self._conn.execute(
            "DELETE FROM task_activity WHERE task_id = ?",
            (task_id,),
        )

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> ActivityEntry:
        """将数据库行转换为 ActivityEntry 模型"""
        return ActivityEntry(
            action=ActivityAction(row[2]),
            timestamp=datetime.fromisoformat(row[3]),
            acting_user=UserSnapshot.model_validate_json(row[4]),
            details=json.loads(row[5]) if row[5] else {},
        )
