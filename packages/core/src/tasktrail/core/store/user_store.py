"""UserStore SQLite 实现

计数器更新均为单条 UPDATE 语句（COALESCE + 增量），不做先读后写。
统计列全部为 NULL 时视为 stats 尚未初始化。
"""

from datetime import datetime

import aiosqlite

from ..models.enums import StatKind, UserRole
from ..models.user import UserProfile, UserStats

_SELECT_COLUMNS = (
    "uid, email, name, role, tasks_created, tasks_assigned, tasks_completed, "
    "last_task_completed_at, created_at, last_login, updated_at"
)

# 计数器名称 -> 列名（白名单，禁止拼接外部输入）
STAT_COLUMNS: dict[StatKind, str] = {
    StatKind.TASKS_CREATED: "tasks_created",
    StatKind.TASKS_ASSIGNED: "tasks_assigned",
    StatKind.TASKS_COMPLETED: "tasks_completed",
}


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_profile(self, profile: UserProfile) -> None:
        """创建用户档案（不自动提交）"""
        stats = profile.stats
        await self._conn.execute(
            f"""
            INSERT INTO users ({_SELECT_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                profile.uid,
                profile.email,
                profile.name,
                profile.role.value,
                stats.tasks_created if stats else None,
                stats.tasks_assigned if stats else None,
                stats.tasks_completed if stats else None,
                (
                    stats.last_task_completed_at.isoformat()
                    if stats and stats.last_task_completed_at
                    else None
                ),
                profile.created_at.isoformat(),
                profile.last_login.isoformat(),
                profile.updated_at.isoformat(),
            ),
        )

    async def get_profile(self, uid: str) -> UserProfile | None:
        """根据 uid 查询用户档案"""
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM users WHERE uid = ?",
            (uid,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_profile(row)

    async def list_profiles(self) -> list[UserProfile]:
        """查询全部用户档案，按 uid 排序"""
        cursor = await self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM users ORDER BY uid ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_profile(row) for row in rows]

    async def record_login(self, uid: str, now: datetime) -> None:
        """刷新最近登录时间（不自动提交）"""
        await self._conn.execute(
            "UPDATE users SET last_login = ?, updated_at = ? WHERE uid = ?",
            (now.isoformat(), now.isoformat(), uid),
        )

    async def update_name(self, uid: str, name: str, now: datetime) -> bool:
        """修改显示名称（不自动提交），返回是否命中档案"""
        cursor = await self._conn.execute(
            "UPDATE users SET name = ?, updated_at = ? WHERE uid = ?",
            (name, now.isoformat(), uid),
        )
        return cursor.rowcount > 0

    async def increment_stat(self, uid: str, kind: StatKind, now: datetime) -> bool:
        """原子 +1（不自动提交），返回是否命中档案

        stats 未初始化时三个计数器先按 0 处理；
        tasksCompleted +1 时同时刷新 last_task_completed_at。
        """
        deltas = [1 if kind == k else 0 for k in STAT_COLUMNS]
        completed_at = now.isoformat() if kind == StatKind.TASKS_COMPLETED else None
        cursor = await self._conn.execute(
            """
            UPDATE users SET
                tasks_created = COALESCE(tasks_created, 0) + ?,
                tasks_assigned = COALESCE(tasks_assigned, 0) + ?,
                tasks_completed = COALESCE(tasks_completed, 0) + ?,
                last_task_completed_at = COALESCE(?, last_task_completed_at),
                updated_at = ?
            WHERE uid = ?
            """,
            (*deltas, completed_at, now.isoformat(), uid),
        )
        return cursor.rowcount > 0

    async def decrement_stat_guarded(
        self, uid: str, kind: StatKind, now: datetime
    ) -> bool:
        """原子 -1 且不低于 0（不自动提交），返回是否命中档案

        不修改 last_task_completed_at。
        """
        column = STAT_COLUMNS[StatKind(kind)]
        cursor = await self._conn.execute(
            f"""
            UPDATE users SET
                tasks_created = COALESCE(tasks_created, 0),
                tasks_assigned = COALESCE(tasks_assigned, 0),
                tasks_completed = COALESCE(tasks_completed, 0),
                {column} = MAX(COALESCE({column}, 0) - 1, 0),
                updated_at = ?
            WHERE uid = ?
            """,
            (now.isoformat(), uid),
        )
        return cursor.rowcount > 0

    async def replace_stats(
        self,
        uid: str,
        created: int,
        assigned: int,
        completed: int,
        now: datetime,
    ) -> bool:
        """覆盖三个计数器（用于重算修复，保留 last_task_completed_at）"""
        cursor = await self._conn.execute(
            """
            UPDATE users SET
                tasks_created = ?, tasks_assigned = ?, tasks_completed = ?,
                updated_at = ?
            WHERE uid = ?
            """,
            (created, assigned, completed, now.isoformat(), uid),
        )
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_profile(row: aiosqlite.Row) -> UserProfile:
        """将数据库行转换为 UserProfile 模型"""
        stats = None
        if any(value is not None for value in (row[4], row[5], row[6])):
            stats = UserStats(
                tasks_created=row[4] or 0,
                tasks_assigned=row[5] or 0,
                tasks_completed=row[6] or 0,
                last_task_completed_at=(
                    datetime.fromisoformat(row[7]) if row[7] else None
                ),
            )
        return UserProfile(
            uid=row[0],
            email=row[1],
            name=row[2],
            role=UserRole(row[3]),
            stats=stats,
            created_at=datetime.fromisoformat(row[8]),
            last_login=datetime.fromisoformat(row[9]),
            updated_at=datetime.fromisoformat(row[10]),
        )
