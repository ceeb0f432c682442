"""任务写入 + 日志追加的原子事务封装

任务字段更新与活动日志追加在同一 SQLite 事务内提交，
任何时刻都不会观察到状态与日志不一致的任务。
"""

from datetime import datetime
from typing import Any

import aiosqlite

from ..models.activity import ActivityEntry
from ..models.enums import StatKind
from ..models.task import Task
from ..models.user import UserProfile
from .activity_store import SqliteActivityStore
from .protocols import UserStore
from .task_store import SqliteTaskStore
from .user_store import SqliteUserStore


async def create_task_with_entry(
    conn: aiosqlite.Connection,
    task_store: SqliteTaskStore,
    activity_store: SqliteActivityStore,
    task: Task,
    entry: ActivityEntry,
) -> None:
    """在同一事务内写入新任务与 created 条目

    Raises:
        Exception: 如果事务提交失败，自动回滚
    """
    try:
        await task_store.create_task(task)
        await activity_store.append_entry(task.task_id, entry)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def update_task_with_entry(
    conn: aiosqlite.Connection,
    task_store: SqliteTaskStore,
    activity_store: SqliteActivityStore,
    task_id: str,
    fields: dict[str, Any],
    entry: ActivityEntry,
) -> None:
    """在同一事务内更新任务字段并追加一条日志

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        task_store: TaskStore 实例
        activity_store: ActivityStore 实例
        task_id: 任务 ID
        fields: 需要更新的字段
        entry: 要追加的日志条目
    """
    try:
        await task_store.update_task(task_id, fields)
        await activity_store.append_entry(task_id, entry)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def append_entry_only(
    conn: aiosqlite.Connection,
    activity_store: SqliteActivityStore,
    task_id: str,
    entry: ActivityEntry,
) -> None:
    """仅追加日志条目（不修改任务字段）"""
    try:
        await activity_store.append_entry(task_id, entry)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def delete_task_with_history(
    conn: aiosqlite.Connection,
    task_store: SqliteTaskStore,
    activity_store: SqliteActivityStore,
    task_id: str,
) -> None:
    """物理删除任务及其全部日志"""
    try:
        await activity_store.delete_entries_for_task(task_id)
        await task_store.delete_task(task_id)
        await conn.commit()
    except Exception:
        await conn.rollback()
        raise


async def apply_stat_change(
    conn: aiosqlite.Connection,
    user_store: UserStore,
    uid: str,
    kind: StatKind,
    delta: int,
    now: datetime,
) -> bool:
    """单个用户单个计数器的原子变更（+1 或受保护的 -1）

    Returns:
        True 如果命中用户档案
    """
    try:
        if delta > 0:
            touched = await user_store.increment_stat(uid, kind, now)
        else:
            touched = await user_store.decrement_stat_guarded(uid, kind, now)
        await conn.commit()
        return touched
    except Exception:
        await conn.rollback()
        raise


async def save_profile_login(
    conn: aiosqlite.Connection,
    user_store: SqliteUserStore,
    profile: UserProfile,
    now: datetime,
) -> bool:
    """首次登录创建档案，否则刷新 last_login

    Returns:
        True 如果本次新建了档案
    """
    try:
        existing = await user_store.get_profile(profile.uid)
        if existing is None:
            await user_store.create_profile(profile)
        else:
            await user_store.record_login(profile.uid, now)
        await conn.commit()
        return existing is None
    except Exception:
        await conn.rollback()
        raise


async def rename_profile(
    conn: aiosqlite.Connection,
    user_store: SqliteUserStore,
    uid: str,
    name: str,
    now: datetime,
) -> bool:
    """修改显示名称，返回是否命中档案"""
    try:
        touched = await user_store.update_name(uid, name, now)
        await conn.commit()
        return touched
    except Exception:
        await conn.rollback()
        raise
