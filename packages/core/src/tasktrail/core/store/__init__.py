"""TaskTrail Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .activity_store import SqliteActivityStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import (
    append_entry_only,
    apply_stat_change,
    create_task_with_entry,
    delete_task_with_history,
    rename_profile,
    save_profile_login,
    update_task_with_entry,
)
from .user_store import SqliteUserStore


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    write_lock 串行化同一连接上的写事务，避免并发请求的事务交错提交。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.activity_store = SqliteActivityStore(conn)
        self.task_store = SqliteTaskStore(conn, self.activity_store)
        self.user_store = SqliteUserStore(conn)


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteActivityStore",
    "SqliteUserStore",
    "init_db",
    "create_task_with_entry",
    "update_task_with_entry",
    "append_entry_only",
    "delete_task_with_history",
    "apply_stat_change",
    "save_profile_login",
    "rename_profile",
]
