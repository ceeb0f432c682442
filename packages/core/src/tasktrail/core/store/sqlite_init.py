"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id          TEXT PRIMARY KEY,
    title            TEXT NOT NULL,
    description      TEXT NOT NULL DEFAULT '',
    status           TEXT NOT NULL DEFAULT 'Pending',
    due_date         TEXT NOT NULL,
    has_time         INTEGER NOT NULL DEFAULT 0,
    created_by       TEXT NOT NULL DEFAULT '{}',
    last_updated_by  TEXT,
    assigned_users   TEXT NOT NULL DEFAULT '[]',
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at DESC);",
]

# task_activity 表 DDL（append-only）
_ACTIVITY_DDL = """
CREATE TABLE IF NOT EXISTS task_activity (
    entry_id     TEXT PRIMARY KEY,
    task_id      TEXT NOT NULL,
    seq          INTEGER NOT NULL,
    action       TEXT NOT NULL,
    ts           TEXT NOT NULL,
    acting_user  TEXT NOT NULL DEFAULT '{}',
    details      TEXT NOT NULL DEFAULT '{}',

    FOREIGN KEY (task_id) REFERENCES tasks(task_id)
);
"""

_ACTIVITY_INDEXES = [
    # 任务内序号唯一约束（保证日志顺序即追加顺序）
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_activity_task_seq ON task_activity(task_id, seq);",
]

# users 表 DDL；统计列为 NULL 表示 stats 尚未初始化
_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    uid                     TEXT PRIMARY KEY,
    email                   TEXT NOT NULL DEFAULT '',
    name                    TEXT NOT NULL DEFAULT '',
    role                    TEXT NOT NULL DEFAULT 'user',
    tasks_created           INTEGER,
    tasks_assigned          INTEGER,
    tasks_completed         INTEGER,
    last_task_completed_at  TEXT,
    created_at              TEXT NOT NULL,
    last_login              TEXT NOT NULL,
    updated_at              TEXT NOT NULL
);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_TASKS_DDL)
    await conn.execute(_ACTIVITY_DDL)
    await conn.execute(_USERS_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES + _ACTIVITY_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
