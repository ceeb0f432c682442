"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、API 前缀、CORS 来源等可配置项。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKTRAIL_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKTRAIL_DB_PATH",
        str(_get_base_dir() / "sqlite" / "tasktrail.db"),
    )


def get_cors_origins() -> list[str]:
    """获取允许的 CORS 来源（逗号分隔）"""
    raw = os.environ.get("TASKTRAIL_CORS_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# 所有业务路由的统一前缀
API_PREFIX: str = "/api"

# 任务列表支持的排序键
TASK_SORT_KEYS: tuple[str, ...] = (
    "dueDate-asc",
    "dueDate-desc",
    "status-asc",
    "status-desc",
)
