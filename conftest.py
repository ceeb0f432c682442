"""全局 pytest 配置 -- 临时 SQLite 数据库与 StoreGroup fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from tasktrail.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供已初始化的 StoreGroup（临时数据库）"""
    stores = await create_store_group(str(tmp_db_path))
    yield stores
    await stores.conn.close()
