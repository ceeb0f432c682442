"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from tasktrail.core.models import (
    Task,
    TaskStatus,
    UserProfile,
    UserSnapshot,
)
from tasktrail.core.store import StoreGroup


@pytest.fixture
def alice() -> UserSnapshot:
    return UserSnapshot(uid="u0", name="Alice", email="alice@example.com")


@pytest.fixture
def make_task(alice: UserSnapshot) -> Callable[..., Task]:
    """构造 Task（未持久化）"""

    def _make(task_id: str = "01JTASKTEST000000000000001", **overrides) -> Task:
        now = datetime.now(UTC)
        values = {
            "task_id": task_id,
            "title": "Draft order",
            "status": TaskStatus.PENDING,
            "due_date": datetime(2024, 6, 1, tzinfo=UTC),
            "created_by": alice,
            "assigned_users": ["u1", "u2"],
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        return Task(**values)

    return _make


@pytest_asyncio.fixture
async def make_profile(store_group: StoreGroup):
    """写入用户档案（stats 为空）"""

    async def _make(uid: str, name: str = "", email: str = "") -> UserProfile:
        now = datetime.now(UTC)
        profile = UserProfile(
            uid=uid,
            email=email or f"{uid}@example.com",
            name=name,
            created_at=now,
            last_login=now,
            updated_at=now,
        )
        await store_group.user_store.create_profile(profile)
        await store_group.conn.commit()
        return profile

    return _make
