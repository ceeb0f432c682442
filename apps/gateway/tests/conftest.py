"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient + 静态 token 身份"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tasktrail.core.ledger import StatsLedger
from tasktrail.core.models import UserSnapshot
from tasktrail.core.store import StoreGroup
from tasktrail.gateway.services.task_service import TaskService
from tasktrail.gateway.services.user_service import UserService
from tasktrail.identity import StaticIdentityVerifier, VerifiedIdentity

# token -> 身份；u0 为默认操作者
IDENTITIES: dict[str, VerifiedIdentity] = {
    f"token-{uid}": VerifiedIdentity(uid=uid, email=f"{uid}@example.com", name=name)
    for uid, name in [("u0", "Alice"), ("u1", "Bob"), ("u2", "Carol"), ("u3", "")]
}


@pytest.fixture
def auth():
    """构造 Authorization 头：auth("u1")"""

    def _auth(uid: str = "u0") -> dict[str, str]:
        return {"Authorization": f"Bearer token-{uid}"}

    return _auth


@pytest.fixture
def actor():
    """构造操作者快照：actor("u1")"""

    def _actor(uid: str = "u0") -> UserSnapshot:
        identity = IDENTITIES[f"token-{uid}"]
        return UserSnapshot(uid=uid, name=identity.display_name, email=identity.email)

    return _actor


@pytest_asyncio.fixture
async def profiles(store_group: StoreGroup) -> StoreGroup:
    """为 u0..u3 创建用户档案（stats 为空）"""
    service = UserService(store_group)
    for identity in IDENTITIES.values():
        await service.ensure_profile(identity)
    return store_group


@pytest.fixture
def ledger(store_group: StoreGroup) -> StatsLedger:
    return StatsLedger(store_group)


@pytest.fixture
def task_service(store_group: StoreGroup, ledger: StatsLedger) -> TaskService:
    return TaskService(store_group, ledger)


@pytest_asyncio.fixture
async def app(store_group: StoreGroup, tmp_db_path: Path, monkeypatch):
    """创建测试用 FastAPI app 实例（手动初始化，绕过 lifespan）"""
    monkeypatch.setenv("TASKTRAIL_DB_PATH", str(tmp_db_path))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from tasktrail.gateway.main import create_app

    application = create_app()
    application.state.store_group = store_group
    application.state.ledger = StatsLedger(store_group)
    application.state.identity_verifier = StaticIdentityVerifier(IDENTITIES)
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
