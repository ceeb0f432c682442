"""集成测试共享 fixture

身份校验走真实的 HttpIdentityVerifier，由 httpx.MockTransport 模拟身份提供方：
token "tok-<uid>" 视为合法，其余返回 401。
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tasktrail.core.ledger import StatsLedger
from tasktrail.core.store import StoreGroup
from tasktrail.identity import HttpIdentityVerifier

USER_NAMES = {"u0": "Alice", "u1": "Bob", "u2": "Carol", "u3": "Dan"}


def _identity_provider(request: httpx.Request) -> httpx.Response:
    token = request.headers.get("Authorization", "").removeprefix("Bearer ")
    uid = token.removeprefix("tok-")
    if not token.startswith("tok-") or uid not in USER_NAMES:
        return httpx.Response(401, json={"error": "invalid token"})
    return httpx.Response(
        200,
        json={"uid": uid, "email": f"{uid}@example.com", "name": USER_NAMES[uid]},
    )


@pytest.fixture
def as_user():
    """构造 Authorization 头：as_user("u1")"""

    def _headers(uid: str) -> dict[str, str]:
        return {"Authorization": f"Bearer tok-{uid}"}

    return _headers


@pytest_asyncio.fixture
async def integration_app(store_group: StoreGroup, tmp_db_path: Path, monkeypatch):
    """集成测试用 FastAPI app"""
    monkeypatch.setenv("TASKTRAIL_DB_PATH", str(tmp_db_path))
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from tasktrail.gateway.main import create_app

    app = create_app()
    app.state.store_group = store_group
    app.state.ledger = StatsLedger(store_group)
    app.state.identity_verifier = HttpIdentityVerifier(
        verify_url="http://identity.test/verify",
        transport=httpx.MockTransport(_identity_provider),
    )
    return app


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
