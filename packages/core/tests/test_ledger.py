"""StatsLedger 单元测试

测试内容：
1. 首次 +1 初始化全部计数器
2. tasksCompleted +1 刷新 lastTaskCompletedAt
3. 受保护的 -1 不低于 0，且不修改 lastTaskCompletedAt
4. 档案不存在时静默丢弃
5. get_stats 在 stats 为空时回退为重算，读取持有写锁
"""

import asyncio

import pytest
from tasktrail.core.activity import created_entry
from tasktrail.core.ledger import StatsLedger
from tasktrail.core.models import StatKind, StatsSummary, TaskStatus
from tasktrail.core.store.transaction import create_task_with_entry


class TestIncrement:
    """increment"""

    async def test_first_increment_initializes_all_counters(self, store_group, make_profile):
        await make_profile("u1")
        ledger = StatsLedger(store_group)

        assert await ledger.increment("u1", StatKind.TASKS_ASSIGNED) is True

        profile = await store_group.user_store.get_profile("u1")
        assert profile.stats is not None
        assert profile.stats.tasks_created == 0
        assert profile.stats.tasks_assigned == 1
        assert profile.stats.tasks_completed == 0
        assert profile.stats.last_task_completed_at is None

    async def test_completed_sets_timestamp(self, store_group, make_profile):
        await make_profile("u1")
        ledger = StatsLedger(store_group)

        await ledger.increment("u1", StatKind.TASKS_COMPLETED)

        profile = await store_group.user_store.get_profile("u1")
        assert profile.stats.tasks_completed == 1
        assert profile.stats.last_task_completed_at is not None

    async def test_accepts_raw_kind_string(self, store_group, make_profile):
        await make_profile("u1")
        await StatsLedger(store_group).increment("u1", "tasksCreated")
        profile = await store_group.user_store.get_profile("u1")
        assert profile.stats.tasks_created == 1

    async def test_missing_profile_dropped(self, store_group):
        ledger = StatsLedger(store_group)
        assert await ledger.increment("ghost", StatKind.TASKS_CREATED) is False
        assert await store_group.user_store.get_profile("ghost") is None


class TestDecrementGuarded:
    """decrement_guarded"""

    async def test_decrement_at_zero_stays_zero(self, store_group, make_profile):
        await make_profile("u1")
        ledger = StatsLedger(store_group)

        await ledger.decrement_guarded("u1", StatKind.TASKS_COMPLETED)
        await ledger.decrement_guarded("u1", StatKind.TASKS_COMPLETED)

        profile = await store_group.user_store.get_profile("u1")
        assert profile.stats.tasks_completed == 0

    async def test_decrement_keeps_completion_timestamp(self, store_group, make_profile):
        await make_profile("u1")
        ledger = StatsLedger(store_group)
        await ledger.increment("u1", StatKind.TASKS_COMPLETED)
        before = (await store_group.user_store.get_profile("u1")).stats.last_task_completed_at

        await ledger.decrement_guarded("u1", StatKind.TASKS_COMPLETED)

        stats = (await store_group.user_store.get_profile("u1")).stats
        assert stats.tasks_completed == 0
        assert stats.last_task_completed_at == before


class TestGetStats:
    """get_stats"""

    async def test_reads_counters(self, store_group, make_profile):
        await make_profile("u1")
        ledger = StatsLedger(store_group)
        await ledger.increment("u1", StatKind.TASKS_CREATED)
        await ledger.increment("u1", StatKind.TASKS_ASSIGNED)

        assert await ledger.get_stats("u1") == StatsSummary(created=1, assigned=1, completed=0)

    async def test_fallback_recomputes_from_tasks(self, store_group, make_task, alice):
        tasks = [
            make_task("01JTASKTEST000000000000001", assigned_users=["u1"]),
            make_task(
                "01JTASKTEST000000000000002",
                assigned_users=["u1", "u2"],
                status=TaskStatus.COMPLETED,
            ),
        ]
        for task in tasks:
            await create_task_with_entry(
                store_group.conn,
                store_group.task_store,
                store_group.activity_store,
                task,
                created_entry(alice, task.status, task.assigned_users),
            )

        ledger = StatsLedger(store_group)

        assert await ledger.get_stats("u1") == StatsSummary(created=0, assigned=2, completed=1)
        assert await ledger.get_stats("u0") == StatsSummary(created=2, assigned=0, completed=0)
        assert await ledger.get_stats("nobody") == StatsSummary()

    async def test_reads_under_write_lock(self, store_group, monkeypatch):
        """读取与写入共用同一连接，读取须持锁以免看到未提交数据"""
        seen: list[tuple[str, bool]] = []
        get_profile = store_group.user_store.get_profile
        list_tasks = store_group.task_store.list_tasks

        async def tracked_get_profile(uid):
            seen.append(("get_profile", store_group.write_lock.locked()))
            return await get_profile(uid)

        async def tracked_list_tasks(*args, **kwargs):
            seen.append(("list_tasks", store_group.write_lock.locked()))
            return await list_tasks(*args, **kwargs)

        monkeypatch.setattr(store_group.user_store, "get_profile", tracked_get_profile)
        monkeypatch.setattr(store_group.task_store, "list_tasks", tracked_list_tasks)

        await StatsLedger(store_group).get_stats("nobody")

        assert seen == [("get_profile", True), ("list_tasks", True)]
        assert not store_group.write_lock.locked()


class _FakeConn:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class _FakeUserStore:
    """内存计数器，模拟 UserStore 的原子更新"""

    def __init__(self, uids: list[str]) -> None:
        self.counters = {uid: dict.fromkeys(StatKind, 0) for uid in uids}

    async def increment_stat(self, uid, kind, now) -> bool:
        if uid not in self.counters:
            return False
        self.counters[uid][kind] += 1
        return True

    async def decrement_stat_guarded(self, uid, kind, now) -> bool:
        if uid not in self.counters:
            return False
        self.counters[uid][kind] = max(self.counters[uid][kind] - 1, 0)
        return True


class _FakeStores:
    def __init__(self, user_store) -> None:
        self.conn = _FakeConn()
        self.write_lock = asyncio.Lock()
        self.user_store = user_store


class TestLedgerWithFakeStore:
    """账本只依赖 UserStore 接口，可脱离 SQLite 测试"""

    async def test_increment_and_guarded_decrement(self):
        user_store = _FakeUserStore(["u1"])
        stores = _FakeStores(user_store)
        ledger = StatsLedger(stores)

        await ledger.increment("u1", StatKind.TASKS_COMPLETED)
        await ledger.decrement_guarded("u1", StatKind.TASKS_COMPLETED)
        await ledger.decrement_guarded("u1", StatKind.TASKS_COMPLETED)

        assert user_store.counters["u1"][StatKind.TASKS_COMPLETED] == 0
        assert stores.conn.commits == 3

    async def test_store_error_propagates_and_rolls_back(self):
        class BrokenUserStore(_FakeUserStore):
            async def increment_stat(self, uid, kind, now) -> bool:
                raise RuntimeError("store offline")

        stores = _FakeStores(BrokenUserStore(["u1"]))

        with pytest.raises(RuntimeError):
            await StatsLedger(stores).increment("u1", StatKind.TASKS_CREATED)
        assert stores.conn.rollbacks == 1
