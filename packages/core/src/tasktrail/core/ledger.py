"""StatsLedger -- 用户统计计数器账本

拥有 tasksCreated / tasksAssigned / tasksCompleted 三个计数器，
每次变更都是针对单个用户单个计数器的一条原子 UPDATE。
不依赖任务变更服务，可单独调用（例如数据修复）。

行为约定：
- 用户档案不存在时，变更被静默丢弃（仅 debug 日志）
- 受保护的递减不会低于 0，且不修改 lastTaskCompletedAt
- 存储异常向上抛出，由调用方决定是否吞掉
"""

from datetime import UTC, datetime

import structlog

from .models.enums import StatKind
from .models.user import StatsSummary
from .projection import compute_user_stats, recompute_all_stats
from .store import StoreGroup
from .store.transaction import apply_stat_change

log = structlog.get_logger()


class StatsLedger:
    """用户统计账本"""

    def __init__(self, stores: StoreGroup) -> None:
        self._stores = stores

    async def increment(self, uid: str, kind: StatKind) -> bool:
        """计数器 +1；tasksCompleted 同时刷新 lastTaskCompletedAt

        Returns:
            True 如果命中用户档案
        """
        return await self._apply(uid, StatKind(kind), 1)

    async def decrement_guarded(self, uid: str, kind: StatKind) -> bool:
        """计数器 -1，但不低于 0

        Returns:
            True 如果命中用户档案
        """
        return await self._apply(uid, StatKind(kind), -1)

    async def get_stats(self, uid: str) -> StatsSummary:
        """查询用户统计

        档案带有 stats 时直接返回计数器；否则扫描全部任务重算。
        """
        async with self._stores.write_lock:
            profile = await self._stores.user_store.get_profile(uid)
            if profile is not None and profile.stats is not None:
                return StatsSummary(
                    created=profile.stats.tasks_created,
                    assigned=profile.stats.tasks_assigned,
                    completed=profile.stats.tasks_completed,
                )
            tasks = await self._stores.task_store.list_tasks()

        log.debug("stats_fallback_recompute", uid=uid, task_count=len(tasks))
        return compute_user_stats(tasks, uid)

    async def recompute_all(self) -> int:
        """用当前任务状态重算并覆盖全部用户计数器"""
        return await recompute_all_stats(self._stores)

    async def _apply(self, uid: str, kind: StatKind, delta: int) -> bool:
        async with self._stores.write_lock:
            touched = await apply_stat_change(
                self._stores.conn,
                self._stores.user_store,
                uid,
                kind,
                delta,
                datetime.now(UTC),
            )
        if not touched:
            log.debug("stats_update_dropped_no_profile", uid=uid, kind=kind.value)
        return touched
