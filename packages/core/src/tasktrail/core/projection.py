"""统计重算模块 -- 从任务全集推导用户计数器

用于两种场景：
1. StatsLedger.get_stats 在档案无 stats 时的回退计算
2. recompute-stats 命令修复全部用户的计数器
"""

import time
from datetime import UTC, datetime

import structlog

from .models.enums import TaskStatus
from .models.task import Task
from .models.user import StatsSummary
from .store import StoreGroup

log = structlog.get_logger()


def compute_user_stats(tasks: list[Task], uid: str) -> StatsSummary:
    """按当前任务状态计算单个用户的统计

    Args:
        tasks: 全部任务
        uid: 用户 ID

    Returns:
        created = createdBy 为该用户的任务数；
        assigned = 指派给该用户的任务数；
        completed = 指派给该用户且状态为 Completed 的任务数
    """
    created = sum(1 for t in tasks if t.created_by.uid == uid)
    assigned_tasks = [t for t in tasks if uid in t.assigned_users]
    completed = sum(1 for t in assigned_tasks if t.status == TaskStatus.COMPLETED)
    return StatsSummary(
        created=created,
        assigned=len(assigned_tasks),
        completed=completed,
    )


async def recompute_all_stats(stores: StoreGroup) -> int:
    """用重算结果覆盖所有用户档案的计数器

    注意：增量计数器在取消指派、删除任务时不回退，
    重算后这些"历史"计数会被当前状态取代。

    Returns:
        被更新的用户档案数
    """
    start_time = time.monotonic()

    updated = 0
    async with stores.write_lock:
        # 读取与覆盖写入同在锁内
        tasks = await stores.task_store.list_tasks()
        profiles = await stores.user_store.list_profiles()

        await log.ainfo(
            "stats_recompute_started",
            task_count=len(tasks),
            profile_count=len(profiles),
        )

        now = datetime.now(UTC)
        try:
            for profile in profiles:
                summary = compute_user_stats(tasks, profile.uid)
                if await stores.user_store.replace_stats(
                    profile.uid,
                    summary.created,
                    summary.assigned,
                    summary.completed,
                    now,
                ):
                    updated += 1
            await stores.conn.commit()
        except Exception:
            await stores.conn.rollback()
            raise

    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    await log.ainfo(
        "stats_recompute_completed",
        profile_count=updated,
        elapsed_ms=elapsed_ms,
    )
    return updated
