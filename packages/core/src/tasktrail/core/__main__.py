"""CLI 入口模块 -- python -m tasktrail.core <command>

支持的命令：
  recompute-stats  按当前任务状态重算全部用户统计
"""

import asyncio
import sys

from .config import get_db_path


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m tasktrail.core <command>")
        print("命令:")
        print("  recompute-stats  按当前任务状态重算全部用户统计")
        sys.exit(1)

    command = sys.argv[1]

    if command == "recompute-stats":
        asyncio.run(recompute_stats())
    else:
        print(f"未知命令: {command}")
        print("可用命令: recompute-stats")
        sys.exit(1)


async def recompute_stats() -> None:
    """执行统计重算"""
    from .ledger import StatsLedger
    from .store import create_store_group

    db_path = get_db_path()

    print(f"数据库路径: {db_path}")
    print("开始重算用户统计...")

    store_group = await create_store_group(db_path)

    try:
        updated = await StatsLedger(store_group).recompute_all()
        print(f"重算完成，更新 {updated} 个用户档案")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
