"""UserService -- 用户档案业务逻辑

首次登录创建档案（stats 为空，由 StatsLedger 首次变更时初始化），
之后每次登录刷新 lastLogin。
"""

from datetime import UTC, datetime

import structlog
from tasktrail.core.exceptions import ProfileNotFoundError, ValidationError
from tasktrail.core.models import UserProfile, UserRole
from tasktrail.core.store import StoreGroup
from tasktrail.core.store.transaction import rename_profile, save_profile_login
from tasktrail.identity import VerifiedIdentity

log = structlog.get_logger()


class UserService:
    """用户档案服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._stores = store_group

    async def ensure_profile(self, identity: VerifiedIdentity) -> UserProfile:
        """确保当前用户有档案：不存在则创建，存在则刷新登录时间"""
        now = datetime.now(UTC)
        candidate = UserProfile(
            uid=identity.uid,
            email=identity.email,
            name=identity.display_name,
            role=UserRole.USER,
            created_at=now,
            last_login=now,
            updated_at=now,
        )
        async with self._stores.write_lock:
            created = await save_profile_login(
                self._stores.conn, self._stores.user_store, candidate, now
            )
        if created:
            await log.ainfo("profile_created", uid=identity.uid)

        return await self.get_profile(identity.uid)

    async def get_profile(self, uid: str) -> UserProfile:
        async with self._stores.write_lock:
            profile = await self._stores.user_store.get_profile(uid)
        if profile is None:
            raise ProfileNotFoundError(uid)
        return profile

    async def update_profile(self, uid: str, name: str | None) -> UserProfile:
        """修改显示名称

        Raises:
            ValidationError: 名称为空
            ProfileNotFoundError: 档案不存在
        """
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Name is required")

        async with self._stores.write_lock:
            touched = await rename_profile(
                self._stores.conn,
                self._stores.user_store,
                uid,
                cleaned,
                datetime.now(UTC),
            )
        if not touched:
            raise ProfileNotFoundError(uid)

        await log.ainfo("profile_updated", uid=uid)
        return await self.get_profile(uid)

    async def list_users(self) -> list[dict[str, str]]:
        """用户列表（指派下拉框用），name 缺省回退为 email"""
        async with self._stores.write_lock:
            profiles = await self._stores.user_store.list_profiles()
        return [
            {"uid": p.uid, "email": p.email, "name": p.name or p.email}
            for p in profiles
        ]
