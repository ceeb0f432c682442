"""用户路由 -- 档案与统计

GET /api/users/me 在首次调用时创建档案（对应首次登录）。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from tasktrail.identity import VerifiedIdentity

from ..deps import get_current_user, get_ledger, get_store_group
from ..services.user_service import UserService

router = APIRouter()


class ProfileUpdateRequest(BaseModel):
    """档案更新请求体"""

    name: str


@router.get("/users")
async def list_users(
    identity: VerifiedIdentity = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    """全部用户 {uid, email, name}"""
    return await UserService(store_group).list_users()


@router.get("/users/me")
async def get_my_profile(
    identity: VerifiedIdentity = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    profile = await UserService(store_group).ensure_profile(identity)
    return profile.to_api()


@router.patch("/users/me")
async def update_my_profile(
    body: ProfileUpdateRequest,
    identity: VerifiedIdentity = Depends(get_current_user),
    store_group=Depends(get_store_group),
):
    """修改显示名称（档案不存在时先创建）"""
    service = UserService(store_group)
    await service.ensure_profile(identity)
    profile = await service.update_profile(identity.uid, body.name)
    return profile.to_api()


@router.get("/users/{uid}/stats")
async def get_user_stats(
    uid: str,
    identity: VerifiedIdentity = Depends(get_current_user),
    ledger=Depends(get_ledger),
):
    """用户统计 {created, assigned, completed}"""
    stats = await ledger.get_stats(uid)
    return stats.to_api()
