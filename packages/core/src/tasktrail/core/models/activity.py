"""ActivityEntry Domain Model

活动日志 append-only：条目一旦追加不可修改，仅随任务物理删除一并移除。
details 为按 action 区分的结构化 payload，各 payload 类型见下方定义。
"""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel
from .enums import ActivityAction, TaskStatus
from .snapshot import UserSnapshot


class FrozenDetails(dict):
    """只读 details 映射，写操作抛出 TypeError"""

    def _readonly(self, *args: Any, **kwargs: Any) -> None:
        raise TypeError("activity entry details are read-only")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    update = _readonly
    pop = _readonly
    popitem = _readonly
    clear = _readonly
    setdefault = _readonly

    def __reduce__(self):
        return (FrozenDetails, (dict(self),))


class ActivityEntry(CamelModel):
    """活动日志条目（不可变）"""

    model_config = ConfigDict(frozen=True)

    action: ActivityAction = Field(description="动作类型")
    timestamp: datetime = Field(description="发生时间")
    acting_user: UserSnapshot = Field(description="操作者快照")
    details: dict[str, Any] = Field(
        default_factory=dict, validate_default=True, description="按 action 区分的 payload"
    )

    @field_validator("details")
    @classmethod
    def _freeze_details(cls, v: dict[str, Any]) -> dict[str, Any]:
        return FrozenDetails(v)


class CreatedDetails(CamelModel):
    """created 条目 payload"""

    initial_status: TaskStatus
    assigned_users: list[str] = Field(default_factory=list)


class StatusUpdatedDetails(CamelModel):
    """status_updated 条目 payload"""

    previous_status: TaskStatus
    new_status: TaskStatus


class FieldChange(CamelModel):
    """updated 条目中单个字段的变更"""

    from_: Any = Field(alias="from")
    to: Any


class AssignmentChange(CamelModel):
    """updated 条目中指派用户集合的变更"""

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    current: list[str] = Field(default_factory=list)
