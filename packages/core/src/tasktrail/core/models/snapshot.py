"""UserSnapshot -- 操作者身份的反规范化快照"""

from pydantic import Field

from .base import CamelModel


class UserSnapshot(CamelModel):
    """操作者身份快照（非实时引用）"""

    uid: str = Field(description="用户 ID")
    name: str = Field(default="", description="显示名称，缺省回退为 email")
    email: str = Field(default="", description="邮箱")
