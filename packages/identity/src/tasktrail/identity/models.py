"""数据模型 -- VerifiedIdentity"""

from pydantic import BaseModel, Field


class VerifiedIdentity(BaseModel):
    """身份提供方校验通过后返回的用户声明"""

    uid: str = Field(min_length=1, description="用户 ID")
    email: str = Field(default="", description="邮箱")
    name: str = Field(default="", description="显示名称")

    @property
    def display_name(self) -> str:
        """显示名称，缺省回退为 email"""
        return self.name or self.email
