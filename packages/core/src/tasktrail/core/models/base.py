"""模型基类 -- 对外 JSON 统一 camelCase

Python 属性保持 snake_case，序列化时通过 alias 输出 camelCase，
反序列化时两种写法均可接受。
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 别名基类"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_api(self) -> dict:
        """序列化为 API 响应体（JSON 兼容 + camelCase）"""
        return self.model_dump(mode="json", by_alias=True)
