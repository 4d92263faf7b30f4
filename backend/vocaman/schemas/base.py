from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# 整数ID在接口中统一序列化为字符串，避免前端大整数精度丢失
IdStr = Annotated[int, PlainSerializer(lambda v: str(v), return_type=str)]


class ApiModel(BaseModel):
    """接口模型基类

    字段在 JSON 中使用 camelCase（如 childUserId），同时接受 snake_case 输入；
    可直接从 ORM 对象构造。
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
