"""接口数据契约的公共基类。

前端沿用 camelCase 字段（``classId``、``studentNo`` 等），这里通过别名生成器
统一映射到 Python 的 snake_case 属性。请求模型拒绝未声明的字段，整数字段
不做字符串/布尔的隐式转换。
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from classroom.errors import MAX_ID


PositiveId = Annotated[int, Field(strict=True, gt=0, le=MAX_ID)]
NonEmptyStr = Annotated[str, Field(min_length=1)]


class RequestModel(BaseModel):
    """请求体基类。"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ResponseModel(BaseModel):
    """响应体基类，可直接从 ORM 对象构造。"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OkResponse(ResponseModel):
    ok: bool = True


class IdResponse(OkResponse):
    id: int


class DeleteResponse(IdResponse):
    deleted: bool
