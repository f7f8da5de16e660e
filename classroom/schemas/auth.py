"""登录会话相关的数据契约。"""

from datetime import datetime

from classroom.models import UserRole
from classroom.schemas.base import ResponseModel


class SessionUser(ResponseModel):
    id: int
    username: str
    name: str
    role: UserRole


class SessionInfo(ResponseModel):
    """``resolve_session`` 的返回值：token、过期时间与所属用户。"""

    token: str
    expires_at: datetime
    user: SessionUser
