"""FastAPI 依赖注入工具：数据库会话与登录校验。"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from classroom.config import get_settings
from classroom.db import get_db
from classroom.errors import ApiError, unauthorized
from classroom.models import UserRole
from classroom.schemas.auth import SessionUser
from classroom.services.auth import SessionService

__all__ = ["get_db", "extract_token", "get_current_user", "require_admin"]

session_service = SessionService()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def extract_token(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> Optional[str]:
    """优先读取 ``Authorization: Bearer``，其次回退到登录时写入的 Cookie。"""

    token = _bearer_token(authorization)
    if token:
        return token
    return request.cookies.get(get_settings().session_cookie_name) or None


def get_current_user(
    token: Optional[str] = Depends(extract_token),
    db: Session = Depends(get_db),
) -> SessionUser:
    """缺失、无效、过期的 token 统一返回 401 UNAUTHORIZED。"""

    resolved = session_service.resolve_session(db, token)
    if resolved is None:
        raise unauthorized()
    return resolved.user


def require_admin(current_user: SessionUser = Depends(get_current_user)) -> SessionUser:
    """要求管理员权限。"""
    if current_user.role != UserRole.ADMIN:
        raise ApiError(403, "FORBIDDEN")
    return current_user
