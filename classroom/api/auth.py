"""登录、登出与当前用户。"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from classroom.config import get_settings
from classroom.dependencies import extract_token, get_current_user, get_db, session_service
from classroom.schemas.auth import SessionInfo, SessionUser
from classroom.schemas.base import NonEmptyStr, OkResponse, RequestModel, ResponseModel

router = APIRouter()


# === Schemas ===

class LoginRequest(RequestModel):
    username: NonEmptyStr
    password: NonEmptyStr


class MeResponse(ResponseModel):
    user: SessionUser


# === API 端点 ===

@router.post("/login", response_model=SessionInfo)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """用户名密码登录，返回会话 token 并写入 Cookie。"""
    settings = get_settings()
    info = session_service.login(db, payload.username, payload.password)

    response.set_cookie(
        settings.session_cookie_name,
        info.token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return info


@router.get("/me", response_model=MeResponse)
def me(current_user: SessionUser = Depends(get_current_user)):
    """获取当前登录用户信息。"""
    return MeResponse(user=current_user)


@router.post("/logout", response_model=OkResponse)
def logout(
    response: Response,
    token: Optional[str] = Depends(extract_token),
    db: Session = Depends(get_db),
):
    """注销当前会话；没有会话时同样返回成功。"""
    if token:
        session_service.revoke_session(db, token)
    response.delete_cookie(get_settings().session_cookie_name, path="/")
    return OkResponse()
