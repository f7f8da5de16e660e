"""密码校验与登录会话管理。

会话 token 为随机的 48 位十六进制串，有效期默认 7 天；过期会话不做后台
清理，而是在下一次解析失败时顺手删除。
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from classroom.config import get_settings
from classroom.errors import ApiError
from classroom.models import AuthSession, User
from classroom.schemas.auth import SessionInfo, SessionUser

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    rounds = rounds or get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # 库中存的不是合法的 bcrypt 串
        return False


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _session_info(session: AuthSession, user: User) -> SessionInfo:
    return SessionInfo(
        token=session.token,
        expires_at=_as_utc(session.expires_at),
        user=SessionUser(
            id=user.id, username=user.username, name=user.name or "", role=user.role
        ),
    )


class SessionService:
    """签发、解析与注销登录会话。"""

    def __init__(self, ttl_days: Optional[int] = None) -> None:
        self.ttl_days = ttl_days if ttl_days is not None else get_settings().session_ttl_days

    def create_session(self, db: Session, user_id: int) -> AuthSession:
        session = AuthSession(
            token=secrets.token_hex(TOKEN_BYTES),
            user_id=user_id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=self.ttl_days),
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    def resolve_session(self, db: Session, token: Optional[str]) -> Optional[SessionInfo]:
        """根据 token 找到会话及其用户；不存在或已过期均返回 ``None``。"""

        if not token:
            return None
        row = db.execute(
            select(AuthSession, User)
            .join(User, User.id == AuthSession.user_id)
            .where(AuthSession.token == token)
        ).first()
        if row is None:
            return None

        session, user = row
        if _as_utc(session.expires_at) < datetime.now(timezone.utc):
            db.execute(delete(AuthSession).where(AuthSession.token == token))
            db.commit()
            logger.info("会话已过期并删除: user_id=%s", user.id)
            return None

        return _session_info(session, user)

    def revoke_session(self, db: Session, token: str) -> bool:
        result = db.execute(delete(AuthSession).where(AuthSession.token == token))
        db.commit()
        return bool(result.rowcount)

    def login(self, db: Session, username: str, password: str) -> SessionInfo:
        """校验用户名与密码，成功后签发新会话。"""

        user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("登录失败: username=%s", username)
            raise ApiError(401, "INVALID_CREDENTIALS")

        session = self.create_session(db, user.id)
        logger.info("登录成功: username=%s user_id=%s", user.username, user.id)
        return _session_info(session, user)
