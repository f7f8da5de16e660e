"""通用命名空间键值表，用于镜像前端本地存储。"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from classroom.db import Base


class KVEntry(Base):
    __tablename__ = "kv_store"

    namespace: Mapped[str] = mapped_column(String(100), primary_key=True)
    storage_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    storage_value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
