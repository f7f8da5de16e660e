"""命名空间键值镜像，供前端把本地存储同步到服务端。"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from classroom.models import KVEntry


class KVService:
    def snapshot(self, db: Session, namespace: str) -> Dict[str, str]:
        rows = db.execute(
            select(KVEntry.storage_key, KVEntry.storage_value).where(KVEntry.namespace == namespace)
        )
        return {key: value for key, value in rows}

    def upsert(self, db: Session, namespace: str, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        stmt = insert(KVEntry).values(
            namespace=namespace, storage_key=key, storage_value=value, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[KVEntry.namespace, KVEntry.storage_key],
            set_={"storage_value": stmt.excluded.storage_value, "updated_at": now},
        )
        db.execute(stmt)
        db.commit()

    def delete(self, db: Session, namespace: str, key: str) -> None:
        db.execute(
            delete(KVEntry).where(KVEntry.namespace == namespace, KVEntry.storage_key == key)
        )
        db.commit()

    def clear(self, db: Session, namespace: str) -> int:
        result = db.execute(delete(KVEntry).where(KVEntry.namespace == namespace))
        db.commit()
        return result.rowcount or 0
