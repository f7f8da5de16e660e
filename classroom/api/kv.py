"""通用命名空间 KV 镜像 API。"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from classroom.config import get_settings
from classroom.dependencies import get_db
from classroom.errors import bad_request
from classroom.schemas.base import NonEmptyStr, OkResponse, RequestModel, ResponseModel
from classroom.services.kv import KVService

router = APIRouter()
kv_service = KVService()


# === Schemas ===

class KVUpsert(RequestModel):
    namespace: NonEmptyStr
    key: NonEmptyStr
    value: str


class KVDelete(RequestModel):
    namespace: NonEmptyStr
    key: NonEmptyStr


class KVClear(RequestModel):
    namespace: NonEmptyStr


class KVSnapshot(ResponseModel):
    namespace: str
    items: Dict[str, str]


# === API 端点 ===

@router.get("/snapshot", response_model=KVSnapshot)
def snapshot(
    namespace: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """返回命名空间下全部键值；未指定时使用默认命名空间。"""
    ns = (namespace or get_settings().default_kv_namespace).strip()
    if not ns:
        raise bad_request("INVALID_NAMESPACE")
    return KVSnapshot(namespace=ns, items=kv_service.snapshot(db, ns))


@router.post("/upsert", response_model=OkResponse)
def upsert(payload: KVUpsert, db: Session = Depends(get_db)):
    kv_service.upsert(db, payload.namespace, payload.key, payload.value)
    return OkResponse()


@router.post("/delete", response_model=OkResponse)
def delete(payload: KVDelete, db: Session = Depends(get_db)):
    kv_service.delete(db, payload.namespace, payload.key)
    return OkResponse()


@router.post("/clear", response_model=OkResponse)
def clear(payload: KVClear, db: Session = Depends(get_db)):
    kv_service.clear(db, payload.namespace)
    return OkResponse()
