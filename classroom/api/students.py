"""学生管理 API。"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from classroom.dependencies import get_db
from classroom.errors import parse_id
from classroom.schemas.base import (
    DeleteResponse,
    IdResponse,
    NonEmptyStr,
    OkResponse,
    PositiveId,
    RequestModel,
)
from classroom.services.roster import RosterService

router = APIRouter()
roster_service = RosterService()


# === Schemas ===

class StudentCreate(RequestModel):
    class_id: PositiveId
    name: NonEmptyStr
    student_no: str = ""
    status: str = "active"


class BatchDeleteRequest(RequestModel):
    student_ids: List[PositiveId] = Field(min_length=1)


class BatchDeleteResponse(OkResponse):
    requested: int
    deleted: int


# === API 端点 ===

@router.post("", response_model=IdResponse)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)):
    """新增学生；同班座号重复返回 409。"""
    student = roster_service.create_student(
        db,
        class_id=payload.class_id,
        name=payload.name,
        student_no=payload.student_no,
        status=payload.status,
    )
    return IdResponse(id=student.id)


@router.post("/batch-delete", response_model=BatchDeleteResponse)
def batch_delete_students(payload: BatchDeleteRequest, db: Session = Depends(get_db)):
    requested, deleted = roster_service.batch_delete_students(db, payload.student_ids)
    return BatchDeleteResponse(requested=requested, deleted=deleted)


@router.delete("/{student_id}", response_model=DeleteResponse)
def delete_student(student_id: str, db: Session = Depends(get_db)):
    """删除学生及其考勤、评价；不存在时返回 ``deleted: false``。"""
    sid = parse_id(student_id, "student")
    deleted = roster_service.delete_student(db, sid)
    return DeleteResponse(id=sid, deleted=deleted)
