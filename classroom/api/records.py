"""考勤、星级评价与统计 API（均需登录）。"""

from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from classroom.dependencies import get_current_user, get_db
from classroom.errors import bad_request, to_id
from classroom.models import AttendanceStatus
from classroom.schemas.auth import SessionUser
from classroom.schemas.base import (
    IdResponse,
    OkResponse,
    PositiveId,
    RequestModel,
    ResponseModel,
)
from classroom.services.records import RecordService

attendance_router = APIRouter()
evaluations_router = APIRouter()
statistics_router = APIRouter()
record_service = RecordService()

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _validate_iso_date(value: str) -> str:
    date_type.fromisoformat(value)
    return value


# === Schemas ===

class AttendanceCreate(RequestModel):
    class_id: PositiveId
    student_id: PositiveId
    status: AttendanceStatus
    date: str = Field(pattern=DATE_PATTERN)

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return _validate_iso_date(value)


class AttendanceResponse(ResponseModel):
    id: int
    class_id: int
    student_id: int
    status: AttendanceStatus
    date: str = Field(validation_alias="attendance_date")
    created_at: datetime


class EvaluationCreate(RequestModel):
    class_id: PositiveId
    student_id: PositiveId
    score: int = Field(strict=True, ge=1, le=5)
    tags: List[str] = []
    comment: str = ""


class TopStudent(ResponseModel):
    id: int
    name: str
    class_id: int
    avg_score: float
    evaluation_count: int


class OverviewResponse(ResponseModel):
    classes: int
    students: int
    evaluations: int
    avg_score: float
    top_students: List[TopStudent]


class TeacherSummaryResponse(BaseModel):
    """沿用前端已有的 snake_case 字段名。"""

    evaluation_count: int
    stars_given: int


# === 考勤 ===

@attendance_router.get("", response_model=List[AttendanceResponse])
def list_attendance(
    class_id: Optional[str] = Query(None, alias="classId"),
    date: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    _user: SessionUser = Depends(get_current_user),
):
    """查询某班某天的考勤记录。"""
    cid = to_id(class_id)
    day = (date or "").strip()
    if cid is None or not day:
        raise bad_request("INVALID_QUERY")
    return record_service.list_attendance(db, cid, day)


@attendance_router.post("", response_model=OkResponse)
def record_attendance(
    payload: AttendanceCreate,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
):
    """登记考勤；同一学生同一天重复提交会覆盖之前的状态。"""
    record_service.record_attendance(
        db,
        class_id=payload.class_id,
        student_id=payload.student_id,
        status=payload.status,
        date=payload.date,
        teacher_id=current_user.id,
    )
    return OkResponse()


# === 评价 ===

@evaluations_router.post("", response_model=IdResponse)
def create_evaluation(
    payload: EvaluationCreate,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
):
    """追加一条星级评价（无修改、删除接口）。"""
    evaluation = record_service.create_evaluation(
        db,
        class_id=payload.class_id,
        student_id=payload.student_id,
        teacher_id=current_user.id,
        score=payload.score,
        tags=payload.tags,
        comment=payload.comment,
    )
    return IdResponse(id=evaluation.id)


# === 统计 ===

@statistics_router.get("/overview", response_model=OverviewResponse)
def statistics_overview(
    db: Session = Depends(get_db),
    _user: SessionUser = Depends(get_current_user),
):
    return record_service.overview(db)


@statistics_router.get("/teacher", response_model=TeacherSummaryResponse)
def statistics_teacher(
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
):
    """当前教师的评价次数与累计给出的星数。"""
    return record_service.teacher_summary(db, current_user.id)
