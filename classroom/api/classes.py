"""班级管理 API。"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classroom.dependencies import get_db
from classroom.errors import parse_id
from classroom.schemas.base import (
    DeleteResponse,
    IdResponse,
    NonEmptyStr,
    RequestModel,
    ResponseModel,
)
from classroom.services.roster import RosterService

router = APIRouter()
roster_service = RosterService()


# === Schemas ===

class ClassCreate(RequestModel):
    name: NonEmptyStr
    grade: str = ""


class ClassUpdate(RequestModel):
    name: Optional[NonEmptyStr] = None
    grade: Optional[str] = None


class ClassResponse(ResponseModel):
    id: int
    name: str
    grade: str
    created_at: datetime


class StudentResponse(ResponseModel):
    id: int
    class_id: int
    student_no: str
    name: str
    status: str
    created_at: datetime


class StudentEvaluationStats(ResponseModel):
    student_id: int
    name: str
    total_stars: int
    evaluation_count: int


# === API 端点 ===

@router.get("", response_model=List[ClassResponse])
def list_classes(db: Session = Depends(get_db)):
    """获取全部班级，按 id 排序。"""
    return roster_service.list_classes(db)


@router.post("", response_model=IdResponse)
def create_class(payload: ClassCreate, db: Session = Depends(get_db)):
    school_class = roster_service.create_class(db, payload.name, payload.grade)
    return IdResponse(id=school_class.id)


@router.put("/{class_id}", response_model=IdResponse)
def update_class(class_id: str, payload: ClassUpdate, db: Session = Depends(get_db)):
    """部分更新班级，未提供的字段保持不变。"""
    cid = parse_id(class_id, "class")
    roster_service.update_class(db, cid, name=payload.name, grade=payload.grade)
    return IdResponse(id=cid)


@router.delete("/{class_id}", response_model=DeleteResponse)
def delete_class(class_id: str, db: Session = Depends(get_db)):
    """级联删除班级；重复删除返回 ``deleted: false``。"""
    cid = parse_id(class_id, "class")
    deleted = roster_service.delete_class(db, cid)
    return DeleteResponse(id=cid, deleted=deleted)


@router.get("/{class_id}/students", response_model=List[StudentResponse])
def list_class_students(class_id: str, db: Session = Depends(get_db)):
    """按座号排列的班级学生名单。"""
    cid = parse_id(class_id, "class")
    return roster_service.list_students(db, cid)


@router.get("/{class_id}/students/evaluation-stats", response_model=List[StudentEvaluationStats])
def class_evaluation_stats(class_id: str, db: Session = Depends(get_db)):
    """班级学生的评价统计（用于小组积分计算）。"""
    cid = parse_id(class_id, "class")
    return roster_service.evaluation_stats(db, cid)
