"""教师账号与班级权限 API。"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classroom.dependencies import get_db, require_admin
from classroom.errors import parse_id
from classroom.models import UserRole
from classroom.schemas.auth import SessionUser
from classroom.schemas.base import (
    DeleteResponse,
    IdResponse,
    NonEmptyStr,
    OkResponse,
    PositiveId,
    RequestModel,
    ResponseModel,
)
from classroom.services.staff import StaffService

router = APIRouter()
staff_service = StaffService()


# === Schemas ===

class TeacherCreate(RequestModel):
    username: NonEmptyStr
    name: NonEmptyStr
    password: NonEmptyStr
    role: UserRole = UserRole.TEACHER


class TeacherUpdate(RequestModel):
    name: Optional[NonEmptyStr] = None
    password: Optional[NonEmptyStr] = None
    role: Optional[UserRole] = None


class AssignedClass(ResponseModel):
    id: int
    name: str


class TeacherResponse(ResponseModel):
    id: int
    username: str
    name: str
    role: UserRole
    created_at: datetime
    assigned_classes: List[AssignedClass]


class PermissionReplace(RequestModel):
    class_ids: List[PositiveId] = []


class PermissionResponse(ResponseModel):
    class_ids: List[int]


class PermissionReplaceResponse(OkResponse):
    teacher_id: int
    class_ids: List[int]


# === API 端点 ===

@router.get("", response_model=List[TeacherResponse])
def list_teachers(db: Session = Depends(get_db)):
    """全部账号及其已分配的班级。"""
    return staff_service.list_teachers(db)


@router.post("", response_model=IdResponse)
def create_teacher(
    payload: TeacherCreate,
    db: Session = Depends(get_db),
    _admin: SessionUser = Depends(require_admin),
):
    """新建教师账号；用户名重复返回 409。"""
    teacher = staff_service.create_teacher(
        db,
        username=payload.username,
        name=payload.name,
        password=payload.password,
        role=payload.role,
    )
    return IdResponse(id=teacher.id)


@router.put("/{teacher_id}", response_model=IdResponse)
def update_teacher(
    teacher_id: str,
    payload: TeacherUpdate,
    db: Session = Depends(get_db),
    _admin: SessionUser = Depends(require_admin),
):
    tid = parse_id(teacher_id, "teacher")
    staff_service.update_teacher(
        db, tid, name=payload.name, password=payload.password, role=payload.role
    )
    return IdResponse(id=tid)


@router.delete("/{teacher_id}", response_model=DeleteResponse)
def delete_teacher(
    teacher_id: str,
    db: Session = Depends(get_db),
    _admin: SessionUser = Depends(require_admin),
):
    """删除账号并级联清理会话、权限、考勤与评价。"""
    tid = parse_id(teacher_id, "teacher")
    deleted = staff_service.delete_teacher(db, tid)
    return DeleteResponse(id=tid, deleted=deleted)


@router.get("/{teacher_id}/class-permissions", response_model=PermissionResponse)
def get_class_permissions(teacher_id: str, db: Session = Depends(get_db)):
    tid = parse_id(teacher_id, "teacher")
    return PermissionResponse(class_ids=staff_service.get_class_permissions(db, tid))


@router.put("/{teacher_id}/class-permissions", response_model=PermissionReplaceResponse)
def replace_class_permissions(
    teacher_id: str,
    payload: PermissionReplace,
    db: Session = Depends(get_db),
):
    """整体替换教师可访问的班级。"""
    tid = parse_id(teacher_id, "teacher")
    class_ids = staff_service.replace_class_permissions(db, tid, payload.class_ids)
    return PermissionReplaceResponse(teacher_id=tid, class_ids=class_ids)
