"""教师账号与班级权限。"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.db import transaction
from classroom.errors import bad_request, conflict, not_found
from classroom.models import (
    Attendance,
    AuthSession,
    Evaluation,
    SchoolClass,
    TeacherClassPermission,
    User,
    UserRole,
)
from classroom.services.auth import hash_password

logger = logging.getLogger(__name__)


class StaffService:
    """教师（用户）增删改与班级权限整体替换。"""

    def list_teachers(self, db: Session) -> List[dict]:
        teachers = list(db.scalars(select(User).order_by(User.id)))
        rows = db.execute(
            select(TeacherClassPermission.teacher_id, SchoolClass.id, SchoolClass.name)
            .join(SchoolClass, SchoolClass.id == TeacherClassPermission.class_id)
            .order_by(TeacherClassPermission.teacher_id, TeacherClassPermission.class_id)
        )
        assigned: Dict[int, List[dict]] = {}
        for teacher_id, class_id, class_name in rows:
            assigned.setdefault(teacher_id, []).append({"id": class_id, "name": class_name})

        return [
            {
                "id": teacher.id,
                "username": teacher.username,
                "name": teacher.name or "",
                "role": teacher.role,
                "created_at": teacher.created_at,
                "assigned_classes": assigned.get(teacher.id, []),
            }
            for teacher in teachers
        ]

    def get_teacher(self, db: Session, teacher_id: int) -> User:
        teacher = db.get(User, teacher_id)
        if teacher is None:
            raise not_found("teacher")
        return teacher

    def create_teacher(
        self,
        db: Session,
        username: str,
        name: str,
        password: str,
        role: UserRole = UserRole.TEACHER,
    ) -> User:
        username = username.strip()
        name = name.strip()
        if not name:
            raise bad_request("INVALID_NAME")
        existed = db.scalar(select(User.id).where(User.username == username))
        if existed is not None:
            raise conflict("DUPLICATE_USERNAME")

        teacher = User(
            username=username,
            name=name,
            password_hash=hash_password(password),
            role=role,
        )
        db.add(teacher)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise conflict("DUPLICATE_USERNAME") from exc
        db.refresh(teacher)
        logger.info("新建账号: username=%s role=%s", teacher.username, teacher.role.value)
        return teacher

    def update_teacher(
        self,
        db: Session,
        teacher_id: int,
        name: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> User:
        teacher = self.get_teacher(db, teacher_id)
        merged_name = (name if name is not None else teacher.name or "").strip()
        if not merged_name:
            raise bad_request("INVALID_NAME")

        teacher.name = merged_name
        if role is not None:
            teacher.role = role
        if password:
            teacher.password_hash = hash_password(password)
        db.commit()
        db.refresh(teacher)
        return teacher

    def delete_teacher(self, db: Session, teacher_id: int) -> bool:
        """删除账号及其会话、权限、考勤与评价记录；不存在时返回 ``False``。"""

        if db.get(User, teacher_id) is None:
            return False

        with transaction(db):
            db.execute(delete(AuthSession).where(AuthSession.user_id == teacher_id))
            db.execute(
                delete(TeacherClassPermission).where(TeacherClassPermission.teacher_id == teacher_id)
            )
            db.execute(delete(Attendance).where(Attendance.teacher_id == teacher_id))
            db.execute(delete(Evaluation).where(Evaluation.teacher_id == teacher_id))
            db.execute(delete(User).where(User.id == teacher_id))

        logger.info("已删除账号 %s", teacher_id)
        return True

    def get_class_permissions(self, db: Session, teacher_id: int) -> List[int]:
        self.get_teacher(db, teacher_id)
        return list(
            db.scalars(
                select(TeacherClassPermission.class_id)
                .where(TeacherClassPermission.teacher_id == teacher_id)
                .order_by(TeacherClassPermission.class_id)
            )
        )

    def replace_class_permissions(
        self, db: Session, teacher_id: int, class_ids: Iterable[int]
    ) -> List[int]:
        """整体替换：先删后插，不做增量 diff。任一班级不存在则整体拒绝。"""

        self.get_teacher(db, teacher_id)
        unique_ids = list(dict.fromkeys(class_ids))
        if unique_ids:
            found = set(db.scalars(select(SchoolClass.id).where(SchoolClass.id.in_(unique_ids))))
            if len(found) != len(unique_ids):
                raise bad_request("INVALID_CLASS_IDS")

        with transaction(db):
            db.execute(
                delete(TeacherClassPermission).where(TeacherClassPermission.teacher_id == teacher_id)
            )
            db.add_all(
                TeacherClassPermission(teacher_id=teacher_id, class_id=class_id)
                for class_id in unique_ids
            )

        logger.info("教师 %s 的班级权限已替换为 %s", teacher_id, unique_ids)
        return unique_ids
