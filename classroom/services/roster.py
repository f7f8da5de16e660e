"""班级与学生名册：增删改查与级联删除。"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import Integer, cast, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.db import transaction
from classroom.errors import bad_request, conflict, not_found
from classroom.models import (
    Attendance,
    Evaluation,
    SchoolClass,
    Student,
    TeacherClassPermission,
)

logger = logging.getLogger(__name__)


class RosterService:
    """封装班级、学生相关的查询与写入逻辑。"""

    # --- 班级 ---

    def list_classes(self, db: Session) -> List[SchoolClass]:
        return list(db.scalars(select(SchoolClass).order_by(SchoolClass.id)))

    def get_class(self, db: Session, class_id: int) -> SchoolClass:
        school_class = db.get(SchoolClass, class_id)
        if school_class is None:
            raise not_found("class")
        return school_class

    def create_class(self, db: Session, name: str, grade: str = "") -> SchoolClass:
        name = name.strip()
        if not name:
            raise bad_request("INVALID_CLASS_NAME")
        school_class = SchoolClass(name=name, grade=(grade or "").strip())
        db.add(school_class)
        db.commit()
        db.refresh(school_class)
        return school_class

    def update_class(
        self,
        db: Session,
        class_id: int,
        name: Optional[str] = None,
        grade: Optional[str] = None,
    ) -> SchoolClass:
        """合并更新：未提供的字段保持原值，合并后的名称仍不能为空。"""

        school_class = self.get_class(db, class_id)
        merged_name = (name if name is not None else school_class.name or "").strip()
        merged_grade = (grade if grade is not None else school_class.grade or "").strip()
        if not merged_name:
            raise bad_request("INVALID_CLASS_NAME")

        school_class.name = merged_name
        school_class.grade = merged_grade
        db.commit()
        db.refresh(school_class)
        return school_class

    def delete_class(self, db: Session, class_id: int) -> bool:
        """级联删除班级；班级不存在时返回 ``False``。"""

        if db.get(SchoolClass, class_id) is None:
            return False

        with transaction(db):
            student_ids = list(
                db.scalars(select(Student.id).where(Student.class_id == class_id))
            )
            db.execute(delete(Attendance).where(Attendance.class_id == class_id))
            db.execute(delete(Evaluation).where(Evaluation.class_id == class_id))
            db.execute(
                delete(TeacherClassPermission).where(TeacherClassPermission.class_id == class_id)
            )
            for student_id in student_ids:
                self._delete_student_records(db, student_id)
            db.execute(delete(Student).where(Student.class_id == class_id))
            db.execute(delete(SchoolClass).where(SchoolClass.id == class_id))

        logger.info("已删除班级 %s 及其 %d 名学生", class_id, len(student_ids))
        return True

    # --- 学生 ---

    def list_students(self, db: Session, class_id: int) -> List[Student]:
        """按座号数值排序，非数字座号退回字典序，最后按 id。"""

        stmt = (
            select(Student)
            .where(Student.class_id == class_id)
            .order_by(cast(Student.student_no, Integer), Student.student_no, Student.id)
        )
        return list(db.scalars(stmt))

    def create_student(
        self,
        db: Session,
        class_id: int,
        name: str,
        student_no: str = "",
        status: str = "active",
    ) -> Student:
        self.get_class(db, class_id)

        if student_no:
            duplicate = db.scalar(
                select(Student.id)
                .where(Student.class_id == class_id, Student.student_no == student_no)
                .limit(1)
            )
            if duplicate is not None:
                raise conflict("DUPLICATE_STUDENT_NO")

        student = Student(
            class_id=class_id,
            student_no=student_no or "",
            name=name,
            status=status or "active",
        )
        db.add(student)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            # 并发删除班级时外键同样会失败
            self.get_class(db, class_id)
            raise conflict("DUPLICATE_STUDENT_NO") from exc
        db.refresh(student)
        return student

    def delete_student(self, db: Session, student_id: int) -> bool:
        if db.get(Student, student_id) is None:
            return False

        with transaction(db):
            self._delete_student_records(db, student_id)
            db.execute(delete(Student).where(Student.id == student_id))
        return True

    def batch_delete_students(
        self, db: Session, student_ids: Iterable[int]
    ) -> tuple[int, int]:
        """批量删除，返回 (去重后的请求数, 实际删除数)。"""

        unique_ids: Sequence[int] = list(dict.fromkeys(student_ids))
        deleted = 0
        with transaction(db):
            for student_id in unique_ids:
                self._delete_student_records(db, student_id)
                result = db.execute(delete(Student).where(Student.id == student_id))
                deleted += result.rowcount or 0

        logger.info("批量删除学生: requested=%d deleted=%d", len(unique_ids), deleted)
        return len(unique_ids), deleted

    def evaluation_stats(self, db: Session, class_id: int) -> list[dict]:
        """班级内每个学生的累计星数与评价次数（用于小组积分）。"""

        stmt = (
            select(
                Student.id,
                Student.name,
                func.coalesce(func.sum(Evaluation.score), 0),
                func.count(Evaluation.id),
            )
            .outerjoin(Evaluation, Evaluation.student_id == Student.id)
            .where(Student.class_id == class_id)
            .group_by(Student.id)
            .order_by(Student.id)
        )
        return [
            {
                "student_id": student_id,
                "name": name,
                "total_stars": int(total),
                "evaluation_count": count,
            }
            for student_id, name, total, count in db.execute(stmt)
        ]

    def _delete_student_records(self, db: Session, student_id: int) -> None:
        db.execute(delete(Attendance).where(Attendance.student_id == student_id))
        db.execute(delete(Evaluation).where(Evaluation.student_id == student_id))
