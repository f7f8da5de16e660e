"""考勤、评价与统计。"""

from __future__ import annotations

from typing import List

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.orm import Session

from classroom.errors import not_found
from classroom.models import (
    Attendance,
    AttendanceStatus,
    Evaluation,
    SchoolClass,
    Student,
)

TOP_STUDENT_LIMIT = 10


class RecordService:
    """考勤 upsert、评价追加与聚合统计。"""

    def _require_student_in_class(self, db: Session, class_id: int, student_id: int) -> None:
        if db.get(SchoolClass, class_id) is None:
            raise not_found("class")
        student = db.get(Student, student_id)
        if student is None or student.class_id != class_id:
            raise not_found("student")

    def list_attendance(self, db: Session, class_id: int, date: str) -> List[Attendance]:
        stmt = (
            select(Attendance)
            .where(Attendance.class_id == class_id, Attendance.attendance_date == date)
            .order_by(Attendance.student_id)
        )
        return list(db.scalars(stmt))

    def record_attendance(
        self,
        db: Session,
        class_id: int,
        student_id: int,
        status: AttendanceStatus,
        date: str,
        teacher_id: int,
    ) -> None:
        """同一 (班级, 学生, 日期) 只保留一行，重复提交覆盖状态与记录教师。"""

        self._require_student_in_class(db, class_id, student_id)
        stmt = insert(Attendance).values(
            class_id=class_id,
            student_id=student_id,
            status=status,
            attendance_date=date,
            teacher_id=teacher_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                Attendance.class_id,
                Attendance.student_id,
                Attendance.attendance_date,
            ],
            set_={"status": stmt.excluded.status, "teacher_id": stmt.excluded.teacher_id},
        )
        db.execute(stmt)
        db.commit()

    def create_evaluation(
        self,
        db: Session,
        class_id: int,
        student_id: int,
        teacher_id: int,
        score: int,
        tags: List[str],
        comment: str = "",
    ) -> Evaluation:
        self._require_student_in_class(db, class_id, student_id)
        evaluation = Evaluation(
            class_id=class_id,
            student_id=student_id,
            teacher_id=teacher_id,
            score=score,
            tags_json=list(tags),
            comment=comment or "",
        )
        db.add(evaluation)
        db.commit()
        db.refresh(evaluation)
        return evaluation

    def overview(self, db: Session) -> dict:
        avg_score = db.scalar(
            select(func.coalesce(func.round(func.avg(Evaluation.score), 2), 0))
        )

        student_avg = func.round(func.avg(Evaluation.score), 2).label("avg_score")
        evaluation_count = func.count(Evaluation.id).label("evaluation_count")
        top_stmt = (
            select(Student.id, Student.name, Student.class_id, student_avg, evaluation_count)
            .select_from(Evaluation)
            .join(Student, Student.id == Evaluation.student_id)
            .group_by(Evaluation.student_id)
            .order_by(student_avg.desc(), evaluation_count.desc(), Student.id)
            .limit(TOP_STUDENT_LIMIT)
        )
        top_students = [
            {
                "id": student_id,
                "name": name,
                "class_id": class_id,
                "avg_score": float(avg),
                "evaluation_count": count,
            }
            for student_id, name, class_id, avg, count in db.execute(top_stmt)
        ]

        return {
            "classes": db.scalar(select(func.count()).select_from(SchoolClass)) or 0,
            "students": db.scalar(select(func.count()).select_from(Student)) or 0,
            "evaluations": db.scalar(select(func.count()).select_from(Evaluation)) or 0,
            "avg_score": float(avg_score or 0),
            "top_students": top_students,
        }

    def teacher_summary(self, db: Session, teacher_id: int) -> dict:
        count, total = db.execute(
            select(func.count(Evaluation.id), func.coalesce(func.sum(Evaluation.score), 0))
            .where(Evaluation.teacher_id == teacher_id)
        ).one()
        return {"evaluation_count": count, "stars_given": int(total)}
