"""班级、学生与教师班级权限模型。"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from classroom.db import Base


class SchoolClass(Base):
    """班级。"""

    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    students: Mapped[List["Student"]] = relationship(
        back_populates="school_class", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name})>"


class Student(Base):
    """学生 - 座号在同一班级内唯一（为空时不参与唯一约束）。"""

    __tablename__ = "students"
    __table_args__ = (
        Index(
            "uq_students_class_student_no",
            "class_id",
            "student_no",
            unique=True,
            sqlite_where=text("student_no <> ''"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_no: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    school_class: Mapped[SchoolClass] = relationship(back_populates="students")

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, class_id={self.class_id}, no={self.student_no})>"


class TeacherClassPermission(Base):
    """教师可访问的班级，按教师整体替换。"""

    __tablename__ = "teacher_class_permissions"
    __table_args__ = (UniqueConstraint("teacher_id", "class_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    school_class: Mapped[SchoolClass] = relationship()
