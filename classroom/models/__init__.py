"""核心 SQLAlchemy 模型定义。"""

from classroom.models.enums import AttendanceStatus, UserRole
from classroom.models.kv import KVEntry
from classroom.models.records import Attendance, Evaluation
from classroom.models.school import SchoolClass, Student, TeacherClassPermission
from classroom.models.user import AuthSession, User

__all__ = [
    "Attendance",
    "AttendanceStatus",
    "AuthSession",
    "Evaluation",
    "KVEntry",
    "SchoolClass",
    "Student",
    "TeacherClassPermission",
    "User",
    "UserRole",
]
