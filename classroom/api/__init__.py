"""API 路由包入口。"""

from fastapi import APIRouter

from classroom.api import auth, classes, kv, records, students, teachers

router = APIRouter(prefix="/api")

# 注册子路由
router.include_router(auth.router, prefix="/auth", tags=["认证"])
router.include_router(classes.router, prefix="/classes", tags=["班级"])
router.include_router(students.router, prefix="/students", tags=["学生"])
router.include_router(teachers.router, prefix="/teachers", tags=["教师"])
router.include_router(records.attendance_router, prefix="/attendance", tags=["考勤"])
router.include_router(records.evaluations_router, prefix="/evaluations", tags=["评价"])
router.include_router(records.statistics_router, prefix="/statistics", tags=["统计"])
router.include_router(kv.router, prefix="/kv", tags=["KV 镜像"])
