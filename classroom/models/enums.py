"""业务枚举定义 - 用户角色与考勤状态。"""

import enum


class UserRole(str, enum.Enum):
    """用户角色枚举。"""
    ADMIN = "admin"        # 管理员：可维护教师账号
    TEACHER = "teacher"    # 教师：考勤与评价


class AttendanceStatus(str, enum.Enum):
    """考勤状态。"""
    PRESENT = "present"    # 出勤
    LATE = "late"          # 迟到
    ABSENT = "absent"      # 缺勤
    LEAVE = "leave"        # 请假
