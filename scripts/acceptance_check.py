"""对运行中的服务做一遍冒烟检查。

用法::

    CLASSROOM_BASE_URL=http://127.0.0.1:8000 \
    ACCEPTANCE_USERNAME=teacher ACCEPTANCE_PASSWORD=123456 \
    python scripts/acceptance_check.py

脚本会新建一个临时班级和学生，走完考勤、评价、统计与 KV 流程后删除该班级。
"""

import os
import sys
import time
from datetime import date

import requests

BASE_URL = os.getenv("CLASSROOM_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
USERNAME = os.getenv("ACCEPTANCE_USERNAME", "teacher")
PASSWORD = os.getenv("ACCEPTANCE_PASSWORD", "123456")
TIMEOUT = 10


class CheckFailed(RuntimeError):
    pass


def call(method: str, path: str, **kwargs):
    response = requests.request(method, f"{BASE_URL}{path}", timeout=TIMEOUT, **kwargs)
    if not response.ok:
        raise CheckFailed(f"{method} {path} failed: {response.status_code} {response.text}")
    return response.json() if response.content else {}


def wait_for_health(timeout_s: float = 10.0) -> None:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        try:
            if requests.get(f"{BASE_URL}/api/health", timeout=2).ok:
                return
        except requests.RequestException:
            pass
        time.sleep(0.3)
    raise CheckFailed("Server health check timed out")


def run_checks() -> None:
    login = call("POST", "/api/auth/login", json={"username": USERNAME, "password": PASSWORD})
    if not login.get("token"):
        raise CheckFailed("Login did not return token")
    auth = {"Authorization": f"Bearer {login['token']}"}

    class_id = call("POST", "/api/classes", json={"name": "验收班级", "grade": "acceptance"})["id"]
    try:
        student_id = call(
            "POST", "/api/students", json={"classId": class_id, "name": "验收学生", "studentNo": "01"}
        )["id"]
        students = call("GET", f"/api/classes/{class_id}/students")
        if not students:
            raise CheckFailed("No students returned")

        today = date.today().isoformat()
        call(
            "POST",
            "/api/attendance",
            headers=auth,
            json={"classId": class_id, "studentId": student_id, "status": "present", "date": today},
        )
        rows = call("GET", "/api/attendance", headers=auth, params={"classId": class_id, "date": today})
        if not rows:
            raise CheckFailed("Attendance write/read check failed")

        call(
            "POST",
            "/api/evaluations",
            headers=auth,
            json={
                "classId": class_id,
                "studentId": student_id,
                "score": 5,
                "tags": ["active"],
                "comment": "acceptance-check",
            },
        )
        stats = call("GET", "/api/statistics/overview", headers=auth)
        if not isinstance(stats.get("evaluations"), int):
            raise CheckFailed("Statistics response shape invalid")
    finally:
        call("DELETE", f"/api/classes/{class_id}")

    call("POST", "/api/kv/upsert", json={"namespace": "acceptance", "key": "k", "value": "v"})
    snapshot = call("GET", "/api/kv/snapshot", params={"namespace": "acceptance"})
    if snapshot.get("items", {}).get("k") != "v":
        raise CheckFailed("KV snapshot validation failed")
    call("POST", "/api/kv/delete", json={"namespace": "acceptance", "key": "k"})


def main() -> int:
    try:
        wait_for_health()
        run_checks()
    except (CheckFailed, requests.RequestException) as exc:
        print(f"验收失败: {exc}", file=sys.stderr)
        return 1
    print("验收通过")
    return 0


if __name__ == "__main__":
    sys.exit(main())
