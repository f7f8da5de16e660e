from fastapi.testclient import TestClient
from sqlalchemy import select

from classroom.models import Attendance, AttendanceStatus, Evaluation


def _seed(client: TestClient) -> tuple[int, int]:
    class_id = client.post("/api/classes", json={"name": "1班", "grade": "高一"}).json()["id"]
    student_id = client.post(
        "/api/students", json={"classId": class_id, "name": "张明", "studentNo": "01"}
    ).json()["id"]
    return class_id, student_id


def test_attendance_requires_auth(client: TestClient):
    class_id, student_id = _seed(client)
    response = client.post(
        "/api/attendance",
        json={"classId": class_id, "studentId": student_id, "status": "present", "date": "2024-09-01"},
    )
    assert response.status_code == 401
    assert client.get(f"/api/attendance?classId={class_id}&date=2024-09-01").status_code == 401


def test_attendance_upsert_keeps_single_row(client: TestClient, session, teacher, teacher_headers):
    class_id, student_id = _seed(client)
    body = {"classId": class_id, "studentId": student_id, "status": "present", "date": "2024-09-01"}

    first = client.post("/api/attendance", json=body, headers=teacher_headers)
    assert first.status_code == 200
    assert first.json() == {"ok": True}

    second = client.post("/api/attendance", json={**body, "status": "leave"}, headers=teacher_headers)
    assert second.status_code == 200

    rows = session.scalars(select(Attendance)).all()
    assert len(rows) == 1
    assert rows[0].status == AttendanceStatus.LEAVE
    assert rows[0].teacher_id == teacher.id

    client.post("/api/attendance", json={**body, "date": "2024-09-02"}, headers=teacher_headers)
    assert len(session.scalars(select(Attendance)).all()) == 2


def test_list_attendance_by_class_and_day(client: TestClient, teacher_headers):
    class_id, student_id = _seed(client)
    other = client.post(
        "/api/students", json={"classId": class_id, "name": "李华", "studentNo": "02"}
    ).json()["id"]
    for sid, status in ((other, "late"), (student_id, "present")):
        client.post(
            "/api/attendance",
            json={"classId": class_id, "studentId": sid, "status": status, "date": "2024-09-01"},
            headers=teacher_headers,
        )

    rows = client.get(
        "/api/attendance",
        params={"classId": class_id, "date": "2024-09-01"},
        headers=teacher_headers,
    ).json()
    assert [(r["studentId"], r["status"], r["date"]) for r in rows] == [
        (student_id, "present", "2024-09-01"),
        (other, "late", "2024-09-01"),
    ]

    empty = client.get(
        "/api/attendance",
        params={"classId": class_id, "date": "2024-09-02"},
        headers=teacher_headers,
    )
    assert empty.json() == []


def test_list_attendance_invalid_query(client: TestClient, teacher_headers):
    for params in (
        {},
        {"classId": "x", "date": "2024-09-01"},
        {"classId": 1},
        {"classId": "99999999999999999999", "date": "2024-09-01"},
        {"classId": "\u0661", "date": "2024-09-01"},
    ):
        response = client.get("/api/attendance", params=params, headers=teacher_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "INVALID_QUERY"}


def test_attendance_validation(client: TestClient, teacher_headers):
    class_id, student_id = _seed(client)
    base = {"classId": class_id, "studentId": student_id, "status": "present", "date": "2024-09-01"}
    for override in (
        {"status": "sick"},
        {"date": "2024/09/01"},
        {"date": "2024-13-01"},
        {"studentId": "1"},
    ):
        response = client.post("/api/attendance", json={**base, **override}, headers=teacher_headers)
        assert response.status_code == 400, override
        assert response.json()["error"] == "INVALID_REQUEST"


def test_attendance_for_unknown_student(client: TestClient, teacher_headers):
    class_id, _ = _seed(client)
    response = client.post(
        "/api/attendance",
        json={"classId": class_id, "studentId": 99, "status": "present", "date": "2024-09-01"},
        headers=teacher_headers,
    )
    assert response.status_code == 404
    assert response.json() == {"error": "STUDENT_NOT_FOUND"}

    response = client.post(
        "/api/attendance",
        json={"classId": 99, "studentId": 1, "status": "present", "date": "2024-09-01"},
        headers=teacher_headers,
    )
    assert response.json() == {"error": "CLASS_NOT_FOUND"}


def test_create_evaluation(client: TestClient, session, teacher, teacher_headers):
    class_id, student_id = _seed(client)
    response = client.post(
        "/api/evaluations",
        json={
            "classId": class_id,
            "studentId": student_id,
            "score": 4,
            "tags": ["积极发言", "作业认真"],
            "comment": "继续保持",
        },
        headers=teacher_headers,
    )
    assert response.status_code == 200
    evaluation_id = response.json()["id"]

    evaluation = session.get(Evaluation, evaluation_id)
    assert evaluation.teacher_id == teacher.id
    assert evaluation.tags_json == ["积极发言", "作业认真"]
    assert evaluation.comment == "继续保持"


def test_evaluation_score_range(client: TestClient, teacher_headers):
    class_id, student_id = _seed(client)
    for score in (0, 6, 3.5, "5", True):
        response = client.post(
            "/api/evaluations",
            json={"classId": class_id, "studentId": student_id, "score": score},
            headers=teacher_headers,
        )
        assert response.status_code == 400, score


def test_statistics_overview_scenario(client: TestClient, teacher_headers):
    class_id, student_id = _seed(client)
    for _ in range(3):
        client.post(
            "/api/evaluations",
            json={"classId": class_id, "studentId": student_id, "score": 5},
            headers=teacher_headers,
        )

    data = client.get("/api/statistics/overview", headers=teacher_headers).json()
    assert data["classes"] == 1
    assert data["students"] == 1
    assert data["evaluations"] == 3
    assert data["avgScore"] == 5.0
    assert data["topStudents"] == [
        {"id": student_id, "name": "张明", "classId": class_id, "avgScore": 5.0, "evaluationCount": 3}
    ]


def test_statistics_overview_rounds_averages_consistently(client: TestClient, teacher_headers):
    class_id, student_id = _seed(client)
    # 平均分恰为 2.125
    for score in (3, 2, 2, 2, 2, 2, 2, 2):
        client.post(
            "/api/evaluations",
            json={"classId": class_id, "studentId": student_id, "score": score},
            headers=teacher_headers,
        )

    data = client.get("/api/statistics/overview", headers=teacher_headers).json()
    assert data["avgScore"] == 2.13
    assert data["topStudents"][0]["avgScore"] == 2.13


def test_statistics_overview_empty(client: TestClient, teacher_headers):
    data = client.get("/api/statistics/overview", headers=teacher_headers).json()
    assert data == {"classes": 0, "students": 0, "evaluations": 0, "avgScore": 0, "topStudents": []}


def test_top_students_order_and_limit(client: TestClient, teacher_headers):
    class_id = client.post("/api/classes", json={"name": "1班"}).json()["id"]
    ids = [
        client.post(
            "/api/students", json={"classId": class_id, "name": f"学生{i}", "studentNo": str(i)}
        ).json()["id"]
        for i in range(12)
    ]

    def evaluate(student_id: int, score: int) -> None:
        client.post(
            "/api/evaluations",
            json={"classId": class_id, "studentId": student_id, "score": score},
            headers=teacher_headers,
        )

    for sid in ids:
        evaluate(sid, 3)
    evaluate(ids[5], 3)
    evaluate(ids[7], 5)
    evaluate(ids[7], 4)

    data = client.get("/api/statistics/overview", headers=teacher_headers).json()
    top = data["topStudents"]
    assert len(top) == 10
    assert top[0]["id"] == ids[7]
    assert top[0]["avgScore"] == 4.0
    assert top[1]["id"] == ids[5]
    assert top[1]["evaluationCount"] == 2
    assert data["avgScore"] == round((3 * 13 + 5 + 4) / 15, 2)


def test_statistics_teacher(client: TestClient, admin, teacher_headers, admin_headers):
    class_id, student_id = _seed(client)
    for score, headers in ((5, teacher_headers), (2, teacher_headers), (4, admin_headers)):
        client.post(
            "/api/evaluations",
            json={"classId": class_id, "studentId": student_id, "score": score},
            headers=headers,
        )

    data = client.get("/api/statistics/teacher", headers=teacher_headers).json()
    assert data == {"evaluation_count": 2, "stars_given": 7}

    client.cookies.clear()
    assert client.get("/api/statistics/teacher").status_code == 401
