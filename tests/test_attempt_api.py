from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.test import RequestFactory
from django.utils import timezone
from rest_framework.test import APIClient

from apps.api.common.exceptions import domain_exception_handler
from apps.api.common.middleware import UnhandledExceptionMiddleware
from apps.domains.attempts.models import ExamAttempt
from apps.domains.exams.models import Exam, ExamQuestion

pytestmark = pytest.mark.django_db

BASE = "/api/v1/attempts/"


@pytest.fixture
def student(django_user_model):
    return django_user_model.objects.create_user(username="student", password="pw-123456")


@pytest.fixture
def other_student(django_user_model):
    return django_user_model.objects.create_user(username="other", password="pw-123456")


@pytest.fixture
def staff(django_user_model):
    return django_user_model.objects.create_user(username="proctor", password="pw-123456", is_staff=True)


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def exam():
    exam = Exam.objects.create(title="Capitals", duration_seconds=600, max_attempts=1)
    ExamQuestion.objects.create(exam=exam, number=1, correct_answer="Paris", score_weight=Decimal("5"))
    ExamQuestion.objects.create(exam=exam, number=2, correct_answer="Rome", score_weight=Decimal("10"))
    return exam


@pytest.fixture
def q1(exam):
    return exam.questions.get(number=1)


@pytest.fixture
def q2(exam):
    return exam.questions.get(number=2)


@pytest.fixture
def started(student, exam):
    res = client_for(student).post(BASE, {"exam_id": str(exam.id)}, format="json")
    assert res.status_code == 201, res.content
    return res.json()


def test_start_attempt(student, exam):
    res = client_for(student).post(
        BASE,
        {"exam_id": str(exam.id), "metadata": {"browser": "firefox"}},
        format="json",
        HTTP_USER_AGENT="pytest-agent",
        REMOTE_ADDR="10.1.2.3",
    )

    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "in_progress"
    assert body["user_id"] == str(student.pk)
    assert body["exam_id"] == str(exam.id)
    assert body["attempt_number"] == 1
    assert body["remaining_time"] == 600
    assert body["start_time"] is not None
    assert body["end_time"] is None
    assert body["total_duration"] is None
    assert body["device_info"] == "pytest-agent"
    assert body["ip_address"] == "10.1.2.3"
    assert body["metadata"] == {"browser": "firefox"}


def test_start_over_max_attempts_conflicts(student, exam, started):
    res = client_for(student).post(BASE, {"exam_id": str(exam.id)}, format="json")

    assert res.status_code == 409
    assert res.json()["code"] == "invalid_state"


def test_start_unknown_exam_not_found(student):
    res = client_for(student).post(BASE, {"exam_id": "6f1c1c8e-0000-4000-8000-000000000000"}, format="json")

    assert res.status_code == 404
    assert res.json()["code"] == "not_found"


def test_start_exam_without_duration_is_bad_request(student):
    exam = Exam.objects.create(title="Draft", duration_seconds=None)
    res = client_for(student).post(BASE, {"exam_id": str(exam.id)}, format="json")

    assert res.status_code == 400
    assert res.json()["code"] == "invalid_argument"


def test_start_requires_authentication(exam):
    res = APIClient().post(BASE, {"exam_id": str(exam.id)}, format="json")
    assert res.status_code in (401, 403)


def test_staff_can_start_for_student(staff, student, exam):
    res = client_for(staff).post(BASE, {"exam_id": str(exam.id), "user_id": str(student.pk)}, format="json")

    assert res.status_code == 201
    assert res.json()["user_id"] == str(student.pk)


def test_get_attempt(student, started):
    res = client_for(student).get(f"{BASE}{started['id']}/")

    assert res.status_code == 200
    assert res.json()["id"] == started["id"]
    assert 0 <= res.json()["time_left"] <= 600


def test_get_unknown_or_malformed_attempt(student):
    assert client_for(student).get(f"{BASE}not-a-uuid/").status_code == 404
    res = client_for(student).get(f"{BASE}6f1c1c8e-0000-4000-8000-000000000000/")
    assert res.status_code == 404
    assert res.json()["code"] == "not_found"


def test_other_user_cannot_touch_attempt(other_student, started):
    client = client_for(other_student)

    assert client.get(f"{BASE}{started['id']}/").status_code == 403
    assert client.post(f"{BASE}{started['id']}/pause/").status_code == 403
    assert ExamAttempt.objects.get(id=started["id"]).status == "in_progress"


def test_pause_resume_flow(student, started):
    client = client_for(student)

    paused = client.post(f"{BASE}{started['id']}/pause/")
    assert paused.status_code == 200
    assert paused.json()["status"] == "paused"
    assert paused.json()["start_time"] is None

    again = client.post(f"{BASE}{started['id']}/pause/")
    assert again.status_code == 409

    resumed = client.post(f"{BASE}{started['id']}/resume/")
    assert resumed.status_code == 200
    assert resumed.json()["status"] == "in_progress"


def test_answers_and_submit(student, started, q1, q2):
    client = client_for(student)

    res = client.post(
        f"{BASE}{started['id']}/answers/",
        {"question_id": str(q1.id), "submitted_value": " paris ", "time_spent": 8},
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["is_correct"] is True
    assert res.json()["score"] == "5.00"

    res = client.put(
        f"{BASE}{started['id']}/answers/",
        {"answers": [
            {"question_id": str(q2.id), "submitted_value": "Milan"},
        ]},
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["total_answers"] == 1

    stats = client.get(f"{BASE}{started['id']}/stats/")
    assert stats.status_code == 200
    assert stats.json() == {
        "correct": 1,
        "incorrect": 1,
        "total": 2,
        "score": "5.00",
        "percentage": "50.00",
    }

    submitted = client.post(f"{BASE}{started['id']}/submit/")
    assert submitted.status_code == 200
    body = submitted.json()
    assert body["status"] == "completed"
    assert body["score"] == "5.00"
    assert (body["correct_answers"], body["wrong_answers"]) == (1, 1)
    assert body["end_time"] is not None
    assert [a["question_id"] for a in body["answers"]] == [str(q1.id), str(q2.id)]
    assert body["total_duration"] >= 0

    late = client.post(
        f"{BASE}{started['id']}/answers/",
        {"question_id": str(q1.id), "submitted_value": "Paris"},
        format="json",
    )
    assert late.status_code == 409


def test_answer_for_foreign_question_not_found(student, started):
    other_exam = Exam.objects.create(title="Other", duration_seconds=60)
    foreign = ExamQuestion.objects.create(exam=other_exam, number=1, correct_answer="x")

    res = client_for(student).post(
        f"{BASE}{started['id']}/answers/",
        {"question_id": str(foreign.id), "submitted_value": "x"},
        format="json",
    )
    assert res.status_code == 404


def test_answer_validation_errors(student, started, q1):
    client = client_for(student)

    res = client.post(f"{BASE}{started['id']}/answers/", {"submitted_value": "x"}, format="json")
    assert res.status_code == 400

    res = client.put(f"{BASE}{started['id']}/answers/", {"answers": []}, format="json")
    assert res.status_code == 400


def test_answer_on_overdue_attempt_conflicts(student, started, q1):
    ExamAttempt.objects.filter(id=started["id"]).update(start_time=timezone.now() - timedelta(seconds=700))

    res = client_for(student).post(
        f"{BASE}{started['id']}/answers/",
        {"question_id": str(q1.id), "submitted_value": "Paris"},
        format="json",
    )
    assert res.status_code == 409


def test_extend_time_staff_only(student, staff, started):
    url = f"{BASE}{started['id']}/extend-time/"

    assert client_for(student).post(url, {"extra_seconds": 300}, format="json").status_code == 403

    res = client_for(staff).post(url, {"extra_seconds": 300}, format="json")
    assert res.status_code == 200
    assert res.json()["remaining_time"] == 900
    assert res.json()["status"] == "in_progress"

    assert client_for(staff).post(url, {"extra_seconds": 0}, format="json").status_code == 400


def test_terminate_by_staff(student, staff, started):
    url = f"{BASE}{started['id']}/terminate/"
    assert client_for(student).post(url, {}, format="json").status_code == 403

    res = client_for(staff).post(url, {"reason": "phone on desk", "cheating_detected": True}, format="json")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "terminated"
    assert body["cheating_detected"] is True
    assert body["metadata"]["termination_reason"] == "phone on desk"

    assert client_for(staff).post(url, {}, format="json").status_code == 409


def test_my_active_and_completed(student, exam, started):
    client = client_for(student)

    active = client.get(f"{BASE}me/active/")
    assert active.status_code == 200
    assert [a["id"] for a in active.json()] == [started["id"]]

    client.post(f"{BASE}{started['id']}/submit/")

    assert client.get(f"{BASE}me/active/").json() == []
    completed = client.get(f"{BASE}me/completed/").json()
    assert [a["id"] for a in completed] == [started["id"]]


def test_health_check(client):
    res = client.get("/api/v1/health/")

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


def test_exception_handler_maps_database_error():
    res = domain_exception_handler(DatabaseError("connection reset"), {})

    assert res.status_code == 500
    assert res.data == {"detail": "Database error.", "code": "internal"}


def test_unhandled_exception_middleware():
    middleware = UnhandledExceptionMiddleware(lambda request: None)
    request = RequestFactory().get("/api/v1/attempts/")

    res = middleware.process_exception(request, RuntimeError("boom"))

    assert res.status_code == 500
    assert b'"code": "internal"' in res.content
