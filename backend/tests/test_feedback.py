"""Tests for /api/feedback: gated submission, status, own feedbacks, CSV export"""
import csv
import io

import pytest

from backend.app.core.exceptions import DuplicateSubmissionError
from backend.app.services.feedback_service import submissions_to_csv
from backend.app.services.identity_store import StudentIdentity
from backend.app.services.submission_ledger import Answer, CurrentSubmission, SubmissionLedger

ANSWERS = [
    {"question": "How was the course?", "answer": "Good"},
    {"question": "Rate the mentors", "answer": 4},
]


def submit(client, headers, semester, answers=ANSWERS):
    return client.post("/api/feedback/submit", json={"semester": semester, "answers": answers}, headers=headers)


def test_submit_requires_auth(client):
    r = client.post("/api/feedback/submit", json={"semester": 1, "answers": ANSWERS})
    assert r.status_code == 401


def test_submit_first_semester(client, auth_headers):
    r = submit(client, auth_headers, 1)
    assert r.status_code == 201
    data = r.json()
    assert data["success"] is True
    assert isinstance(data["feedback_id"], int)


def test_submit_out_of_order_names_missing_semester(client, auth_headers):
    submit(client, auth_headers, 1)
    r = submit(client, auth_headers, 3)
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["code"] == "prerequisite_missing"
    assert detail["missing_semester"] == 2


def test_resubmission_rejected(client, auth_headers):
    assert submit(client, auth_headers, 1).status_code == 201
    r = submit(client, auth_headers, 1)
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "already_submitted"


def test_invalid_semester(client, auth_headers):
    r = submit(client, auth_headers, 4)
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "invalid_semester"


def test_status_tracks_progress(client, auth_headers):
    r = client.get("/api/feedback/status", headers=auth_headers)
    assert r.json() == {"progress": 0, "submitted_semesters": [], "next_feedback": 1, "milestone_count": 3}

    submit(client, auth_headers, 1)
    submit(client, auth_headers, 2)
    data = client.get("/api/feedback/status", headers=auth_headers).json()
    assert data["progress"] == 50
    assert data["submitted_semesters"] == [1, 2]
    assert data["next_feedback"] == 3

    submit(client, auth_headers, 3)
    data = client.get("/api/feedback/status", headers=auth_headers).json()
    assert data["progress"] == 100
    assert data["next_feedback"] is None


def test_user_feedbacks_lists_own_submissions(client, auth_headers, test_user):
    submit(client, auth_headers, 1)
    r = client.get("/api/feedback/user-feedbacks", headers=auth_headers)
    assert r.status_code == 200
    (item,) = r.json()
    assert item["semester"] == 1
    assert item["student_roll_number"] == test_user.roll_number
    assert item["answers"][1] == {"question": "Rate the mentors", "answer": 4}


def test_ledger_refuses_duplicate_insert(db_session, test_user):
    """The unique (user, semester) constraint backs the gate."""
    ledger = SubmissionLedger(db_session)
    student = StudentIdentity.from_user(test_user)
    ledger.create_submission(student, 1, [Answer("q", "a")])
    with pytest.raises(DuplicateSubmissionError):
        ledger.create_submission(student, 1, [Answer("q", "b")])
    assert ledger.find_submissions(test_user.id) == {1}


def test_export_requires_admin(client, auth_headers):
    assert client.get("/api/feedback/export-csv", headers=auth_headers).status_code == 403


def test_export_empty_is_404(client, admin_headers):
    assert client.get("/api/feedback/export-csv", headers=admin_headers).status_code == 404


def test_export_csv(client, auth_headers, admin_headers, test_user):
    submit(client, auth_headers, 1)
    r = client.get("/api/feedback/export-csv", headers=admin_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "attachment" in r.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(r.text)))
    assert rows[0][:6] == ["Student Name", "Email", "Roll Number", "College", "Semester", "Submission Date"]
    assert rows[0][6:] == ["Question 1", "Question 2"]
    assert rows[1][:5] == [test_user.full_name, test_user.email, test_user.roll_number, test_user.college_name, "1"]
    assert rows[1][6:] == ["Good", "4"]


def test_export_csv_for_semester(client, auth_headers, admin_headers):
    submit(client, auth_headers, 1)
    assert client.get("/api/feedback/export-csv/1", headers=admin_headers).status_code == 200
    assert client.get("/api/feedback/export-csv/2", headers=admin_headers).status_code == 404
    assert client.get("/api/feedback/export-csv/9", headers=admin_headers).status_code == 400


def test_csv_flattens_multiline_and_structured_answers():
    submission = CurrentSubmission(
        id=1, student_id=1, milestone_index=2,
        answers=(Answer("q1", "line one\nline two"), Answer("q2", ["a", "b"]), Answer("q3", None)),
        submitted_at=None, student_name="", student_email="", student_roll_number="", student_college="",
    )
    rows = list(csv.reader(io.StringIO(submissions_to_csv([submission]))))
    assert rows[1] == ["Unknown User", "N/A", "N/A", "N/A", "2", "", "line one line two", '["a", "b"]', ""]
