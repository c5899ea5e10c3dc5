"""Storage failures surface as PersistenceFailure in services and HTTP 500 in routes"""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.app.core.exceptions import PersistenceFailure
from backend.app.models.feedback import Feedback
from backend.app.models.user import User
from backend.app.services.identity_store import IdentityStore, StudentIdentity
from backend.app.services.submission_ledger import Answer, SubmissionLedger


def _locked(*args, **kwargs):
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


@pytest.fixture
def rollbacks(monkeypatch):
    """Counts Session.rollback calls across every session (request sessions included)."""
    calls = []
    original = Session.rollback

    def spy(self):
        calls.append(self)
        return original(self)

    monkeypatch.setattr(Session, "rollback", spy)
    return calls


@pytest.fixture
def failing_commit(monkeypatch, rollbacks):
    monkeypatch.setattr(Session, "commit", _locked)
    return rollbacks


def test_ledger_commit_failure_raises_and_rolls_back(db_session, test_user, failing_commit):
    ledger = SubmissionLedger(db_session)
    with pytest.raises(PersistenceFailure):
        ledger.create_submission(StudentIdentity.from_user(test_user), 1, [Answer("q", "a")])
    assert failing_commit
    assert ledger.find_submissions(test_user.id) == set()


def test_resume_path_commit_failure_raises_and_rolls_back(db_session, test_user, failing_commit):
    with pytest.raises(PersistenceFailure):
        IdentityStore(db_session).update_resume_path(test_user.id, "/api/upload/uploads/x.pdf")
    assert failing_commit
    db_session.expire_all()
    assert db_session.query(User).filter(User.id == test_user.id).first().resume_path is None


def test_resume_path_for_missing_student_raises(db_session):
    with pytest.raises(PersistenceFailure):
        IdentityStore(db_session).update_resume_path(404, "/api/upload/uploads/x.pdf")


def test_feedback_submit_returns_500(client, auth_headers, db_session, failing_commit):
    r = client.post(
        "/api/feedback/submit",
        json={"semester": 1, "answers": [{"question": "q", "answer": "a"}]},
        headers=auth_headers,
    )
    assert r.status_code == 500
    assert failing_commit
    assert db_session.query(Feedback).count() == 0


def test_upload_link_failure_returns_500(client, auth_headers, db_session, test_user, failing_commit):
    r = client.post(
        "/api/upload/upload-resume",
        files={"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers,
    )
    assert r.status_code == 500
    assert failing_commit
    db_session.expire_all()
    assert db_session.query(User).filter(User.id == test_user.id).first().resume_path is None


def test_delete_student_failure_returns_500(client, admin_headers, db_session, test_user, failing_commit):
    user_id = test_user.id
    r = client.delete(f"/api/admin/delete-student/{user_id}", headers=admin_headers)
    assert r.status_code == 500
    assert failing_commit
    db_session.expire_all()
    assert db_session.query(User).filter(User.id == user_id).first() is not None


def test_password_reset_failure_returns_500_and_keeps_otp(client, test_user, otp_store, monkeypatch, rollbacks):
    client.post("/api/auth/request-password-reset", json={"contact_no": test_user.contact_no})
    otp = otp_store.get(test_user.contact_no)
    monkeypatch.setattr(Session, "commit", _locked)

    r = client.post("/api/auth/reset-password", json={
        "contact_no": test_user.contact_no, "otp": otp, "new_password": "brandnew1",
    })
    assert r.status_code == 500
    assert rollbacks
    assert otp_store.get(test_user.contact_no) == otp
