"""
Admin service - dashboard statistics, student listing, per-college completion, student deletion.
"""
import math

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.exceptions import PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.models.feedback import Feedback
from backend.app.models.user import User
from backend.app.services.filename_strategies import basename
from backend.app.services.identity_store import IdentityStore
from backend.app.services.resume_storage import ResumeDirectory

logger = get_logger("services.admin")


def _has_resume():
    return (User.resume_path.isnot(None)) & (User.resume_path != "")


def dashboard_stats(db: Session, recent_limit: int = 10) -> dict:
    """Totals, per-semester counts and the most recent submissions."""
    current = Feedback.semester.isnot(None)
    by_semester = (
        db.query(Feedback.semester, func.count(Feedback.id))
        .filter(current)
        .group_by(Feedback.semester)
        .order_by(Feedback.semester)
        .all()
    )
    recent = (
        db.query(Feedback)
        .filter(current)
        .order_by(Feedback.submission_date.desc(), Feedback.id.desc())
        .limit(recent_limit)
        .all()
    )
    return {
        "total_students": db.query(User).count(),
        "total_feedbacks": db.query(Feedback).filter(current).count(),
        "resumes_uploaded": db.query(User).filter(_has_resume()).count(),
        "feedback_by_semester": [{"semester": s, "count": c} for s, c in by_semester],
        "recent_submissions": [
            {
                "student_name": f.student_name,
                "student_email": f.student_email,
                "semester": f.semester,
                "submission_date": f.submission_date,
            }
            for f in recent
        ],
    }


def list_students(db: Session, page: int = 1, limit: int = 10, search: str = "", college: str = "") -> dict:
    """Students newest first with feedback count and resume flag."""
    page = max(1, page)
    limit = max(1, limit)
    q = IdentityStore(db).search(search, college)
    total = q.count()
    students = q.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()

    ids = [s.id for s in students]
    counts = dict(
        db.query(Feedback.user_id, func.count(Feedback.id))
        .filter(Feedback.user_id.in_(ids), Feedback.semester.isnot(None))
        .group_by(Feedback.user_id)
        .all()
    ) if ids else {}

    return {
        "students": [
            {
                "id": s.id,
                "full_name": s.full_name,
                "email": s.email,
                "roll_number": s.roll_number,
                "college_name": s.college_name,
                "contact_no": s.contact_no,
                "course": s.course,
                "semester": s.semester,
                "created_at": s.created_at,
                "feedback_count": counts.get(s.id, 0),
                "resume_submitted": bool(s.resume_path),
                "resume_file_path": s.resume_path or None,
            }
            for s in students
        ],
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total": total,
    }


def college_stats(db: Session) -> list[dict]:
    """Per college: students, students with a linked resume, completion percent (1 decimal)."""
    totals = (
        db.query(User.college_name, func.count(User.id))
        .group_by(User.college_name)
        .order_by(func.count(User.id).desc(), User.college_name)
        .all()
    )
    uploaded = dict(
        db.query(User.college_name, func.count(User.id))
        .filter(_has_resume())
        .group_by(User.college_name)
        .all()
    )
    out = []
    for college, total in totals:
        resumes = uploaded.get(college, 0)
        out.append({
            "college_name": college,
            "total_students": total,
            "resumes_uploaded": resumes,
            "completion_rate": round(resumes / total * 100, 1) if total else 0.0,
        })
    return out


def delete_student(db: Session, directory: ResumeDirectory, student_id: int) -> bool:
    """Delete a student, their feedback and their linked resume file. False if no such student."""
    user = db.query(User).filter(User.id == student_id).first()
    if not user:
        return False
    linked_file = basename(user.resume_path) if user.resume_path else None
    try:
        db.query(Feedback).filter(Feedback.user_id == user.id).delete(synchronize_session=False)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Delete failed student_id=%s", student_id)
        raise PersistenceFailure(f"Could not delete student {student_id}") from e
    if linked_file:
        directory.delete(linked_file)
    logger.info("Deleted student_id=%s with feedback and resume", student_id)
    return True
