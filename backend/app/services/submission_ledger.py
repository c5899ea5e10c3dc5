"""
Submission ledger - persistence for milestone feedback.

Rows come in two shapes: current submissions (semester + structured answers) and legacy
resume-upload records (semester NULL, file path in `responses`). Each row is resolved once
here into CurrentSubmission | LegacySubmission; nothing past this module sees raw rows.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.exceptions import DuplicateSubmissionError, PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.models.feedback import Feedback
from backend.app.services.identity_store import StudentIdentity

logger = get_logger("services.submission_ledger")


@dataclass(frozen=True)
class Answer:
    question: str
    answer: Any


@dataclass(frozen=True)
class CurrentSubmission:
    id: int
    student_id: int
    milestone_index: int
    answers: tuple[Answer, ...]
    submitted_at: Optional[datetime]
    student_name: str
    student_email: str
    student_roll_number: str
    student_college: str


@dataclass(frozen=True)
class LegacySubmission:
    id: int
    student_id: int
    student_name: str
    student_email: str
    student_roll_number: str
    student_college: str
    file_path: Optional[str]
    file_name: Optional[str]
    submitted_at: Optional[datetime]

    @property
    def file_refs(self) -> tuple[str, ...]:
        """filePath first, then fileName; empty values dropped."""
        return tuple(ref for ref in (self.file_path, self.file_name) if ref)


LedgerRecord = Union[CurrentSubmission, LegacySubmission]


def to_record(row: Feedback) -> LedgerRecord:
    if row.semester is None:
        responses = row.responses if isinstance(row.responses, dict) else {}
        return LegacySubmission(
            id=row.id,
            student_id=row.user_id,
            student_name=row.student_name or "",
            student_email=row.student_email or "",
            student_roll_number=row.student_roll_number or "",
            student_college=row.student_college or "",
            file_path=responses.get("filePath") or None,
            file_name=responses.get("fileName") or None,
            submitted_at=row.submission_date,
        )
    return CurrentSubmission(
        id=row.id,
        student_id=row.user_id,
        milestone_index=row.semester,
        answers=tuple(
            Answer(question=(a or {}).get("question") or "", answer=(a or {}).get("answer"))
            for a in (row.answers or [])
        ),
        submitted_at=row.submission_date,
        student_name=row.student_name or "",
        student_email=row.student_email or "",
        student_roll_number=row.student_roll_number or "",
        student_college=row.student_college or "",
    )


class SubmissionLedger:
    """SQLAlchemy-backed ledger. One instance per request session."""

    def __init__(self, db: Session):
        self.db = db

    def find_submissions(self, student_id: int) -> set[int]:
        """Milestone indices the student has already submitted."""
        rows = (
            self.db.query(Feedback.semester)
            .filter(Feedback.user_id == student_id, Feedback.semester.isnot(None))
            .all()
        )
        return {r[0] for r in rows}

    def submissions_for(self, student_id: int) -> list[CurrentSubmission]:
        rows = (
            self.db.query(Feedback)
            .filter(Feedback.user_id == student_id, Feedback.semester.isnot(None))
            .order_by(Feedback.semester)
            .all()
        )
        return [to_record(r) for r in rows]

    def all_submissions(self, milestone_index: Optional[int] = None) -> list[CurrentSubmission]:
        """Current submissions, newest first, optionally for one milestone."""
        q = self.db.query(Feedback).filter(Feedback.semester.isnot(None))
        if milestone_index is not None:
            q = q.filter(Feedback.semester == milestone_index)
        rows = q.order_by(Feedback.submission_date.desc(), Feedback.id.desc()).all()
        return [to_record(r) for r in rows]

    def legacy_submissions(self) -> list[LegacySubmission]:
        rows = (
            self.db.query(Feedback)
            .filter(Feedback.semester.is_(None), Feedback.responses.isnot(None))
            .order_by(Feedback.submission_date.desc(), Feedback.id.desc())
            .all()
        )
        return [rec for rec in (to_record(r) for r in rows) if rec.file_refs]

    def legacy_file_links(self, records: Optional[Iterable[LegacySubmission]] = None) -> dict[int, list[str]]:
        """student_id -> file references from legacy records, newest record first."""
        links: dict[int, list[str]] = {}
        for rec in records if records is not None else self.legacy_submissions():
            links.setdefault(rec.student_id, []).extend(rec.file_refs)
        return links

    def create_submission(
        self,
        student: StudentIdentity,
        milestone_index: int,
        answers: Iterable[Answer],
    ) -> CurrentSubmission:
        """
        Persist a new submission. Never overwrites: an existing (student, milestone) pair
        raises DuplicateSubmissionError; any other storage error raises PersistenceFailure.
        """
        row = Feedback(
            user_id=student.id,
            student_name=student.full_name,
            student_email=student.email,
            student_roll_number=student.roll_number,
            student_college=student.college_name,
            semester=milestone_index,
            answers=[{"question": a.question or "", "answer": a.answer} for a in answers],
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateSubmissionError(student.id, milestone_index) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Feedback insert failed student_id=%s semester=%s", student.id, milestone_index)
            raise PersistenceFailure("Could not save feedback submission") from e
        logger.info("Feedback saved id=%s student_id=%s semester=%s", row.id, student.id, milestone_index)
        return to_record(row)
