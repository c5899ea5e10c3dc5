"""
Feedback service - milestone submission acceptance, progress and CSV export.
Wraps the milestone gate around the submission ledger.
"""
import csv
import io
import json
from typing import Any, Iterable, Optional

from backend.app.core.config import settings
from backend.app.core.exceptions import DuplicateSubmissionError
from backend.app.core.logging_config import get_logger
from backend.app.services.identity_store import StudentIdentity
from backend.app.services.milestone_gate import (
    MilestoneProgress,
    Rejected,
    RejectionReason,
    can_submit,
    compute_progress,
    validate_milestone_index,
)
from backend.app.services.submission_ledger import Answer, CurrentSubmission, SubmissionLedger

logger = get_logger("services.feedback")

CSV_BASE_COLUMNS = ["Student Name", "Email", "Roll Number", "College", "Semester", "Submission Date"]


def submit_feedback(
    ledger: SubmissionLedger,
    student: StudentIdentity,
    milestone_index: int,
    answers: Iterable[Answer],
    milestone_count: Optional[int] = None,
) -> CurrentSubmission | Rejected:
    """
    Validate the index, consult the gate, then persist.
    Raises MilestoneValidationError for an out-of-range index and PersistenceFailure on
    storage errors; gate rejections are returned.
    """
    count = milestone_count or settings.milestone_count
    validate_milestone_index(milestone_index, count)

    decision = can_submit(ledger.find_submissions(student.id), milestone_index)
    if isinstance(decision, Rejected):
        logger.info(
            "Feedback rejected student_id=%s semester=%s reason=%s",
            student.id, milestone_index, decision.reason,
        )
        return decision

    try:
        return ledger.create_submission(student, milestone_index, answers)
    except DuplicateSubmissionError:
        # A concurrent request won the insert after the gate check
        logger.info("Feedback duplicate on insert student_id=%s semester=%s", student.id, milestone_index)
        return Rejected(milestone_index, RejectionReason.ALREADY_SUBMITTED)


def feedback_status(ledger: SubmissionLedger, student_id: int, milestone_count: Optional[int] = None) -> MilestoneProgress:
    return compute_progress(ledger.find_submissions(student_id), milestone_count or settings.milestone_count)


def _csv_answer(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.replace("\r", "").replace("\n", " ")
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def submissions_to_csv(submissions: list[CurrentSubmission]) -> str:
    """One row per submission; question columns sized to the longest answer list."""
    question_count = max((len(s.answers) for s in submissions), default=0)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_BASE_COLUMNS + [f"Question {i + 1}" for i in range(question_count)])
    for s in submissions:
        row = [
            s.student_name or "Unknown User",
            s.student_email or "N/A",
            s.student_roll_number or "N/A",
            s.student_college or "N/A",
            s.milestone_index,
            s.submitted_at.strftime("%Y-%m-%d") if s.submitted_at else "",
        ]
        row.extend(_csv_answer(a.answer) for a in s.answers)
        writer.writerow(row)
    return buf.getvalue()
