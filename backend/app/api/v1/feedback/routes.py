"""
Feedback API - gated milestone submission, own submissions, progress, CSV export
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from backend.app.core.config import settings
from backend.app.core.dependencies import get_admin_user, get_current_user, get_submission_ledger
from backend.app.core.exceptions import MilestoneValidationError, PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.models.user import User
from backend.app.schemas.feedback import (
    AnswerOut,
    FeedbackOut,
    FeedbackStatusOut,
    FeedbackSubmitIn,
    FeedbackSubmitOut,
)
from backend.app.services.feedback_service import feedback_status, submissions_to_csv, submit_feedback
from backend.app.services.identity_store import StudentIdentity
from backend.app.services.milestone_gate import Rejected, RejectionReason, validate_milestone_index
from backend.app.services.submission_ledger import Answer, SubmissionLedger

logger = get_logger("api.feedback")
router = APIRouter(prefix="/feedback", tags=["feedback"])


def _rejection_detail(decision: Rejected) -> dict:
    if decision.reason is RejectionReason.ALREADY_SUBMITTED:
        return {
            "error": "Feedback already submitted",
            "code": decision.reason.value,
            "details": "You have already submitted feedback for this semester",
        }
    return {
        "error": "Previous semester not completed",
        "code": decision.reason.value,
        "missing_semester": decision.missing_milestone,
        "details": f"Submit feedback for semester {decision.missing_milestone} first",
    }


def _invalid_semester(e: MilestoneValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "Invalid semester", "code": "invalid_semester", "details": str(e)},
    )


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/submit", response_model=FeedbackSubmitOut, status_code=status.HTTP_201_CREATED)
def submit(
    payload: FeedbackSubmitIn,
    current_user: User = Depends(get_current_user),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """Submit feedback for the next semester milestone. Milestones must be submitted in order."""
    logger.info("Feedback submission user_id=%s semester=%s", current_user.id, payload.semester)
    answers = [Answer(question=a.question or "", answer=a.answer) for a in payload.answers]
    try:
        outcome = submit_feedback(
            ledger, StudentIdentity.from_user(current_user), payload.semester, answers
        )
    except MilestoneValidationError as e:
        raise _invalid_semester(e)
    except PersistenceFailure as e:
        logger.exception("Feedback persistence failed user_id=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Server error", "details": str(e)},
        )

    if isinstance(outcome, Rejected):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_rejection_detail(outcome))
    return FeedbackSubmitOut(message="Feedback submitted successfully", feedback_id=outcome.id)


@router.get("/user-feedbacks", response_model=list[FeedbackOut])
def user_feedbacks(
    current_user: User = Depends(get_current_user),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """All feedback submitted by the current student, ordered by semester."""
    return [
        FeedbackOut(
            id=s.id,
            semester=s.milestone_index,
            answers=[AnswerOut(question=a.question, answer=a.answer) for a in s.answers],
            submission_date=s.submitted_at,
            student_name=s.student_name,
            student_email=s.student_email,
            student_roll_number=s.student_roll_number,
            student_college=s.student_college,
        )
        for s in ledger.submissions_for(current_user.id)
    ]


@router.get("/status", response_model=FeedbackStatusOut)
def feedback_progress(
    current_user: User = Depends(get_current_user),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """Progress percentage, submitted semesters and the next semester due."""
    progress = feedback_status(ledger, current_user.id)
    return FeedbackStatusOut(
        progress=progress.percentage,
        submitted_semesters=list(progress.submitted),
        next_feedback=progress.next_milestone,
        milestone_count=settings.milestone_count,
    )


@router.get("/export-csv")
def export_csv(
    _admin: User = Depends(get_admin_user),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """Export all feedback submissions as CSV, newest first."""
    submissions = ledger.all_submissions()
    if not submissions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "No feedbacks found", "details": "No feedback data available for export"},
        )
    return _csv_response(
        submissions_to_csv(submissions), f"feedback-export-{date.today().isoformat()}.csv"
    )


@router.get("/export-csv/{semester}")
def export_csv_for_semester(
    semester: int,
    _admin: User = Depends(get_admin_user),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
):
    """Export feedback submissions for one semester as CSV."""
    try:
        validate_milestone_index(semester, settings.milestone_count)
    except MilestoneValidationError as e:
        raise _invalid_semester(e)
    submissions = ledger.all_submissions(semester)
    if not submissions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "No feedbacks found",
                "details": f"No feedback data available for semester {semester}",
            },
        )
    return _csv_response(
        submissions_to_csv(submissions),
        f"feedback-semester-{semester}-export-{date.today().isoformat()}.csv",
    )
