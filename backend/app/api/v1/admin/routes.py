"""
Admin API - dashboard stats, student listing, reconciled resume dashboard and downloads
"""
import io
import zipfile

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.core.dependencies import (
    get_admin_user,
    get_db,
    get_identity_store,
    get_reconciler,
    get_resume_directory,
)
from backend.app.core.exceptions import PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.schemas.resume import (
    CollegeStatOut,
    DashboardStatsOut,
    MessageOut,
    ResumeListOut,
    ResumeRecordOut,
    StudentListOut,
)
from backend.app.services import admin_service
from backend.app.services.filename_strategies import ResumeNotFound
from backend.app.services.identity_store import IdentityStore
from backend.app.services.resume_reconciler import ResumeReconciler
from backend.app.services.resume_service import media_type_for, resume_url
from backend.app.services.resume_storage import ResumeDirectory

logger = get_logger("api.admin")
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin_user)])


@router.get("/dashboard-stats", response_model=DashboardStatsOut)
def dashboard_stats(db: Session = Depends(get_db)):
    """Totals, feedback per semester and the latest submissions."""
    return admin_service.dashboard_stats(db, settings.recent_submissions_limit)


@router.get("/students", response_model=StudentListOut)
def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    college: str = "",
    db: Session = Depends(get_db),
):
    """Students (newest first) with feedback count and resume status."""
    return admin_service.list_students(db, page=page, limit=limit, search=search, college=college)


@router.get("/resumes", response_model=ResumeListOut)
def list_resumes(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    search: str = "",
    reconciler: ResumeReconciler = Depends(get_reconciler),
):
    """
    Every resume file on disk, matched to a student where possible.
    search filters on name, email and college (case-insensitive).
    """
    result = reconciler.list_resumes(page=page, page_size=limit or settings.resume_page_size, search=search)
    return ResumeListOut(
        resumes=[
            ResumeRecordOut(
                student_id=r.student_id,
                student_name=r.student_name,
                student_email=r.student_email,
                student_roll_number=r.student_roll_number,
                student_college=r.student_college,
                submission_date=r.submission_date,
                file_name=r.filename,
                file_path=resume_url(r.filename),
                size_bytes=r.size_bytes,
                match_strategy=r.match_strategy,
            )
            for r in result.records
        ],
        total=result.total_count,
        total_pages=result.page_count,
        current_page=result.page,
    )


@router.get("/download-resume/{student_email}")
def download_resume(
    student_email: str,
    identities: IdentityStore = Depends(get_identity_store),
    reconciler: ResumeReconciler = Depends(get_reconciler),
    directory: ResumeDirectory = Depends(get_resume_directory),
):
    """Download the resume resolved for a student. 404 rather than ever serving another file."""
    identity = identities.find_by_email(student_email)
    if not identity:
        logger.info("Resume download for unknown student email=%s", student_email)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found for this student")

    match = reconciler.resolve_resume_for(identity)
    if isinstance(match, ResumeNotFound) or not directory.exists(match.filename):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found for this student")

    path = directory.path_for(match.filename)
    logger.info(
        "Resume download student_id=%s file=%s strategy=%s", identity.id, match.filename, match.strategy
    )
    return FileResponse(
        path,
        media_type=media_type_for(match.filename),
        filename=match.filename,
    )


@router.get("/download-all-resumes")
def download_all_resumes(directory: ResumeDirectory = Depends(get_resume_directory)):
    """ZIP archive of every resume file in the upload directory."""
    filenames = directory.list_files()
    if not filenames:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No resumes found")

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for name in filenames:
            try:
                archive.write(directory.path_for(name), arcname=name)
            except OSError as e:
                logger.warning("Skipping %s in archive: %s", name, e)
    logger.info("Built resume archive files=%d bytes=%d", len(filenames), buf.tell())
    return Response(
        content=buf.getvalue(),
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="all_student_resumes.zip"'},
    )


@router.get("/college-stats", response_model=list[CollegeStatOut])
def college_stats(db: Session = Depends(get_db)):
    """Per-college student count and resume completion rate."""
    return admin_service.college_stats(db)


@router.delete("/delete-student/{student_id}", response_model=MessageOut)
def delete_student(
    student_id: int,
    db: Session = Depends(get_db),
    directory: ResumeDirectory = Depends(get_resume_directory),
):
    """Delete a student with all feedback and the linked resume file."""
    try:
        deleted = admin_service.delete_student(db, directory, student_id)
    except PersistenceFailure as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return MessageOut(message="Student and all associated data deleted successfully")
