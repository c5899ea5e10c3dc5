"""
Relink orphan resume files: write resume_path for students whose roll number appears in a file name
but whose own link is missing or points at a file that no longer exists.
Run via cron or: python -c "from backend.app.tasks.relink_resumes import run_relink; print(run_relink())"
"""
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.core.logging_config import get_logger
from backend.app.db.session import SessionLocal
from backend.app.services.filename_strategies import filename_hints
from backend.app.services.identity_store import IdentityStore
from backend.app.services.resume_service import resume_url
from backend.app.services.resume_storage import ResumeDirectory

logger = get_logger("tasks.relink_resumes")


def relink_resumes(db: Session, directory: ResumeDirectory) -> dict:
    """
    Newest file first (canonical names end in the upload date), so a student with several
    orphan uploads is linked to the latest one. Students with a live link are left alone.
    """
    identities = IdentityStore(db)
    filenames = directory.list_files()
    available = set(filenames)
    linked_files = {i.resume_basename for i in identities.with_resume_path()} & available

    result = {"linked": 0, "already_linked": 0, "unmatched": 0}
    for name in sorted(filenames, reverse=True):
        if name in linked_files:
            result["already_linked"] += 1
            continue
        _, roll = filename_hints(name)
        student = identities.find_by_roll_number(roll) if roll else None
        if not student:
            logger.info("No student for file=%s roll_hint=%s", name, roll)
            result["unmatched"] += 1
            continue
        if student.resume_basename in available:
            # Student already owns a live file; this one stays an orphan
            result["unmatched"] += 1
            continue
        identities.update_resume_path(student.id, resume_url(name))
        linked_files.add(name)
        result["linked"] += 1
    logger.info("Relink finished %s", result)
    return result


def run_relink() -> dict:
    """Run relink using a new DB session and the configured upload directory."""
    db = SessionLocal()
    try:
        return relink_resumes(db, ResumeDirectory(settings.upload_dir))
    finally:
        db.close()
