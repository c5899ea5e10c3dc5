"""
Resume service - upload storage and resume_path write-back.
Used by POST /api/upload/upload-resume and the relink task.
"""
from datetime import date
from pathlib import Path
from typing import Optional

from backend.app.core.config import ALLOWED_RESUME_EXTENSIONS, MAX_RESUME_BYTES
from backend.app.core.logging_config import get_logger
from backend.app.services.filename_strategies import canonical_resume_filename
from backend.app.services.identity_store import IdentityStore, StudentIdentity
from backend.app.services.resume_storage import ResumeDirectory

logger = get_logger("services.resume")

# Public URL prefix stored in resume_path (served by GET /api/upload/uploads/{filename});
# only the basename is matched on disk, so older "/uploads/..." values still resolve
RESUME_URL_PREFIX = "/api/upload/uploads"

MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def resume_url(filename: str) -> str:
    return f"{RESUME_URL_PREFIX}/{filename}"


def media_type_for(filename: str) -> str:
    return MEDIA_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def validate_resume_upload(original_name: Optional[str], content: bytes) -> str:
    """Return the lower-cased extension or raise ValueError with a user-facing message."""
    if not original_name:
        raise ValueError("No file uploaded or invalid file type")
    ext = Path(original_name).suffix.lower()
    if ext not in ALLOWED_RESUME_EXTENSIONS:
        raise ValueError("Only PDF, DOC, and DOCX files are allowed")
    if not content:
        raise ValueError("Uploaded file is empty")
    if len(content) > MAX_RESUME_BYTES:
        raise ValueError(f"File too large. Maximum size is {MAX_RESUME_BYTES // (1024 * 1024)}MB")
    return ext


def store_resume(
    directory: ResumeDirectory,
    identities: IdentityStore,
    student: StudentIdentity,
    original_name: Optional[str],
    content: bytes,
    on_date: Optional[date] = None,
) -> StudentIdentity:
    """
    Save an upload under the student's canonical filename and link it via resume_path.
    Raises ValueError for invalid uploads and PersistenceFailure if the link can't be written.
    """
    ext = validate_resume_upload(original_name, content)
    filename = canonical_resume_filename(student, ext, on_date or date.today())
    directory.save_upload(filename, content)
    updated = identities.update_resume_path(student.id, resume_url(filename))
    logger.info("Resume uploaded student_id=%s file=%s original=%s", student.id, filename, original_name)
    return updated
