"""
Resume upload and file-serving endpoints - uploads are stored under the student's canonical name and linked
"""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse

from backend.app.core.config import MAX_RESUME_BYTES, settings
from backend.app.core.dependencies import get_current_user, get_identity_store, get_resume_directory
from backend.app.core.exceptions import PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.models.user import User
from backend.app.schemas.resume import ResumeUploadOut
from backend.app.services.filename_strategies import basename
from backend.app.services.identity_store import IdentityStore, StudentIdentity
from backend.app.services.resume_service import media_type_for, store_resume
from backend.app.services.resume_storage import ResumeDirectory

logger = get_logger("api.upload")
router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/upload-resume", response_model=ResumeUploadOut)
async def upload_resume(
    resume: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    identities: IdentityStore = Depends(get_identity_store),
    directory: ResumeDirectory = Depends(get_resume_directory),
):
    """Upload a resume (PDF, DOC or DOCX, max 5MB). Replaces the student's linked resume."""
    # Read one byte past the limit so oversize uploads are detected without buffering them whole
    content = await resume.read(MAX_RESUME_BYTES + 1)
    try:
        updated = store_resume(
            directory, identities, StudentIdentity.from_user(current_user), resume.filename, content
        )
    except ValueError as e:
        logger.warning("Resume upload rejected user_id=%s reason=%s", current_user.id, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PersistenceFailure as e:
        logger.exception("Resume link failed user_id=%s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except OSError as e:
        logger.exception("Resume write failed user_id=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error uploading file"
        ) from e

    return ResumeUploadOut(
        file_path=updated.resume_path,
        file_name=basename(updated.resume_path),
        original_name=resume.filename or "",
    )


@router.get("/uploads/{filename}")
def get_uploaded_file(
    filename: str,
    current_user: User = Depends(get_current_user),
    directory: ResumeDirectory = Depends(get_resume_directory),
):
    """Serve a stored resume. Students may fetch only their own linked file; admins any file."""
    is_admin = settings.admin_email_marker in (current_user.email or "")
    own_file = StudentIdentity.from_user(current_user).resume_basename
    if not is_admin and filename != own_file:
        logger.info("Resume fetch refused user_id=%s file=%s", current_user.id, filename)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    try:
        path = directory.path_for(filename)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(path, media_type=media_type_for(filename), filename=filename)
