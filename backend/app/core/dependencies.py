"""
Dependency injection utilities
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.db.session import SessionLocal
from backend.app.models.user import User
from backend.app.services.identity_store import IdentityStore
from backend.app.services.otp_store import TtlStore
from backend.app.services.resume_reconciler import ResumeReconciler
from backend.app.services.resume_storage import ResumeDirectory
from backend.app.services.submission_ledger import SubmissionLedger

security = HTTPBearer(auto_error=False)


def get_db() -> Session:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated student from JWT"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = credentials.credentials
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        user_id: str = payload.get("sub")
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Admin accounts are recognised by the configured marker in their email."""
    if settings.admin_email_marker not in (current_user.email or ""):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin only.",
        )
    return current_user


def get_otp_store(request: Request) -> TtlStore:
    """Application-owned OTP store (created in main.py)."""
    return request.app.state.otp_store


def get_resume_directory() -> ResumeDirectory:
    return ResumeDirectory(settings.upload_dir)


def get_identity_store(db: Session = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db)


def get_submission_ledger(db: Session = Depends(get_db)) -> SubmissionLedger:
    return SubmissionLedger(db)


def get_reconciler(
    identities: IdentityStore = Depends(get_identity_store),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
    directory: ResumeDirectory = Depends(get_resume_directory),
) -> ResumeReconciler:
    return ResumeReconciler(identities, ledger, directory)
