"""
Authentication endpoints - Register, Login, Current Student, and OTP password reset
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.dependencies import get_current_user, get_db, get_otp_store
from backend.app.core.exceptions import PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.models.user import User
from backend.app.schemas.user import (
    PasswordResetConfirm,
    PasswordResetRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from backend.app.services.auth_service import AuthService
from backend.app.services.otp_store import TtlStore

logger = get_logger("api.auth")
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new student account. Returns an access token (student is logged in after register).

    - **email** and **roll_number** must be unique
    - **contact_no**: exactly 10 digits, used for password reset
    """
    logger.info("Registration attempt for email=%s", user_data.email)
    try:
        result = AuthService.register_user(db, user_data)
    except Exception as e:
        logger.exception("Registration error email=%s error=%s", user_data.email, str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed",
        )

    if not result["success"]:
        logger.warning("Registration failed email=%s reason=%s", user_data.email, result["message"])
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result["message"])

    user = result["user"]
    logger.info("Student registered user_id=%s email=%s", user.id, user.email)
    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        user=UserResponse.model_validate(user),
        message=result["message"],
    )


@router.post("/login", response_model=TokenResponse)
def login(login_data: UserLogin, db: Session = Depends(get_db)):
    """
    Login and get access token

    - **email**: Student's email address
    - **password**: Student's password
    """
    logger.info("Login attempt for email=%s", login_data.email)
    result = AuthService.login_user(db, login_data)
    if not result["success"]:
        logger.warning("Login failed email=%s reason=%s", login_data.email, result["message"])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result["message"],
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = result["user"]
    logger.info("Student logged in user_id=%s", user.id)
    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        user=UserResponse.model_validate(user),
        message=result["message"],
    )


@router.get("/profile", response_model=UserResponse)
def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Current authenticated student. Used to refresh auth state on app load."""
    return UserResponse.model_validate(current_user)


@router.post("/request-password-reset")
def request_password_reset(
    payload: PasswordResetRequest,
    db: Session = Depends(get_db),
    otp_store: TtlStore = Depends(get_otp_store),
):
    """Issue a one-time code for the account registered with this contact number."""
    result = AuthService.request_password_reset(db, payload.contact_no, otp_store)
    return {"success": result["success"], "message": result["message"]}


@router.post("/reset-password")
def reset_password(
    payload: PasswordResetConfirm,
    db: Session = Depends(get_db),
    otp_store: TtlStore = Depends(get_otp_store),
):
    """Verify the one-time code and set a new password."""
    try:
        result = AuthService.reset_password(
            db, payload.contact_no, payload.otp, payload.new_password, otp_store
        )
    except PersistenceFailure as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not result["success"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result["message"])
    return {"success": True, "message": result["message"]}
