"""
Authentication service business logic
"""
import hmac
import secrets
from datetime import timedelta

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from backend.app.core.config import OTP_LENGTH, settings
from backend.app.core.exceptions import PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.core.security import verify_password, get_password_hash, create_access_token
from backend.app.models.user import User
from backend.app.schemas.user import UserRegister, UserLogin
from backend.app.services.otp_store import EXPIRED, MISSING, TtlStore

logger = get_logger("services.auth")


def _issue_token(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )


def _generate_otp() -> str:
    return "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))


def deliver_otp(contact_no: str, otp: str) -> None:
    """SMS delivery hook. No gateway is wired; the code is only logged at debug level."""
    logger.info("Password reset OTP issued for contact ending %s", contact_no[-3:])
    logger.debug("OTP for %s: %s", contact_no, otp)


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def register_user(db: Session, user_data: UserRegister):
        """Register a new student"""
        email = user_data.email.strip().lower()
        if db.query(User).filter(User.email == email).first():
            return {"success": False, "message": "Email already exists"}
        if db.query(User).filter(User.roll_number == user_data.roll_number.strip()).first():
            return {"success": False, "message": "Roll number already registered"}

        new_user = User(
            full_name=user_data.full_name.strip(),
            email=email,
            roll_number=user_data.roll_number.strip(),
            college_name=user_data.college_name.strip(),
            contact_no=user_data.contact_no,
            course=user_data.course.strip(),
            semester=user_data.semester,
            hashed_password=get_password_hash(user_data.password),
        )
        try:
            db.add(new_user)
            db.commit()
            db.refresh(new_user)
        except IntegrityError:
            db.rollback()
            return {"success": False, "message": "Error registering user"}

        return {
            "success": True,
            "user": new_user,
            "message": "Registration successful",
            "access_token": _issue_token(new_user),
            "token_type": "bearer",
        }

    @staticmethod
    def login_user(db: Session, login_data: UserLogin):
        """Authenticate student and return access token"""
        user = db.query(User).filter(User.email == login_data.email.strip().lower()).first()
        if not user or not verify_password(login_data.password, user.hashed_password):
            return {"success": False, "message": "Invalid email or password"}
        if not user.is_active:
            return {"success": False, "message": "User account is inactive"}
        return {
            "success": True,
            "access_token": _issue_token(user),
            "token_type": "bearer",
            "user": user,
            "message": "Login successful",
        }

    @staticmethod
    def request_password_reset(db: Session, contact_no: str, otp_store: TtlStore):
        """
        Issue an OTP for the account registered with contact_no.
        The response is the same whether or not the number is registered.
        """
        user = db.query(User).filter(User.contact_no == contact_no).first()
        if not user:
            logger.warning("Password reset requested for unknown contact ending %s", contact_no[-3:])
            return {"success": True, "message": "If the number is registered, an OTP has been sent"}
        otp = _generate_otp()
        otp_store.put(contact_no, otp, ttl=settings.otp_ttl_seconds)
        deliver_otp(contact_no, otp)
        return {"success": True, "message": "If the number is registered, an OTP has been sent"}

    @staticmethod
    def reset_password(db: Session, contact_no: str, otp: str, new_password: str, otp_store: TtlStore):
        """
        Verify the OTP for contact_no and set a new password. OTPs are single use;
        a failed password write raises PersistenceFailure and leaves the OTP in place.
        """
        stored = otp_store.get(contact_no)
        if stored is EXPIRED:
            return {"success": False, "message": "OTP has expired, request a new one"}
        if stored is MISSING or not hmac.compare_digest(str(stored), otp.strip()):
            return {"success": False, "message": "Invalid OTP"}

        user = db.query(User).filter(User.contact_no == contact_no).first()
        if not user:
            otp_store.delete(contact_no)
            return {"success": False, "message": "Invalid OTP"}
        user_id = user.id
        try:
            user.hashed_password = get_password_hash(new_password)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Password reset failed user_id=%s", user_id)
            raise PersistenceFailure(f"Could not reset password for user {user_id}") from e
        otp_store.delete(contact_no)
        logger.info("Password reset completed user_id=%s", user_id)
        return {"success": True, "message": "Password reset successful"}
