"""
Student account Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, Field
from typing import Optional

from backend.app.core.config import MAX_STUDENT_SEMESTER, MIN_STUDENT_SEMESTER

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
CONTACT_PATTERN = r"^[0-9]{10}$"


class UserRegister(BaseModel):
    """Schema for student registration"""
    full_name: str = Field(min_length=3, max_length=100)
    email: str = Field(min_length=6, max_length=255, pattern=EMAIL_PATTERN)
    roll_number: str = Field(min_length=1, max_length=64)
    college_name: str = Field(min_length=1, max_length=255)
    contact_no: str = Field(pattern=CONTACT_PATTERN)
    course: str = Field(min_length=1, max_length=120)
    semester: int = Field(ge=MIN_STUDENT_SEMESTER, le=MAX_STUDENT_SEMESTER)
    password: str = Field(min_length=6, max_length=72)


class UserLogin(BaseModel):
    """Schema for student login"""
    email: str = Field(min_length=6, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=72)


class UserResponse(BaseModel):
    """Schema for student response"""
    id: Optional[int] = None
    full_name: str
    email: str
    roll_number: str
    college_name: str
    course: str = ""
    semester: Optional[int] = None
    resume_path: Optional[str] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    message: Optional[str] = None  # e.g. "Registration successful" or "Login successful"


class PasswordResetRequest(BaseModel):
    contact_no: str = Field(pattern=CONTACT_PATTERN)


class PasswordResetConfirm(BaseModel):
    contact_no: str = Field(pattern=CONTACT_PATTERN)
    otp: str = Field(min_length=4, max_length=12)
    new_password: str = Field(min_length=6, max_length=72)
