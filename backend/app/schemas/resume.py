"""
Resume upload and admin dashboard schemas
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ResumeUploadOut(BaseModel):
    success: bool = True
    file_path: str
    file_name: str
    original_name: str


class ResumeRecordOut(BaseModel):
    """Reconciled row of the admin resume dashboard. student_id is null for unmatched files."""
    student_id: Optional[int] = None
    student_name: str
    student_email: str
    student_roll_number: str
    student_college: str
    submission_date: Optional[datetime] = None
    file_name: str
    file_path: str
    size_bytes: int
    match_strategy: str


class ResumeListOut(BaseModel):
    resumes: list[ResumeRecordOut]
    total: int
    total_pages: int
    current_page: int


class StudentSummaryOut(BaseModel):
    id: int
    full_name: str
    email: str
    roll_number: str
    college_name: str
    contact_no: str
    course: str
    semester: int
    created_at: Optional[datetime] = None
    feedback_count: int
    resume_submitted: bool
    resume_file_path: Optional[str] = None


class StudentListOut(BaseModel):
    students: list[StudentSummaryOut]
    total_pages: int
    current_page: int
    total: int


class SemesterCount(BaseModel):
    semester: int
    count: int


class RecentSubmission(BaseModel):
    student_name: str
    student_email: str
    semester: int
    submission_date: Optional[datetime] = None


class DashboardStatsOut(BaseModel):
    total_students: int
    total_feedbacks: int
    resumes_uploaded: int
    feedback_by_semester: list[SemesterCount]
    recent_submissions: list[RecentSubmission]


class CollegeStatOut(BaseModel):
    college_name: str
    total_students: int
    resumes_uploaded: int
    completion_rate: float


class MessageOut(BaseModel):
    message: str
    details: Optional[dict[str, Any]] = None
