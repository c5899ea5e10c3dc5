"""
Feedback Pydantic schemas
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class AnswerIn(BaseModel):
    question: Optional[str] = ""
    answer: Any = None


class FeedbackSubmitIn(BaseModel):
    # Range is checked against settings.milestone_count by the feedback service
    semester: int
    answers: list[AnswerIn]


class FeedbackSubmitOut(BaseModel):
    success: bool = True
    message: str
    feedback_id: int


class AnswerOut(BaseModel):
    question: str
    answer: Any = None


class FeedbackOut(BaseModel):
    id: int
    semester: int
    answers: list[AnswerOut]
    submission_date: Optional[datetime] = None
    student_name: str
    student_email: str
    student_roll_number: str
    student_college: str


class FeedbackStatusOut(BaseModel):
    progress: int
    submitted_semesters: list[int]
    next_feedback: Optional[int] = None
    milestone_count: int
