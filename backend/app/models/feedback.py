"""
Feedback - one milestone feedback document per (user, semester).

Legacy rows from the old resume-upload flow have semester = NULL and carry the
uploaded file in `responses` ({"filePath": ..., "fileName": ...}) instead of answers.
"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from backend.app.db.base import Base


class Feedback(Base):
    __tablename__ = "feedbacks"
    __table_args__ = (
        UniqueConstraint("user_id", "semester", name="uq_feedbacks_user_semester"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Student snapshot taken at submission time, so exports survive profile edits
    student_name = Column(String(100), nullable=False)
    student_email = Column(String(255), nullable=False, index=True)
    student_roll_number = Column(String(64), nullable=False)
    student_college = Column(String(255), nullable=False)

    semester = Column(Integer, nullable=True, index=True)
    answers = Column(JSON, default=list)  # [{"question": str, "answer": any}, ...]
    responses = Column(JSON, nullable=True)  # legacy only

    submission_date = Column(DateTime, default=datetime.utcnow)
