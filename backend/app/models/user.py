"""
User - a registered student account. Also the identity record resume files are reconciled against.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from backend.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    roll_number = Column(String(64), nullable=False, unique=True, index=True)
    college_name = Column(String(255), nullable=False)
    contact_no = Column(String(10), nullable=False, index=True)
    course = Column(String(120), nullable=False)
    semester = Column(Integer, nullable=False)  # current semester of study, 1..12
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Integer, default=1)

    # e.g. "/api/upload/uploads/john_doe_ab123_2024-01-01.pdf"; only the basename is matched on disk
    resume_path = Column(String(512), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
