"""
Identity store - read access to student identities plus the single resume_path write-back.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from backend.app.core.exceptions import PersistenceFailure
from backend.app.core.logging_config import get_logger
from backend.app.models.user import User

logger = get_logger("services.identity_store")

# Roll numbers appear in stored filenames: keep [a-z0-9-] only
_ROLL_UNSAFE = re.compile(r"[^A-Za-z0-9-]")


def normalize_roll_number(roll_number: Optional[str]) -> str:
    """'CS 2021' -> 'cs2021', 'ab/12_3' -> 'ab123'. Same form in filenames and lookups."""
    return _ROLL_UNSAFE.sub("", roll_number or "").lower()


@dataclass(frozen=True)
class StudentIdentity:
    id: Optional[int]
    full_name: str
    email: str
    roll_number: str = ""
    college_name: str = ""
    resume_path: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def resume_basename(self) -> Optional[str]:
        """Filename part of resume_path ("/uploads/a.pdf" -> "a.pdf"), None when unset."""
        if not self.resume_path or not self.resume_path.strip():
            return None
        name = PurePosixPath(self.resume_path.strip().replace("\\", "/")).name
        return name.split("?")[0] or None

    @property
    def roll_token(self) -> str:
        return normalize_roll_number(self.roll_number)

    @classmethod
    def from_user(cls, user: User) -> "StudentIdentity":
        return cls(
            id=user.id,
            full_name=user.full_name or "",
            email=user.email or "",
            roll_number=user.roll_number or "",
            college_name=user.college_name or "",
            resume_path=user.resume_path or None,
            updated_at=user.updated_at or user.created_at,
        )


class IdentityStore:
    """SQLAlchemy-backed identity store. One instance per request session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, student_id: int) -> Optional[StudentIdentity]:
        user = self.db.query(User).filter(User.id == student_id).first()
        return StudentIdentity.from_user(user) if user else None

    def find_by_roll_number(self, roll_number: str) -> Optional[StudentIdentity]:
        """
        Case-insensitive lookup. Falls back to the normalized form so a filename token
        ("cs2021") finds a roll number stored as "CS 2021"; lowest id wins on collisions.
        """
        if not roll_number or not roll_number.strip():
            return None
        roll_number = roll_number.strip()
        user = (
            self.db.query(User)
            .filter(func.lower(User.roll_number) == roll_number.lower())
            .order_by(User.id)
            .first()
        )
        if not user:
            token = normalize_roll_number(roll_number)
            if not token:
                return None
            user = next(
                (u for u in self.db.query(User).order_by(User.id) if normalize_roll_number(u.roll_number) == token),
                None,
            )
        return StudentIdentity.from_user(user) if user else None

    def find_by_email(self, email: str) -> Optional[StudentIdentity]:
        if not email:
            return None
        user = self.db.query(User).filter(User.email == email.strip()).first()
        return StudentIdentity.from_user(user) if user else None

    def all(self) -> list[StudentIdentity]:
        """Every identity, ordered by id."""
        return [StudentIdentity.from_user(u) for u in self.db.query(User).order_by(User.id).all()]

    def with_resume_path(self) -> list[StudentIdentity]:
        """Identities with a non-empty resume_path, ordered by id."""
        users = (
            self.db.query(User)
            .filter(User.resume_path.isnot(None), User.resume_path != "")
            .order_by(User.id)
            .all()
        )
        return [StudentIdentity.from_user(u) for u in users]

    def search(self, term: str = "", college: str = "") -> Query:
        """Query of users matching a case-insensitive term over name/email/roll/college."""
        q = self.db.query(User)
        term = (term or "").strip()
        if term:
            like = f"%{term}%"
            q = q.filter(or_(
                User.full_name.ilike(like),
                User.email.ilike(like),
                User.roll_number.ilike(like),
                User.college_name.ilike(like),
            ))
        if college:
            q = q.filter(User.college_name == college)
        return q

    def update_resume_path(self, student_id: int, resume_path: str) -> StudentIdentity:
        """Point the student's resume_path at a stored file. Raises PersistenceFailure."""
        user = self.db.query(User).filter(User.id == student_id).first()
        if not user:
            raise PersistenceFailure(f"Student {student_id} not found for resume_path update")
        try:
            user.resume_path = resume_path
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("resume_path update failed student_id=%s", student_id)
            raise PersistenceFailure(f"Could not update resume_path for student {student_id}") from e
        logger.info("Linked resume student_id=%s path=%s", student_id, resume_path)
        return StudentIdentity.from_user(user)
