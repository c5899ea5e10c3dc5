"""
Resume reconciler - joins resume files on disk with student identities for the admin dashboard.

Each pass is built fresh from a directory read:
  1. files linked through a student's resume_path,
  2. files recovered by the filename strategies, strongest strategy first across all students,
  3. everything left over as "Unknown Student" placeholders.
A file backs at most one record per pass and a student owns at most one matched record.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from backend.app.core.config import (
    UNKNOWN_ROLL_NUMBER,
    UNKNOWN_STUDENT_COLLEGE,
    UNKNOWN_STUDENT_EMAIL,
    UNKNOWN_STUDENT_NAME,
)
from backend.app.core.logging_config import get_logger
from backend.app.services.filename_strategies import (
    RECOVERY_CHAIN,
    STRATEGY_CHAIN,
    ResumeMatch,
    ResumeNotFound,
    Strategy,
    basename,
    filename_hints,
    match_resume,
)
from backend.app.services.identity_store import IdentityStore, StudentIdentity
from backend.app.services.resume_storage import ResumeDirectory, ResumeFile
from backend.app.services.submission_ledger import SubmissionLedger

logger = get_logger("services.resume_reconciler")

ORPHAN = "orphan"


@dataclass(frozen=True)
class ResumeRecord:
    student_id: Optional[int]
    student_name: str
    student_email: str
    student_roll_number: str
    student_college: str
    submission_date: Optional[datetime]
    filename: str
    size_bytes: int
    match_strategy: str

    def matches(self, term: str) -> bool:
        term = term.lower()
        return (
            term in self.student_name.lower()
            or term in self.student_email.lower()
            or term in self.student_college.lower()
        )


@dataclass(frozen=True)
class ResumePage:
    records: list[ResumeRecord]
    total_count: int
    page_count: int
    page: int
    page_size: int


def _record(identity: StudentIdentity, file: ResumeFile, strategy: str, when: Optional[datetime]) -> ResumeRecord:
    return ResumeRecord(
        student_id=identity.id,
        student_name=identity.full_name,
        student_email=identity.email,
        student_roll_number=identity.roll_number or UNKNOWN_ROLL_NUMBER,
        student_college=identity.college_name or UNKNOWN_STUDENT_COLLEGE,
        submission_date=when or file.modified_at,
        filename=file.filename,
        size_bytes=file.size_bytes,
        match_strategy=strategy,
    )


class ResumeReconciler:
    def __init__(
        self,
        identities: IdentityStore,
        ledger: SubmissionLedger,
        directory: ResumeDirectory,
        recovery_chain: Sequence[tuple[str, Strategy]] = RECOVERY_CHAIN,
    ):
        self.identities = identities
        self.ledger = ledger
        self.directory = directory
        self.recovery_chain = recovery_chain

    def scan(self) -> dict[str, ResumeFile]:
        """filename -> ResumeFile in listing order. Files that fail to stat are skipped."""
        files: dict[str, ResumeFile] = {}
        for name in self.directory.list_files():
            try:
                files[name] = self.directory.stat_file(name)
            except (OSError, ValueError) as e:
                logger.warning("Skipping resume file %s: %s", name, e)
        return files

    def reconcile(self) -> list[ResumeRecord]:
        """One full pass: linked, then recovered, then orphan records."""
        files = self.scan()
        if not files:
            return []
        remaining = list(files)
        records: list[ResumeRecord] = []
        matched: set[int] = set()

        for identity in self.identities.with_resume_path():
            name = identity.resume_basename
            if name and name in remaining:
                records.append(_record(identity, files[name], "linked_path", identity.updated_at))
                remaining.remove(name)
                matched.add(identity.id)

        legacy = self.ledger.legacy_submissions()
        legacy_links = self.ledger.legacy_file_links(legacy)
        legacy_dates: dict[str, Optional[datetime]] = {}
        for rec in legacy:
            for ref in rec.file_refs:
                legacy_dates.setdefault(basename(ref), rec.submitted_at)

        pending = [i for i in self.identities.all() if i.id not in matched]
        for strategy_name, strategy in self.recovery_chain:
            if not remaining:
                break
            for identity in pending:
                if identity.id in matched:
                    continue
                hits = strategy(identity, remaining, legacy_links)
                if not hits:
                    continue
                if len(hits) > 1:
                    logger.warning(
                        "Ambiguous %s match student_id=%s candidates=%s; taking %s",
                        strategy_name, identity.id, hits, hits[0],
                    )
                name = hits[0]
                when = legacy_dates.get(name) if strategy_name == "legacy_record" else None
                records.append(_record(identity, files[name], strategy_name, when))
                remaining.remove(name)
                matched.add(identity.id)
                if not remaining:
                    break

        for name in remaining:
            records.append(self._orphan_record(files[name]))

        logger.info(
            "Reconciled resumes files=%d matched=%d orphans=%d",
            len(files), len(records) - len(remaining), len(remaining),
        )
        return records

    def _orphan_record(self, file: ResumeFile) -> ResumeRecord:
        name_hint, roll_hint = filename_hints(file.filename)
        student_name = name_hint or UNKNOWN_STUDENT_NAME
        email = UNKNOWN_STUDENT_EMAIL
        college = UNKNOWN_STUDENT_COLLEGE
        owner = self.identities.find_by_roll_number(roll_hint) if roll_hint else None
        if owner:
            student_name, email, college = owner.full_name, owner.email, owner.college_name or college
        return ResumeRecord(
            student_id=None,
            student_name=student_name,
            student_email=email,
            student_roll_number=roll_hint or UNKNOWN_ROLL_NUMBER,
            student_college=college,
            submission_date=file.modified_at,
            filename=file.filename,
            size_bytes=file.size_bytes,
            match_strategy=ORPHAN,
        )

    def list_resumes(self, page: int = 1, page_size: int = 10, search: Optional[str] = None) -> ResumePage:
        """Reconciled records filtered by search (name/email/college), then paginated (1-based)."""
        page = max(1, page)
        page_size = max(1, page_size)
        records = self.reconcile()
        term = (search or "").strip()
        if term:
            records = [r for r in records if r.matches(term)]
        total = len(records)
        start = (page - 1) * page_size
        return ResumePage(
            records=records[start:start + page_size],
            total_count=total,
            page_count=math.ceil(total / page_size),
            page=page,
            page_size=page_size,
        )

    def resolve_resume_for(self, identity: StudentIdentity) -> ResumeMatch | ResumeNotFound:
        """Full strategy chain for one student against every file on disk. Never substitutes."""
        filenames = self.directory.list_files()
        result = match_resume(identity, filenames, self.ledger.legacy_file_links(), STRATEGY_CHAIN)
        if isinstance(result, ResumeNotFound):
            logger.info("No resume found student_id=%s files=%d", identity.id, len(filenames))
        elif result.ambiguous:
            logger.warning(
                "Ambiguous %s match student_id=%s candidates=%s; taking %s",
                result.strategy, identity.id, list(result.candidates), result.filename,
            )
        return result
