"""
Filename strategies - map a student identity to one of the resume files on disk.

Resume files were named differently across upload-tool versions, so matching is a fixed,
ordered chain of pure strategies. Each strategy returns every candidate in listing order;
the chain stops at the first strategy with a candidate and takes its first one.
No strategy ever falls back to an arbitrary file.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import PurePosixPath
from typing import Callable, Mapping, Optional, Sequence

from backend.app.services.identity_store import StudentIdentity

LegacyLinks = Mapping[int, Sequence[str]]
Strategy = Callable[[StudentIdentity, Sequence[str], LegacyLinks], list[str]]

NO_ROLL = "no_roll"

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def sanitize(text: str) -> str:
    """"John  O'Doe" -> "john_odoe". Lower-case, drop non [a-zA-Z0-9 ], whitespace runs -> "_"."""
    cleaned = _NON_ALNUM.sub("", text or "").strip()
    return _WHITESPACE.sub("_", cleaned).lower()


def basename(path: str) -> str:
    """Last path segment without query string: "/uploads/a.pdf?x=1" -> "a.pdf"."""
    name = PurePosixPath((path or "").strip().replace("\\", "/")).name
    return name.split("?")[0]


def _looks_like_roll_number(segment: str) -> bool:
    return segment.isalnum() and any(c.isdigit() for c in segment) and any(c.isalpha() for c in segment)


def filename_hints(filename: str) -> tuple[Optional[str], Optional[str]]:
    """
    Best-effort (display name, roll number) from an underscore-delimited filename.
    "jane_roe_cs2021_2024-01-01.pdf" -> ("Jane Roe", "cs2021"). Display only, never used to match.
    """
    stem = PurePosixPath(filename).stem
    parts = [p for p in stem.split("_") if p]
    if len(parts) < 2:
        return None, None
    for i, part in enumerate(parts):
        if i > 0 and _looks_like_roll_number(part):
            return " ".join(parts[:i]).title(), part
    return parts[0].title(), parts[1]


def canonical_prefix(identity: StudentIdentity) -> str:
    return f"{sanitize(identity.full_name)}_{identity.roll_token or NO_ROLL}_"


def canonical_resume_filename(identity: StudentIdentity, extension: str, on_date: date) -> str:
    """Name a new upload is stored under, e.g. john_doe_ab123_2024-01-01.pdf."""
    ext = extension.lower() if extension.startswith(".") else f".{extension.lower()}"
    roll = identity.roll_token or NO_ROLL
    return f"{sanitize(identity.full_name)}_{roll}_{on_date.isoformat()}{ext}"


def match_linked_path(identity: StudentIdentity, filenames: Sequence[str], legacy: LegacyLinks) -> list[str]:
    name = identity.resume_basename
    return [name] if name and name in filenames else []


def match_legacy_record(identity: StudentIdentity, filenames: Sequence[str], legacy: LegacyLinks) -> list[str]:
    if identity.id is None:
        return []
    available = set(filenames)
    out: list[str] = []
    for path in legacy.get(identity.id, ()):
        name = basename(path)
        if name and name in available and name not in out:
            out.append(name)
    return out


def match_exact_prefix(identity: StudentIdentity, filenames: Sequence[str], legacy: LegacyLinks) -> list[str]:
    if not sanitize(identity.full_name):
        return []
    key = canonical_prefix(identity).lower()
    return [f for f in filenames if f.lower().startswith(key)]


def match_partial_containment(identity: StudentIdentity, filenames: Sequence[str], legacy: LegacyLinks) -> list[str]:
    name = sanitize(identity.full_name)
    roll = identity.roll_token
    if not name or not roll:
        return []
    return [f for f in filenames if name in f.lower() and roll in f.lower()]


def match_email_prefix(identity: StudentIdentity, filenames: Sequence[str], legacy: LegacyLinks) -> list[str]:
    local_part = (identity.email or "").split("@")[0].strip().lower()
    if not local_part:
        return []
    return [f for f in filenames if local_part in f.lower()]


# Priority order, strongest signal first
STRATEGY_CHAIN: tuple[tuple[str, Strategy], ...] = (
    ("linked_path", match_linked_path),
    ("legacy_record", match_legacy_record),
    ("exact_prefix", match_exact_prefix),
    ("partial_containment", match_partial_containment),
    ("email_prefix", match_email_prefix),
)

# The reconciler applies linked paths in its own first pass
RECOVERY_CHAIN: tuple[tuple[str, Strategy], ...] = STRATEGY_CHAIN[1:]


@dataclass(frozen=True)
class ResumeMatch:
    filename: str
    strategy: str
    candidates: tuple[str, ...] = ()

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


@dataclass(frozen=True)
class ResumeNotFound:
    student_id: Optional[int] = None


def match_resume(
    identity: StudentIdentity,
    filenames: Sequence[str],
    legacy: Optional[LegacyLinks] = None,
    chain: Sequence[tuple[str, Strategy]] = STRATEGY_CHAIN,
) -> ResumeMatch | ResumeNotFound:
    """Run the chain in order; first strategy with a candidate wins."""
    legacy = legacy or {}
    for name, strategy in chain:
        candidates = strategy(identity, filenames, legacy)
        if candidates:
            return ResumeMatch(filename=candidates[0], strategy=name, candidates=tuple(candidates))
    return ResumeNotFound(student_id=identity.id)
