"""Tests for resume filename strategies"""
from datetime import date

import pytest

from backend.app.services.filename_strategies import (
    NO_ROLL,
    ResumeMatch,
    ResumeNotFound,
    basename,
    canonical_resume_filename,
    filename_hints,
    match_email_prefix,
    match_exact_prefix,
    match_legacy_record,
    match_linked_path,
    match_partial_containment,
    match_resume,
    sanitize,
)
from backend.app.services.identity_store import StudentIdentity


def identity(**overrides) -> StudentIdentity:
    fields = dict(id=7, full_name="John Doe", email="jdoe@example.com", roll_number="ab123")
    fields.update(overrides)
    return StudentIdentity(**fields)


@pytest.mark.parametrize("raw,expected", [
    ("John Doe", "john_doe"),
    ("  John   O'Doe ", "john_odoe"),
    ("Ana-María López", "anamara_lpez"),
    ("", ""),
])
def test_sanitize(raw, expected):
    assert sanitize(raw) == expected


def test_basename_strips_directories_and_query():
    assert basename("/uploads/a.pdf?download=1") == "a.pdf"
    assert basename("uploads\\b.docx") == "b.docx"


def test_resume_basename_from_linked_path():
    assert identity(resume_path="/uploads/x.pdf").resume_basename == "x.pdf"
    assert identity(resume_path="  ").resume_basename is None


def test_canonical_filename():
    name = canonical_resume_filename(identity(), ".PDF", date(2024, 1, 1))
    assert name == "john_doe_ab123_2024-01-01.pdf"


def test_canonical_filename_strips_path_characters_from_roll():
    name = canonical_resume_filename(identity(roll_number="../cs/21"), "docx", date(2024, 1, 1))
    assert name == "john_doe_cs21_2024-01-01.docx"
    assert "/" not in name


def test_canonical_filename_without_roll():
    name = canonical_resume_filename(identity(roll_number=""), ".pdf", date(2024, 1, 1))
    assert name == f"john_doe_{NO_ROLL}_2024-01-01.pdf"


def test_exact_prefix_matches_canonical_upload():
    files = ["john_doe_ab123_2024-01-01.pdf"]
    result = match_resume(identity(), files)
    assert result == ResumeMatch("john_doe_ab123_2024-01-01.pdf", "exact_prefix", ("john_doe_ab123_2024-01-01.pdf",))


def test_unrelated_file_is_never_returned():
    result = match_resume(identity(), ["random123.pdf"])
    assert isinstance(result, ResumeNotFound)
    assert result.student_id == 7


def test_linked_path_beats_every_other_strategy():
    files = ["john_doe_ab123_2024-01-01.pdf", "picked.pdf"]
    result = match_resume(identity(resume_path="/uploads/picked.pdf"), files)
    assert result.filename == "picked.pdf"
    assert result.strategy == "linked_path"


def test_stale_linked_path_falls_through():
    files = ["john_doe_ab123_2024-01-01.pdf"]
    result = match_resume(identity(resume_path="/uploads/gone.pdf"), files)
    assert result.strategy == "exact_prefix"


def test_legacy_record_uses_file_refs_in_order():
    files = ["old_upload.pdf", "other.pdf"]
    legacy = {7: ["/uploads/missing.pdf", "uploads/old_upload.pdf"]}
    assert match_legacy_record(identity(), files, legacy) == ["old_upload.pdf"]
    assert match_resume(identity(), files, legacy).strategy == "legacy_record"


def test_legacy_record_ignores_other_students():
    assert match_legacy_record(identity(), ["old_upload.pdf"], {8: ["old_upload.pdf"]}) == []


def test_partial_containment():
    files = ["resume-john_doe-final-AB123.pdf"]
    assert match_exact_prefix(identity(), files, {}) == []
    assert match_partial_containment(identity(), files, {}) == files


def test_partial_containment_needs_roll():
    assert match_partial_containment(identity(roll_number=""), ["john_doe.pdf"], {}) == []


def test_email_prefix_is_last_resort():
    files = ["jdoe_cv.pdf"]
    result = match_resume(identity(), files)
    assert result.strategy == "email_prefix"
    assert match_email_prefix(identity(email=""), files, {}) == []


def test_linked_path_requires_file_on_disk():
    assert match_linked_path(identity(resume_path="/uploads/a.pdf"), ["b.pdf"], {}) == []


def test_ambiguous_match_takes_first_in_listing_order():
    files = ["john_doe_ab123_2023-05-01.pdf", "john_doe_ab123_2024-01-01.pdf"]
    result = match_resume(identity(), files)
    assert result.filename == files[0]
    assert result.ambiguous
    assert result.candidates == tuple(files)


def test_chain_can_be_restricted():
    files = ["john_doe_ab123_2024-01-01.pdf"]
    chain = (("email_prefix", match_email_prefix),)
    assert isinstance(match_resume(identity(), files, chain=chain), ResumeNotFound)


@pytest.mark.parametrize("filename,expected", [
    ("jane_roe_cs2021_2024-01-01.pdf", ("Jane Roe", "cs2021")),
    ("john_doe_ab123_2024-01-01.pdf", ("John Doe", "ab123")),
    ("alice_bob.pdf", ("Alice", "bob")),
    ("random123.pdf", (None, None)),
])
def test_filename_hints(filename, expected):
    assert filename_hints(filename) == expected


@pytest.mark.parametrize("roll", ["CS2021", "CS 2021", "cs/2021", "CS_2021"])
def test_own_canonical_upload_always_recovered(roll):
    """Whatever the stored roll number looks like, the upload's name is matched by exact prefix."""
    student = identity(roll_number=roll)
    name = canonical_resume_filename(student, ".pdf", date(2024, 1, 1))
    assert name == "john_doe_cs2021_2024-01-01.pdf"
    result = match_resume(student, ["random123.pdf", name])
    assert result.filename == name
    assert result.strategy == "exact_prefix"


def test_partial_containment_uses_normalized_roll():
    files = ["final-john_doe-CS2021.pdf"]
    assert match_partial_containment(identity(roll_number="CS 2021"), files, {}) == files
