"""
Exceptions shared by services and routes.

Gate and filename-matching decisions are returned as typed outcomes, not raised.
Only caller validation errors and storage failures travel as exceptions.
"""


class MilestoneValidationError(ValueError):
    """Requested milestone index is outside 1..milestone_count."""

    def __init__(self, milestone_index: int, milestone_count: int):
        self.milestone_index = milestone_index
        self.milestone_count = milestone_count
        super().__init__(f"Semester must be between 1 and {milestone_count}")


class DuplicateSubmissionError(Exception):
    """The ledger already holds a submission for this (student, milestone) pair."""

    def __init__(self, student_id: int, milestone_index: int):
        self.student_id = student_id
        self.milestone_index = milestone_index
        super().__init__(
            f"Submission for student_id={student_id} milestone={milestone_index} already exists"
        )


class PersistenceFailure(RuntimeError):
    """A write to the identity store or submission ledger failed. Never swallowed."""
