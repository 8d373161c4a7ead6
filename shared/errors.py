from __future__ import annotations


class ReviewflowError(Exception):
    """Base class for every error raised by the review workflow."""


class AssignmentLookupError(ReviewflowError):
    """The chair-assignment directory could not answer (not the same as "unassigned")."""

    def __init__(self, paper_id: int | None, message: str) -> None:
        super().__init__(f"Chair lookup failed for paper {paper_id}: {message}")
        self.paper_id = paper_id


class PaperIdentityError(ReviewflowError):
    pass


class WorkflowError(ReviewflowError):
    pass


class WorkflowRegressionError(WorkflowError):
    """A mutation would move a paper back to an earlier workflow stage."""


class EligibilityError(ReviewflowError):
    def __init__(self, action: str, reason: str) -> None:
        super().__init__(f"Cannot {action}: {reason}")
        self.action = action
        self.reason = reason
