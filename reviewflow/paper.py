from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import structlog

from shared.errors import PaperIdentityError, WorkflowError, WorkflowRegressionError
from shared.events import ChangeNotifier, Listener
from shared.models import (
    AcceptanceOutcome,
    Decision,
    Recommendation,
    Review,
    User,
    WorkflowStatus,
    placeholder_review,
)
from shared.timeutil import utcnow

from .directory.assignments import AssignmentDirectory, LookupMode
from .status import derive_status, evidence_rank

logger = structlog.get_logger(__name__)

DEFAULT_TITLE = "No Title Set"
DEFAULT_KEYWORDS = "No Keywords Set"
DEFAULT_ABSTRACT = "No Abstract Set"
DEFAULT_CATEGORY = "No category set"


class Paper:
    """
    A paper an author submitted for review.

    The workflow stage (``status``) is never stored: it is derived on every
    read from the raw status, the chair assignment held by ``directory``
    (or the process default), the reviews and the recommendation.

    Every mutator notifies subscribers exactly once, after the change is
    applied. Mutations that would move the pipeline backwards raise
    WorkflowRegressionError and leave the paper untouched.

    Equality is by concrete type and id. Papers without an id are only equal
    to themselves, and their hash changes once an id is assigned, so keep
    unsaved papers out of sets and dict keys.
    """

    def __init__(
        self,
        author: Optional[User] = None,
        title: str = DEFAULT_TITLE,
        keywords: str = DEFAULT_KEYWORDS,
        abstract: str = DEFAULT_ABSTRACT,
        category: str = DEFAULT_CATEGORY,
        content: str = "",
        *,
        paper_id: Optional[int] = None,
        directory: Optional[AssignmentDirectory] = None,
        lookup_mode: Optional[LookupMode] = None,
    ) -> None:
        self._id = paper_id
        self._author = author
        self._title = title
        self._keywords = keywords
        self._abstract = abstract
        self._category = category
        self._content = content
        self._revised_content = ""
        self._raw_status = WorkflowStatus.SUBPROGRAM_CHAIR_NEEDED
        self._acceptance = AcceptanceOutcome.UNDECIDED
        self._recommendation: Optional[Recommendation] = None
        self._reviews: List[Review] = []
        self._decision: Optional[Decision] = None
        self._changes = ChangeNotifier()
        self.directory = directory
        self.lookup_mode = lookup_mode

    # ── Change notification
    def subscribe(self, listener: Listener) -> Listener:
        return self._changes.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        return self._changes.unsubscribe(listener)

    def _changed(self) -> None:
        self._changes.notify(self)

    def _set(self, attr: str, value: Any) -> None:
        setattr(self, attr, value)
        self._changed()

    # ── Identity
    @property
    def id(self) -> Optional[int]:
        return self._id

    def assign_id(self, paper_id: int) -> None:
        """Set once, when the paper is persisted."""
        if self._id is not None and self._id != paper_id:
            raise PaperIdentityError(f"Paper already has id {self._id}; refusing {paper_id}")
        self._set("_id", paper_id)

    # ── Descriptive fields
    @property
    def author(self) -> Optional[User]:
        return self._author

    @author.setter
    def author(self, value: Optional[User]) -> None:
        self._set("_author", value)

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._set("_title", value)

    @property
    def keywords(self) -> str:
        return self._keywords

    @keywords.setter
    def keywords(self, value: str) -> None:
        self._set("_keywords", value)

    @property
    def abstract(self) -> str:
        return self._abstract

    @abstract.setter
    def abstract(self, value: str) -> None:
        self._set("_abstract", value)

    @property
    def category(self) -> str:
        return self._category

    @category.setter
    def category(self, value: str) -> None:
        self._set("_category", value)

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        self._set("_content", value)

    @property
    def revised_content(self) -> str:
        return self._revised_content

    @revised_content.setter
    def revised_content(self, value: str) -> None:
        self._set("_revised_content", value)

    # ── Workflow state
    @property
    def status(self) -> WorkflowStatus:
        return derive_status(self, self.directory, self.lookup_mode)

    @property
    def raw_status(self) -> WorkflowStatus:
        return self._raw_status

    @raw_status.setter
    def raw_status(self, value: Optional[WorkflowStatus]) -> None:
        if value is None:
            return  # keep last known status
        value = WorkflowStatus(value)
        if self._raw_status.is_terminal and value is not self._raw_status:
            self._refuse("set_status", f"paper is already decided ({self._raw_status})")
        self._set("_raw_status", value)

    @property
    def acceptance_outcome(self) -> AcceptanceOutcome:
        return self._acceptance

    @acceptance_outcome.setter
    def acceptance_outcome(self, value: AcceptanceOutcome) -> None:
        self._set("_acceptance", AcceptanceOutcome(value))

    @property
    def decision(self) -> Optional[Decision]:
        return self._decision

    def decide(
        self,
        outcome: AcceptanceOutcome,
        decided_by: Optional[User] = None,
        when: Optional[datetime] = None,
    ) -> Decision:
        """Record the final decision. Only allowed while status is DECISION_NEEDED."""
        outcome = AcceptanceOutcome(outcome)
        if outcome is AcceptanceOutcome.UNDECIDED:
            raise WorkflowError("A decision must be ACCEPT or DECLINE")
        current = self.status
        if current is not WorkflowStatus.DECISION_NEEDED:
            raise WorkflowError(f"Paper {self._id} cannot be decided while {current}")

        self._decision = Decision(outcome=outcome, decided_by=decided_by, decided_at=when or utcnow())
        self._raw_status = WorkflowStatus(outcome.value)
        self._acceptance = outcome
        logger.info("paper_decided", paper_id=self._id, outcome=outcome.value)
        self._changed()
        return self._decision

    # ── Recommendation
    @property
    def recommendation(self) -> Optional[Recommendation]:
        return self._recommendation

    @recommendation.setter
    def recommendation(self, value: Optional[Recommendation]) -> None:
        self._guard_evidence(self._reviews, value, "set_recommendation")
        self._set("_recommendation", value)

    # ── Reviews
    @property
    def real_reviews(self) -> Tuple[Review, ...]:
        return tuple(self._reviews)

    @property
    def review_count(self) -> int:
        return len(self._reviews)

    def get_reviews(self) -> List[Review]:
        """Reviews in insertion order; never empty (placeholder when there are none)."""
        if not self._reviews:
            return [placeholder_review()]
        return list(self._reviews)

    def add_review(self, review: Review) -> None:
        self._reviews.append(review)
        self._changed()

    def set_reviews(self, reviews: Iterable[Review]) -> None:
        """Replace every review. Refused if it would drop the paper back a stage."""
        new_reviews = list(reviews)
        self._guard_evidence(new_reviews, self._recommendation, "set_reviews")
        self._set("_reviews", new_reviews)

    def remove_review(self, review: Review) -> None:
        remaining = list(self._reviews)
        remaining.remove(review)
        self._guard_evidence(remaining, self._recommendation, "remove_review")
        self._set("_reviews", remaining)

    # ── Monotonicity
    def _guard_evidence(
        self,
        reviews: Sequence[Review],
        recommendation: Optional[Recommendation],
        action: str,
    ) -> None:
        before = evidence_rank(self._reviews, self._recommendation)
        after = evidence_rank(reviews, recommendation)
        if after < before:
            self._refuse(action, "it would move the paper back to an earlier stage")

    def _refuse(self, action: str, reason: str) -> None:
        logger.warning("workflow_regression_refused", paper_id=self._id, action=action, reason=reason)
        raise WorkflowRegressionError(f"Cannot {action} on paper {self._id}: {reason}")

    # ── Dunder
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if other is None or type(other) is not type(self):
            return False
        return self._id is not None and self._id == other._id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        if self._id is None:
            return id(self)
        return hash((type(self).__qualname__, self._id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, title={self._title!r})"
