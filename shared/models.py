from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

REVIEWS_REQUIRED = 3
NO_REVIEWS_TEXT = "No reviews available"


class WorkflowStatus(str, Enum):
    SUBPROGRAM_CHAIR_NEEDED = 'SUBPROGRAM_CHAIR_NEEDED'
    REVIEWS_NEEDED = 'REVIEWS_NEEDED'
    RECOMMENDATION_NEEDED = 'RECOMMENDATION_NEEDED'
    DECISION_NEEDED = 'DECISION_NEEDED'
    ACCEPT = 'ACCEPT'
    DECLINE = 'DECLINE'

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({WorkflowStatus.ACCEPT, WorkflowStatus.DECLINE})


class AcceptanceOutcome(str, Enum):
    UNDECIDED = 'UNDECIDED'
    ACCEPT = 'ACCEPT'
    DECLINE = 'DECLINE'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class User:
    """An identity coming from the (external) account system."""

    id: int
    name: str = ''


def is_absent(identity: Optional[User]) -> bool:
    """True for "nobody": no identity at all, or the legacy id 0."""
    return identity is None or identity.id == 0


@dataclass(frozen=True)
class Review:
    reviewer: Optional[User] = None
    text: str = ''
    score: Optional[int] = None
    placeholder: bool = False

    def __str__(self) -> str:
        return self.text


def placeholder_review() -> Review:
    return Review(text=NO_REVIEWS_TEXT, placeholder=True)


@dataclass(frozen=True)
class Recommendation:
    """Subprogram chair's recommendation attached to a paper."""

    recommender: Optional[User] = None
    text: str = ''

    @property
    def is_present(self) -> bool:
        return not is_absent(self.recommender)


@dataclass(frozen=True)
class Decision:
    outcome: AcceptanceOutcome
    decided_by: Optional[User]
    decided_at: datetime
