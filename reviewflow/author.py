from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional

import structlog

from shared.config import ReviewSettings
from shared.errors import EligibilityError
from shared.models import User
from shared.timeutil import utcnow

from . import eligibility
from .paper import Paper

logger = structlog.get_logger(__name__)

# Paper properties an author may edit through modify()
EDITABLE_FIELDS = ("title", "keywords", "abstract", "category", "content", "revised_content")


class Author:
    """
    A user acting as author: owns their papers and is the one place
    eligibility questions (submit / modify / delete) are asked.
    """

    def __init__(
        self,
        user: User,
        papers: Optional[Iterable[Paper]] = None,
        deadline: Optional[datetime] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.user = user
        self.deadline = deadline
        self._clock = clock
        self._papers: List[Paper] = list(papers or [])

    @classmethod
    def from_settings(cls, user: User, settings: ReviewSettings, papers: Optional[Iterable[Paper]] = None) -> "Author":
        return cls(user, papers=papers, deadline=settings.submission_deadline)

    @property
    def id(self) -> int:
        return self.user.id

    @property
    def name(self) -> str:
        return self.user.name

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self._clock()

    def view_papers(self) -> List[Paper]:
        return list(self._papers)

    # ── Eligibility
    def can_submit_or_modify(self, now: Optional[datetime] = None) -> bool:
        return eligibility.can_submit_or_modify(self._now(now), self.deadline)

    def can_delete(self, paper: Paper, now: Optional[datetime] = None) -> bool:
        return eligibility.can_delete(paper, self._now(now), self.deadline)

    # ── Actions
    def submit(self, paper: Paper, now: Optional[datetime] = None) -> Paper:
        if not self.can_submit_or_modify(now):
            raise EligibilityError("submit", "the submission deadline has passed")
        if paper.author != self.user:
            paper.author = self.user
        if any(p is paper for p in self._papers):
            return paper
        self._papers.append(paper)
        logger.info("paper_submitted", author_id=self.id, title=paper.title)
        return paper

    def modify(self, paper: Paper, now: Optional[datetime] = None, **fields: Any) -> Paper:
        """Apply field edits; each edited field notifies the paper's subscribers once."""
        self._require_own(paper, "modify")
        if not self.can_submit_or_modify(now):
            raise EligibilityError("modify", "the modification deadline has passed")
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        for name in EDITABLE_FIELDS:
            if name in fields:
                setattr(paper, name, fields[name])
        return paper

    def delete(self, paper: Paper, now: Optional[datetime] = None) -> None:
        self._require_own(paper, "delete")
        if not self.can_delete(paper, now):
            reason = "the paper has a final decision" if paper.raw_status.is_terminal \
                else "the submission deadline has passed"
            raise EligibilityError("delete", reason)
        self._papers = [p for p in self._papers if p is not paper]
        logger.info("paper_deleted", author_id=self.id, paper_id=paper.id)

    def _require_own(self, paper: Paper, action: str) -> None:
        if not any(p is paper for p in self._papers):
            raise EligibilityError(action, "the paper does not belong to this author")
