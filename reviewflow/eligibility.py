from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from shared.due import is_open

if TYPE_CHECKING:
    from .paper import Paper


def can_submit_or_modify(now: datetime, deadline: Optional[datetime]) -> bool:
    """True iff now is strictly before the deadline (now == deadline is closed)."""
    return is_open(now, deadline)


def can_delete(paper: "Paper", now: datetime, deadline: Optional[datetime]) -> bool:
    """Window still open and the paper not yet accepted or declined."""
    if not can_submit_or_modify(now, deadline):
        return False
    # raw status is terminal exactly when the derived one is; no directory lookup
    return not paper.raw_status.is_terminal
