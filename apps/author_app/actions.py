from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from reviewflow.author import Author
from reviewflow.paper import Paper
from shared.models import NO_REVIEWS_TEXT
from shared.timeutil import iso_to_local_str, to_iso

from .data import ActionStates

REVIEW_SLOTS = 3


def deadline_label(author: Author, now: Optional[datetime] = None) -> str:
    if author.deadline is None:
        return "No deadline"
    when = iso_to_local_str(to_iso(author.deadline))
    if author.can_submit_or_modify(now):
        return f"open until {when}"
    return f"closed since {when}"


def action_states(author: Author, selected: Optional[Paper] = None, now: Optional[datetime] = None) -> ActionStates:
    """Which author actions should be enabled for the current selection."""
    has_sel = selected is not None
    return ActionStates(
        add_submission=author.can_submit_or_modify(now),
        view_edit=has_sel,
        delete_submission=has_sel and author.can_delete(selected, now),
        # reviews are only shown to authors once the paper is decided
        view_reviews=has_sel and selected.raw_status.is_terminal,
        deadline_label=deadline_label(author, now),
        selected_id=selected.id if has_sel else None,
    )


def review_labels(paper: Paper, slots: int = REVIEW_SLOTS) -> List[str]:
    texts = [str(r) for r in paper.get_reviews()][:slots]
    return texts + [NO_REVIEWS_TEXT] * (slots - len(texts))
