from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from reviewflow.paper import Paper

# Column order is relied upon by every table that shows an author's papers.
COLUMNS: Tuple[str, str, str] = ("Title", "Category", "Acceptance Status")


def paper_row(paper: Paper) -> Tuple[str, str, str]:
    return (paper.title, paper.category, str(paper.acceptance_outcome))


@dataclass
class ActionStates:
    add_submission: bool
    view_edit: bool
    delete_submission: bool
    view_reviews: bool
    deadline_label: str = ""
    selected_id: Optional[int] = None
