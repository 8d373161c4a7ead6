from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from shared.models import REVIEWS_REQUIRED, Recommendation, Review, WorkflowStatus

from .directory.assignments import (
    AssignmentDirectory,
    LookupMode,
    get_default_directory,
    get_default_mode,
    lookup_assigned_chair,
)

if TYPE_CHECKING:
    from .paper import Paper


def has_recommendation(recommendation: Optional[Recommendation]) -> bool:
    return recommendation is not None and recommendation.is_present


def evidence_rank(reviews: Sequence[Review], recommendation: Optional[Recommendation]) -> int:
    """
    How far the paper's own data (not the chair assignment) carries it:
    0 = reviews needed, 1 = recommendation needed, 2 = decision needed.
    """
    if len(reviews) < REVIEWS_REQUIRED:
        return 0
    if not has_recommendation(recommendation):
        return 1
    return 2


def derive_status(
    paper: "Paper",
    directory: Optional[AssignmentDirectory] = None,
    mode: Optional[LookupMode] = None,
) -> WorkflowStatus:
    """
    Current workflow stage of a paper. First matching rule wins:

    1. raw status ACCEPT/DECLINE -> returned as is (decided papers are frozen)
    2. no chair assigned          -> SUBPROGRAM_CHAIR_NEEDED
    3. fewer than 3 reviews       -> REVIEWS_NEEDED
    4. no named recommender       -> RECOMMENDATION_NEEDED
    5. otherwise                  -> DECISION_NEEDED

    Only rule 2 touches the outside world. In strict mode a directory
    failure raises AssignmentLookupError; in permissive mode it counts as
    "no chair".
    """
    raw = paper.raw_status
    if raw.is_terminal:
        return raw

    if paper.id is None:
        return WorkflowStatus.SUBPROGRAM_CHAIR_NEEDED
    chair = lookup_assigned_chair(
        directory if directory is not None else get_default_directory(),
        paper.id,
        mode if mode is not None else get_default_mode(),
    )
    if chair is None:
        return WorkflowStatus.SUBPROGRAM_CHAIR_NEEDED

    rank = evidence_rank(paper.real_reviews, paper.recommendation)
    if rank == 0:
        return WorkflowStatus.REVIEWS_NEEDED
    if rank == 1:
        return WorkflowStatus.RECOMMENDATION_NEEDED
    return WorkflowStatus.DECISION_NEEDED
