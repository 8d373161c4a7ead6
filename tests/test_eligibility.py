from datetime import datetime, timedelta, timezone

import pytest

from reviewflow.author import Author
from reviewflow.directory.assignments import InMemoryAssignmentDirectory, LookupMode
from reviewflow.eligibility import can_delete, can_submit_or_modify
from reviewflow.paper import Paper
from shared.errors import AssignmentLookupError, EligibilityError
from shared.models import User, WorkflowStatus

DEADLINE = datetime(2025, 10, 4, 23, 59, tzinfo=timezone.utc)
ONE = timedelta(seconds=1)


def _author(papers=None, deadline=DEADLINE, now=DEADLINE - timedelta(days=1)) -> Author:
    return Author(User(3, "Dana"), papers=papers, deadline=deadline, clock=lambda: now)


def test_window_is_half_open():
    assert can_submit_or_modify(DEADLINE - ONE, DEADLINE) is True
    assert can_submit_or_modify(DEADLINE, DEADLINE) is False
    assert can_submit_or_modify(DEADLINE + ONE, DEADLINE) is False


def test_naive_datetimes_are_utc():
    naive_deadline = DEADLINE.replace(tzinfo=None)
    assert can_submit_or_modify(DEADLINE - ONE, naive_deadline) is True
    assert can_submit_or_modify(naive_deadline, DEADLINE) is False


def test_no_deadline_means_open():
    assert can_submit_or_modify(DEADLINE, None) is True


@pytest.mark.parametrize("terminal", [WorkflowStatus.ACCEPT, WorkflowStatus.DECLINE])
def test_decided_paper_cannot_be_deleted_even_early(terminal):
    p = Paper(paper_id=1, directory=InMemoryAssignmentDirectory())
    p.raw_status = terminal
    assert can_delete(p, DEADLINE - timedelta(days=30), DEADLINE) is False


def test_undecided_paper_deletable_only_before_deadline():
    p = Paper(paper_id=1, directory=InMemoryAssignmentDirectory())
    assert can_delete(p, DEADLINE - ONE, DEADLINE) is True
    assert can_delete(p, DEADLINE, DEADLINE) is False


def test_author_uses_its_clock_and_deadline():
    late = _author(now=DEADLINE)
    assert late.can_submit_or_modify() is False
    assert late.can_submit_or_modify(now=DEADLINE - ONE) is True
    assert _author().can_submit_or_modify() is True


def test_submit_adds_paper_and_sets_author():
    a = _author()
    p = a.submit(Paper(title="Graphs"))
    assert a.view_papers() == [p]
    assert p.author == a.user


def test_submit_after_deadline_is_refused():
    a = _author(now=DEADLINE)
    with pytest.raises(EligibilityError) as exc:
        a.submit(Paper(title="Late"))
    assert exc.value.action == "submit"
    assert a.view_papers() == []


def test_modify_applies_fields():
    p = Paper(title="Old", directory=InMemoryAssignmentDirectory())
    a = _author(papers=[p])
    calls = []
    p.subscribe(calls.append)
    a.modify(p, title="New", abstract="Better")
    assert (p.title, p.abstract) == ("New", "Better")
    assert len(calls) == 2
    with pytest.raises(ValueError):
        a.modify(p, raw_status=WorkflowStatus.ACCEPT)


def test_modify_after_deadline_is_refused():
    p = Paper(title="Old")
    a = _author(papers=[p], now=DEADLINE + ONE)
    with pytest.raises(EligibilityError):
        a.modify(p, title="New")
    assert p.title == "Old"


def test_delete_rules():
    open_paper = Paper(paper_id=1, directory=InMemoryAssignmentDirectory())
    decided = Paper(paper_id=2, directory=InMemoryAssignmentDirectory())
    decided.raw_status = WorkflowStatus.ACCEPT
    a = _author(papers=[open_paper, decided])

    assert a.can_delete(open_paper) is True
    assert a.can_delete(decided) is False
    with pytest.raises(EligibilityError) as exc:
        a.delete(decided)
    assert "final decision" in exc.value.reason

    a.delete(open_paper)
    assert a.view_papers() == [decided]


def test_cannot_touch_someone_elses_paper():
    with pytest.raises(EligibilityError):
        _author().delete(Paper(paper_id=8))


def test_author_from_settings_takes_deadline():
    from shared.config import ReviewSettings

    settings = ReviewSettings(conference_root=None, lookup_mode="permissive",
                              cache_ttl_seconds=0, submission_deadline=DEADLINE)
    a = Author.from_settings(User(3, "Dana"), settings)
    assert a.deadline == DEADLINE
    assert (a.id, a.name) == (3, "Dana")
    assert a.can_submit_or_modify(now=DEADLINE) is False


class _BrokenDirectory:
    def assigned_chair(self, paper_id):
        raise AssignmentLookupError(paper_id, "down")


def test_delete_eligibility_never_asks_the_directory():
    p = Paper(paper_id=1, directory=_BrokenDirectory(), lookup_mode=LookupMode.STRICT)
    assert can_delete(p, DEADLINE - timedelta(days=1), DEADLINE) is True

    a = _author(papers=[p])
    assert a.can_delete(p) is True
    p.raw_status = WorkflowStatus.DECLINE
    assert can_delete(p, DEADLINE - timedelta(days=1), DEADLINE) is False
    with pytest.raises(EligibilityError) as exc:
        a.delete(p)
    assert "final decision" in exc.value.reason


def test_submitting_the_same_paper_twice_keeps_one_entry():
    a = _author()
    p = Paper(title="Graphs")
    a.submit(p)
    a.submit(p)
    assert a.view_papers() == [p]
    # an equal but distinct instance is still a separate submission
    a.submit(Paper(title="Graphs"))
    assert len(a.view_papers()) == 2
