from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from reviewflow.directory.assignments import (
    InMemoryAssignmentDirectory,
    JsonAssignmentDirectory,
    LookupMode,
    get_default_directory,
    get_default_mode,
    lookup_assigned_chair,
    set_default_directory,
)
from reviewflow.directory.cache import CachedAssignmentDirectory, directory_for
from reviewflow.paper import Paper
from shared.config import ReviewSettings
from shared.errors import AssignmentLookupError
from shared.models import User, WorkflowStatus

CHAIR = User(7, "Chair")
T0 = datetime(2025, 9, 1, tzinfo=timezone.utc)


class _CountingDirectory(InMemoryAssignmentDirectory):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0

    def assigned_chair(self, paper_id):
        self.calls += 1
        return super().assigned_chair(paper_id)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ─────────────────────────────────────────────────────────────────────────────
# JSON directory
# ─────────────────────────────────────────────────────────────────────────────
def test_json_directory_roundtrip(tmp_path: Path):
    d = JsonAssignmentDirectory(tmp_path / "conf")
    assert d.assigned_chair(1) is None  # no file yet

    d.assign(1, CHAIR)
    assert JsonAssignmentDirectory(tmp_path / "conf").assigned_chair(1) == CHAIR
    assert (tmp_path / "conf" / "assignments.json").exists()

    d.unassign(1)
    assert d.assigned_chair(1) is None


def test_json_directory_reads_do_not_create_folders(tmp_path: Path):
    root = tmp_path / "conf"
    d = JsonAssignmentDirectory(root)
    assert d.assigned_chair(1) is None
    assert not root.exists()

    blocked = tmp_path / "not-a-folder"
    blocked.write_text("", encoding="utf-8")
    d = JsonAssignmentDirectory(blocked / "conf")
    assert d.assigned_chair(1) is None
    with pytest.raises(OSError):
        d.assign(1, CHAIR)


@pytest.mark.parametrize("payload", ["{not json", "[1, 2]", '{"1": {"name": "no id"}}'])
def test_json_directory_read_failures_raise(tmp_path: Path, payload: str):
    d = JsonAssignmentDirectory(tmp_path)
    d.path.write_text(payload, encoding="utf-8")
    with pytest.raises(AssignmentLookupError) as exc:
        d.assigned_chair(1)
    assert exc.value.paper_id == 1


def test_lookup_modes(tmp_path: Path):
    d = JsonAssignmentDirectory(tmp_path)
    d.path.write_text("{broken", encoding="utf-8")
    assert lookup_assigned_chair(d, 1, LookupMode.PERMISSIVE) is None
    with pytest.raises(AssignmentLookupError):
        lookup_assigned_chair(d, 1, LookupMode.STRICT)


class _TimingOutDirectory:
    def assigned_chair(self, paper_id):
        raise TimeoutError("no answer within 5s")


def test_lookup_modes_cover_foreign_exceptions():
    d = _TimingOutDirectory()
    assert lookup_assigned_chair(d, 1, LookupMode.PERMISSIVE) is None
    with pytest.raises(AssignmentLookupError) as exc:
        lookup_assigned_chair(d, 1, LookupMode.STRICT)
    assert isinstance(exc.value.__cause__, TimeoutError)


def test_lookup_normalises_identity_zero():
    d = InMemoryAssignmentDirectory({1: User(0), 2: CHAIR})
    assert lookup_assigned_chair(d, 1) is None
    assert lookup_assigned_chair(d, 2) == CHAIR


def test_default_directory_is_used_by_unbound_papers():
    previous, previous_mode = get_default_directory(), get_default_mode()
    try:
        set_default_directory(InMemoryAssignmentDirectory({4: CHAIR}), LookupMode.STRICT)
        assert get_default_mode() is LookupMode.STRICT
        assert Paper(paper_id=4).status is WorkflowStatus.REVIEWS_NEEDED
    finally:
        set_default_directory(previous, previous_mode)


# ─────────────────────────────────────────────────────────────────────────────
# Cache
# ─────────────────────────────────────────────────────────────────────────────
def test_cache_serves_until_ttl_elapses():
    inner = _CountingDirectory({1: CHAIR})
    clock = _Clock(T0)
    cache = CachedAssignmentDirectory(inner, ttl_seconds=60, clock=clock)

    assert cache.assigned_chair(1) == CHAIR
    clock.now = T0 + timedelta(seconds=59)
    assert cache.assigned_chair(1) == CHAIR
    assert inner.calls == 1

    clock.now = T0 + timedelta(seconds=60)
    cache.assigned_chair(1)
    assert inner.calls == 2


def test_reassignment_through_cache_invalidates():
    inner = _CountingDirectory()
    cache = CachedAssignmentDirectory(inner, ttl_seconds=600, clock=_Clock(T0))
    p = Paper(paper_id=1, directory=cache)
    assert p.status is WorkflowStatus.SUBPROGRAM_CHAIR_NEEDED

    cache.assign(1, CHAIR)
    assert p.status is WorkflowStatus.REVIEWS_NEEDED

    cache.unassign(1)
    assert p.status is WorkflowStatus.SUBPROGRAM_CHAIR_NEEDED


def test_manual_invalidate():
    inner = _CountingDirectory({1: CHAIR, 2: CHAIR})
    cache = CachedAssignmentDirectory(inner, clock=_Clock(T0))
    cache.assigned_chair(1)
    cache.assigned_chair(2)
    assert len(cache) == 2
    cache.invalidate(1)
    assert len(cache) == 1
    cache.invalidate()
    assert len(cache) == 0


def test_failures_are_not_cached(tmp_path: Path):
    inner = JsonAssignmentDirectory(tmp_path)
    inner.path.write_text("{broken", encoding="utf-8")
    cache = CachedAssignmentDirectory(inner, clock=_Clock(T0))
    with pytest.raises(AssignmentLookupError):
        cache.assigned_chair(1)
    assert len(cache) == 0

    inner.path.write_text('{"1": {"id": 7, "name": "Chair"}}', encoding="utf-8")
    assert cache.assigned_chair(1) == CHAIR


def test_directory_for_settings(tmp_path: Path):
    settings = ReviewSettings(conference_root=tmp_path, lookup_mode="strict",
                              cache_ttl_seconds=30, submission_deadline=None)
    directory, mode = directory_for(settings)
    assert mode is LookupMode.STRICT
    assert isinstance(directory, CachedAssignmentDirectory)
    assert isinstance(directory.inner, JsonAssignmentDirectory)

    bare = ReviewSettings(conference_root=None, lookup_mode="permissive",
                          cache_ttl_seconds=0, submission_deadline=None)
    directory, mode = directory_for(bare)
    assert mode is LookupMode.PERMISSIVE
    assert isinstance(directory, InMemoryAssignmentDirectory)
