from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Protocol

import structlog

from shared.errors import AssignmentLookupError
from shared.models import User, is_absent
from shared.paths import conference_paths, ensure_dirs

logger = structlog.get_logger(__name__)


class LookupMode(str, Enum):
    PERMISSIVE = 'permissive'   # directory failure reads as "no chair yet"
    STRICT = 'strict'           # directory failure raises AssignmentLookupError


class AssignmentDirectory(Protocol):
    """
    Source of chair assignments. assigned_chair returns None when no chair
    is assigned. Implementations should raise AssignmentLookupError when the
    lookup itself fails; lookup_assigned_chair treats any other exception
    (ConnectionError, TimeoutError, OSError, ...) as a failed lookup too.
    """

    def assigned_chair(self, paper_id: int) -> Optional[User]: ...


class InMemoryAssignmentDirectory:
    def __init__(self, assignments: Optional[Dict[int, User]] = None) -> None:
        self._assignments: Dict[int, User] = dict(assignments or {})

    def assigned_chair(self, paper_id: int) -> Optional[User]:
        return self._assignments.get(paper_id)

    def assign(self, paper_id: int, chair: User) -> None:
        self._assignments[paper_id] = chair

    def unassign(self, paper_id: int) -> None:
        self._assignments.pop(paper_id, None)


class JsonAssignmentDirectory:
    """
    assignments.json under a conference folder:
      { "12": {"id": 7, "name": "Ada"}, ... }
    Every lookup re-reads the file; put a CachedAssignmentDirectory in front
    if that matters.
    """

    def __init__(self, conference_root: Path) -> None:
        self.path = conference_paths(conference_root)["assignments"]

    def _read(self, paper_id: Optional[int] = None) -> Dict[str, dict]:
        try:
            if not self.path.exists():
                return {}
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AssignmentLookupError(paper_id, f"cannot read {self.path.name}: {e}") from e
        if not isinstance(data, dict):
            raise AssignmentLookupError(paper_id, f"{self.path.name} is not a JSON object")
        return data

    def _write(self, data: Dict[str, dict]) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def assigned_chair(self, paper_id: int) -> Optional[User]:
        entry = self._read(paper_id).get(str(paper_id))
        if entry is None:
            return None
        try:
            return User(id=int(entry["id"]), name=str(entry.get("name", "")))
        except (KeyError, TypeError, ValueError) as e:
            raise AssignmentLookupError(paper_id, f"malformed entry {entry!r}") from e

    def assign(self, paper_id: int, chair: User) -> None:
        ensure_dirs(self.path.parent)
        data = self._read(paper_id)
        data[str(paper_id)] = {"id": chair.id, "name": chair.name}
        self._write(data)

    def unassign(self, paper_id: int) -> None:
        data = self._read(paper_id)
        if data.pop(str(paper_id), None) is not None:
            self._write(data)


# ─────────────────────────────────────────────────────────────────────────────
# Lookup
# ─────────────────────────────────────────────────────────────────────────────
def lookup_assigned_chair(
    directory: AssignmentDirectory,
    paper_id: int,
    mode: LookupMode = LookupMode.PERMISSIVE,
) -> Optional[User]:
    """Chair assigned to paper_id, or None. Identity 0 is read as None."""
    try:
        chair = directory.assigned_chair(paper_id)
    except AssignmentLookupError as e:
        if mode is LookupMode.STRICT:
            raise
        logger.warning("chair_lookup_failed", paper_id=paper_id, mode=mode.value, error=str(e))
        return None
    except Exception as e:
        if mode is LookupMode.STRICT:
            raise AssignmentLookupError(paper_id, f"{type(e).__name__}: {e}") from e
        logger.warning("chair_lookup_failed", paper_id=paper_id, mode=mode.value,
                       error=f"{type(e).__name__}: {e}")
        return None
    return None if is_absent(chair) else chair


_default_directory: AssignmentDirectory = InMemoryAssignmentDirectory()
_default_mode: LookupMode = LookupMode.PERMISSIVE


def get_default_directory() -> AssignmentDirectory:
    return _default_directory


def set_default_directory(directory: AssignmentDirectory, mode: Optional[LookupMode] = None) -> None:
    """Directory (and lookup mode) used by papers that were not given one."""
    global _default_directory, _default_mode
    _default_directory = directory
    if mode is not None:
        _default_mode = mode


def get_default_mode() -> LookupMode:
    return _default_mode
