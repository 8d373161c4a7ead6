from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

import structlog

from shared.config import ReviewSettings
from shared.models import User
from shared.timeutil import utcnow

from .assignments import (
    AssignmentDirectory,
    InMemoryAssignmentDirectory,
    JsonAssignmentDirectory,
    LookupMode,
)

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    chair: Optional[User]
    cached_at: datetime
    ttl_seconds: int

    def is_expired(self, now: datetime) -> bool:
        return now >= self.cached_at + timedelta(seconds=self.ttl_seconds)


class CachedAssignmentDirectory:
    """
    Time-bounded cache in front of another directory, keyed by paper id.

    Lookup failures are not cached. Assigning through the cache drops the
    paper's entry; callers that change assignments behind its back must
    call invalidate() themselves.
    """

    def __init__(
        self,
        inner: AssignmentDirectory,
        ttl_seconds: int = 300,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.inner = inner
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[int, CacheEntry] = {}

    def assigned_chair(self, paper_id: int) -> Optional[User]:
        now = self._clock()
        entry = self._entries.get(paper_id)
        if entry is not None and not entry.is_expired(now):
            logger.debug("chair_cache_hit", paper_id=paper_id)
            return entry.chair

        chair = self.inner.assigned_chair(paper_id)
        self._entries[paper_id] = CacheEntry(chair=chair, cached_at=now, ttl_seconds=self.ttl_seconds)
        return chair

    def assign(self, paper_id: int, chair: User) -> None:
        self.inner.assign(paper_id, chair)  # type: ignore[attr-defined]
        self.invalidate(paper_id)

    def unassign(self, paper_id: int) -> None:
        self.inner.unassign(paper_id)  # type: ignore[attr-defined]
        self.invalidate(paper_id)

    def invalidate(self, paper_id: Optional[int] = None) -> None:
        if paper_id is None:
            self._entries.clear()
        else:
            self._entries.pop(paper_id, None)

    def __len__(self) -> int:
        return len(self._entries)


# ─────────────────────────────────────────────────────────────────────────────
# Wiring from config
# ─────────────────────────────────────────────────────────────────────────────
def directory_for(settings: ReviewSettings) -> tuple[AssignmentDirectory, LookupMode]:
    """
    JSON directory under the configured conference root (cached when the
    TTL is positive), or an empty in-memory one when no root is configured.
    """
    mode = LookupMode.STRICT if settings.strict else LookupMode.PERMISSIVE
    if settings.conference_root is None:
        return InMemoryAssignmentDirectory(), mode
    directory: AssignmentDirectory = JsonAssignmentDirectory(settings.conference_root)
    if settings.cache_ttl_seconds > 0:
        directory = CachedAssignmentDirectory(directory, ttl_seconds=settings.cache_ttl_seconds)
    return directory, mode
