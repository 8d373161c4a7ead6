# shared/due.py
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog

from shared.paths import conference_paths, ensure_dirs
from shared.timeutil import as_utc, parse_iso, to_iso, utcnow

logger = structlog.get_logger(__name__)

# window.json format (per conference):
# {
#   "submission_deadline": "2025-10-04T23:59:00Z",   # ISO 8601 (UTC)
#   "note": "camera-ready extension",
#   "set_by": "pc-chair",
#   "set_at": "ISO timestamp"
# }

def read_window(conference_root: Path) -> dict:
    p = conference_paths(conference_root)["window"]
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("window_file_unreadable", path=str(p))
        return {}
    if not isinstance(data, dict):
        logger.warning("window_file_unreadable", path=str(p), reason="not a JSON object")
        return {}
    return data

def write_window(
    conference_root: Path,
    deadline: Optional[datetime],       # None => clear
    note: str = "",
    set_by: str = "",
) -> dict:
    p = conference_paths(conference_root)["window"]
    ensure_dirs(conference_root)
    data = read_window(conference_root)
    if deadline is not None:
        data["submission_deadline"] = to_iso(deadline)
        data["note"] = note or ""
        data["set_by"] = set_by or ""
        data["set_at"] = to_iso(utcnow())
    else:
        # clear
        for k in ("submission_deadline", "note", "set_by", "set_at"):
            data.pop(k, None)
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return data

def read_submission_deadline(conference_root: Path) -> Optional[datetime]:
    return parse_iso(read_window(conference_root).get("submission_deadline"))

def is_open(now: datetime, deadline: Optional[datetime]) -> bool:
    """
    Submission window is the half-open interval [.., deadline):
    now == deadline is already closed. No deadline means always open.
    """
    if deadline is None:
        return True
    return as_utc(now) < as_utc(deadline)
