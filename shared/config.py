from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from appdirs import user_config_dir

from shared.due import read_submission_deadline
from shared.timeutil import parse_iso

logger = structlog.get_logger(__name__)

APP_NAME = "Reviewflow"
APP_AUTHOR = "Reviewflow"
CONFIG_DIR = Path(user_config_dir(APP_NAME, APP_AUTHOR))
CONFIG_FILE = CONFIG_DIR / "config.json"

LOOKUP_MODES = ("permissive", "strict")
DEFAULT_CACHE_TTL = 300


def _default_cfg() -> Dict[str, Any]:
    return {
        "defaults": {
            "conference_root": "",
        },
        "review": {
            "lookup_mode": "permissive",
            "cache_ttl_seconds": DEFAULT_CACHE_TTL,
            "submission_deadline": "",  # ISO-8601 UTC, empty = no deadline
        },
    }


def load_config() -> Dict[str, Any]:
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        cfg = _default_cfg()
        CONFIG_FILE.write_text(json.dumps(cfg, indent=2))
        return cfg
    try:
        cfg = json.loads(CONFIG_FILE.read_text())
        if not isinstance(cfg, dict):
            raise ValueError("config root is not a JSON object")
        return cfg
    except ValueError:
        # If corrupt, back up and reset
        backup = CONFIG_FILE.with_suffix(".bak")
        CONFIG_FILE.replace(backup)
        logger.warning("config_reset", backup=str(backup))
        cfg = _default_cfg()
        CONFIG_FILE.write_text(json.dumps(cfg, indent=2))
        return cfg


def save_config(cfg: Dict[str, Any]) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def remember_conference_root(conference_root: str) -> None:
    cfg = load_config()
    cfg.setdefault("defaults", {})["conference_root"] = conference_root
    save_config(cfg)


def set_review_option(key: str, value: Any) -> None:
    if key == "lookup_mode" and value not in LOOKUP_MODES:
        raise ValueError(f"lookup_mode must be one of {LOOKUP_MODES}, got {value!r}")
    cfg = load_config()
    cfg.setdefault("review", {})[key] = value
    save_config(cfg)


@dataclass
class ReviewSettings:
    conference_root: Optional[Path]
    lookup_mode: str
    cache_ttl_seconds: int
    submission_deadline: Optional[datetime]

    @property
    def strict(self) -> bool:
        return self.lookup_mode == "strict"


def get_review_settings() -> ReviewSettings:
    """
    Typed view over config.json. A window.json under the conference root
    wins over the deadline stored in the user config.
    """
    cfg = load_config()
    stored = cfg.get("review")
    review = {**_default_cfg()["review"], **(stored if isinstance(stored, dict) else {})}

    root_str = ((cfg.get("defaults") or {}).get("conference_root") or "").strip()
    root = Path(root_str) if root_str else None

    mode = review.get("lookup_mode")
    if mode not in LOOKUP_MODES:
        logger.warning("unknown_lookup_mode", value=mode, fallback="permissive")
        mode = "permissive"

    try:
        ttl = int(review.get("cache_ttl_seconds"))
    except (TypeError, ValueError):
        ttl = DEFAULT_CACHE_TTL

    deadline = parse_iso(review.get("submission_deadline"))
    if root is not None and root.exists():
        deadline = read_submission_deadline(root) or deadline

    return ReviewSettings(
        conference_root=root,
        lookup_mode=mode,
        cache_ttl_seconds=ttl,
        submission_deadline=deadline,
    )
