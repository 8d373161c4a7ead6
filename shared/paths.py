from __future__ import annotations

from pathlib import Path


def ensure_dirs(*paths: Path) -> None:
    for p in paths:
        p.mkdir(parents=True, exist_ok=True)


def conference_paths(conference_root: Path) -> dict[str, Path]:
    """Files an integrator keeps under one conference folder. Creates nothing."""
    return {
        "root": conference_root,
        "assignments": conference_root / "assignments.json",
        "window": conference_root / "window.json",
    }
