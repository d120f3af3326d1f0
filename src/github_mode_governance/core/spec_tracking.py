from __future__ import annotations

import logging
from typing import Iterable

from .config import SCOREBOARD_PATH, SPEC_ARTIFACT_PREFIX
from .diff_entries import DiffEntry
from .exceptions import SpecTrackingError
from .logging_utils import log_event

logger = logging.getLogger("github_mode_governance.core.spec_tracking")

SPEC_ARTIFACT_SUFFIX = ".md"
DIRECTORY_INDEX_NAME = "README.md"


def is_spec_artifact(path: str, *, prefix: str = SPEC_ARTIFACT_PREFIX) -> bool:
    return (
        path.startswith(prefix)
        and path.endswith(SPEC_ARTIFACT_SUFFIX)
        and not path.endswith(f"/{DIRECTORY_INDEX_NAME}")
    )


def get_added_spec_artifacts(
    entries: Iterable[DiffEntry], *, prefix: str = SPEC_ARTIFACT_PREFIX
) -> list[str]:
    additions = {
        entry.path
        for entry in entries
        if entry.status == "A" and is_spec_artifact(entry.path, prefix=prefix)
    }
    return sorted(additions)


def has_scoreboard_update(
    entries: Iterable[DiffEntry], *, scoreboard_path: str = SCOREBOARD_PATH
) -> bool:
    # Deletions never satisfy the pairing requirement.
    return any(
        entry.path == scoreboard_path and entry.status != "D" for entry in entries
    )


def enforce_spec_tracking(
    entries: Iterable[DiffEntry],
    *,
    prefix: str = SPEC_ARTIFACT_PREFIX,
    scoreboard_path: str = SCOREBOARD_PATH,
) -> None:
    """Raise ``SpecTrackingError`` when new spec artifacts land without a scoreboard change."""
    materialized = list(entries)
    added = get_added_spec_artifacts(materialized, prefix=prefix)
    if not added:
        return
    if has_scoreboard_update(materialized, scoreboard_path=scoreboard_path):
        log_event(
            logger,
            logging.DEBUG,
            "spec_tracking.paired",
            artifacts=added,
        )
        return
    lines = [
        "New planning/spec artifacts were added without updating implementation scoreboard.",
        "Added artifacts:",
        *(f"  - {artifact}" for artifact in added),
        f"Update {scoreboard_path} in the same change to keep "
        "spec-vs-implementation tracking current.",
    ]
    raise SpecTrackingError("\n".join(lines), artifacts=added)


__all__ = [
    "enforce_spec_tracking",
    "get_added_spec_artifacts",
    "has_scoreboard_update",
    "is_spec_artifact",
]
