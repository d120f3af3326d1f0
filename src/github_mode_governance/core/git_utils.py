from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_BASE_REF_CANDIDATES
from .diff_entries import DiffEntry, parse_diff_entries
from .exceptions import GitError
from .logging_utils import log_event

logger = logging.getLogger("github_mode_governance.core.git_utils")

FALLBACK_BASE_REF = "HEAD~1"


def run_git(
    args: list[str],
    cwd: Path,
    *,
    timeout_seconds: int = 30,
    check: bool = False,
) -> subprocess.CompletedProcess[str]:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout_seconds,
            check=False,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise GitError(
            f"git {' '.join(args)} timed out after {timeout_seconds}s"
        ) from exc
    if check and proc.returncode != 0:
        detail = (proc.stderr or proc.stdout or "").strip() or f"exit {proc.returncode}"
        raise GitError(
            f"git {' '.join(args)} failed: {detail}", returncode=proc.returncode
        )
    return proc


def determine_base_ref(
    repo_root: Path,
    candidates: Sequence[str] = DEFAULT_BASE_REF_CANDIDATES,
) -> str:
    """Pick ``origin/<branch>`` for the first candidate that exists, else ``HEAD~1``."""
    for branch in candidates:
        ref = f"origin/{branch}"
        try:
            proc = run_git(["rev-parse", "--verify", ref], repo_root)
        except GitError:
            break
        if proc.returncode == 0:
            return ref
    return FALLBACK_BASE_REF


def git_diff_entries(
    repo_root: Path,
    *,
    base_ref: Optional[str] = None,
    candidates: Sequence[str] = DEFAULT_BASE_REF_CANDIDATES,
) -> list[DiffEntry]:
    """Return name-status entries for ``<base>...HEAD``.

    A diff that cannot be computed (shallow clone, no git) yields no entries.
    """
    resolved_base = base_ref or determine_base_ref(repo_root, candidates)
    try:
        proc = run_git(
            ["diff", "--name-status", f"{resolved_base}...HEAD"],
            repo_root,
            check=True,
        )
    except GitError as exc:
        log_event(
            logger,
            logging.WARNING,
            "git.diff_unavailable",
            base_ref=resolved_base,
            exc=exc,
        )
        return []
    output = proc.stdout.strip()
    if not output:
        return []
    entries = parse_diff_entries(output)
    log_event(
        logger,
        logging.DEBUG,
        "git.diff_entries",
        base_ref=resolved_base,
        count=len(entries),
    )
    return entries


__all__ = [
    "FALLBACK_BASE_REF",
    "GitError",
    "determine_base_ref",
    "git_diff_entries",
    "run_git",
]
