from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

REPO_MARKERS: tuple[str, ...] = (".git", ".GITHUB-MODE")


def atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def find_repo_root(start: Optional[Path] = None) -> Path:
    """Return the nearest parent holding a repo marker, else ``start`` itself."""
    base = (start or Path.cwd()).resolve()
    for candidate in (base, *base.parents):
        if any((candidate / marker).exists() for marker in REPO_MARKERS):
            return candidate
    return base


__all__ = ["REPO_MARKERS", "atomic_write", "find_repo_root"]
