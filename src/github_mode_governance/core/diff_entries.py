from __future__ import annotations

from dataclasses import dataclass
from typing import Any

RENAME_COPY_PREFIXES: tuple[str, ...] = ("R", "C")


@dataclass(frozen=True)
class DiffEntry:
    status: str
    path: str

    @property
    def is_rename_or_copy(self) -> bool:
        return self.status.startswith(RENAME_COPY_PREFIXES)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "path": self.path}


def parse_diff_entries(diff_text: str) -> list[DiffEntry]:
    """Parse ``git diff --name-status`` output.

    Rename and copy records (``R100<TAB>old<TAB>new``) produce one entry for
    each side, both carrying the original status. Lines without a tab are
    ignored.
    """
    entries: list[DiffEntry] = []
    for line in diff_text.split("\n"):
        parts = line.split("\t")
        if len(parts) < 2:
            continue
        status = parts[0].strip()
        entries.append(DiffEntry(status=status, path=parts[1].strip()))
        if status.startswith(RENAME_COPY_PREFIXES) and len(parts) > 2 and parts[2]:
            entries.append(DiffEntry(status=status, path=parts[2].strip()))
    return entries


__all__ = ["DiffEntry", "RENAME_COPY_PREFIXES", "parse_diff_entries"]
