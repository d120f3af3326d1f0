#!/usr/bin/env python3
"""CI shim for `ghm-governance scoreboard check`.

Accepts `--summary`, `--report-file <path>` and `--report-format json|markdown`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from github_mode_governance.cli import app  # noqa: E402


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        app(
            args=["scoreboard", "check", *args],
            prog_name="check_implementation_scoreboard",
        )
    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
