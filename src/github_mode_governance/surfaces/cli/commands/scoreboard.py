from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer

from ....core.config import GovernanceConfig
from ....core.exceptions import CliUsageError, GovernanceError
from ....core.git_utils import git_diff_entries
from ....core.scoreboard import (
    REPORT_FORMAT_MARKDOWN,
    REPORT_FORMATS,
    ReportFormat,
    load_scoreboard,
    render_summary_markdown,
    validate_scoreboard,
    write_parity_report,
)
from ....core.spec_tracking import enforce_spec_tracking
from .utils import ctx_log_level


@dataclass(frozen=True)
class ScoreboardCheckOptions:
    summary: bool
    report_file: Optional[Path]
    report_format: ReportFormat


def build_scoreboard_options(
    *,
    summary: bool = False,
    report_file: Optional[Path] = None,
    report_format: Optional[str] = None,
) -> ScoreboardCheckOptions:
    fmt = REPORT_FORMAT_MARKDOWN if report_format is None else report_format
    if fmt not in REPORT_FORMATS:
        raise CliUsageError("--report-format must be either 'json' or 'markdown'.")
    return ScoreboardCheckOptions(
        summary=summary,
        report_file=report_file,
        report_format=fmt,  # type: ignore[arg-type]
    )


def register_scoreboard_commands(
    scoreboard_app: typer.Typer,
    *,
    require_config: Callable[[Optional[Path], Optional[str]], GovernanceConfig],
    raise_exit: Callable[..., NoReturn],
) -> None:
    @scoreboard_app.command("check")
    def scoreboard_check(
        ctx: typer.Context,
        summary: bool = typer.Option(
            False, "--summary", help="Print the summary only; skip spec tracking"
        ),
        report_file: Optional[Path] = typer.Option(
            None, "--report-file", help="Write a parity report to this path"
        ),
        report_format: str = typer.Option(
            REPORT_FORMAT_MARKDOWN,
            "--report-format",
            help="Parity report format: json or markdown",
        ),
        base_ref: Optional[str] = typer.Option(
            None,
            "--base-ref",
            help="Diff base ref (default: origin/main, origin/master, then HEAD~1)",
        ),
        repo: Optional[Path] = typer.Option(None, "--repo", help="Repo path"),
    ) -> None:
        """Validate the implementation scoreboard and enforce spec tracking."""
        try:
            options = build_scoreboard_options(
                summary=summary,
                report_file=report_file,
                report_format=report_format,
            )
        except CliUsageError as exc:
            raise typer.BadParameter(str(exc), param_hint="--report-format") from exc

        config = require_config(repo, ctx_log_level(ctx))
        try:
            entries = git_diff_entries(
                config.root,
                base_ref=base_ref,
                candidates=config.base_ref_candidates,
            )
            scoreboard_file = config.scoreboard_file()
            scoreboard = load_scoreboard(scoreboard_file)
            validate_scoreboard(scoreboard, source_name=scoreboard_file.name)

            if options.report_file is not None:
                write_parity_report(
                    scoreboard, options.report_file, options.report_format
                )
                typer.echo(f"📄 Wrote parity report to {options.report_file}")

            if options.summary:
                typer.echo(render_summary_markdown(scoreboard))
                return

            enforce_spec_tracking(
                entries,
                prefix=config.paths.spec_artifact_prefix,
                scoreboard_path=config.paths.scoreboard,
            )
        except (GovernanceError, OSError) as exc:
            raise_exit(f"❌ {exc}", cause=exc)

        typer.echo(
            "✅ Implementation scoreboard is valid and spec tracking guard passed."
        )
        typer.echo(render_summary_markdown(scoreboard))


__all__ = [
    "ScoreboardCheckOptions",
    "build_scoreboard_options",
    "register_scoreboard_commands",
]
