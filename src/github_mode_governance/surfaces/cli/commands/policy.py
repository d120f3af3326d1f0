from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer

from ....core.config import GovernanceConfig
from ....core.policy_gate import evaluate, render_decision_summary
from ....core.utils import atomic_write
from .utils import ctx_log_level

DECISION_JSON_MARKER = "--- POLICY_DECISION_JSON ---"


def _resolve_input(
    value: Optional[str], env_var: str, raise_exit: Callable[..., NoReturn]
) -> str:
    resolved = (value or os.environ.get(env_var) or "").strip()
    if not resolved:
        raise_exit(f"❌ {env_var} environment variable is required")
    return resolved


def register_policy_commands(
    policy_app: typer.Typer,
    *,
    require_config: Callable[[Optional[Path], Optional[str]], GovernanceConfig],
    raise_exit: Callable[..., NoReturn],
) -> None:
    @policy_app.command("gate")
    def policy_gate(
        ctx: typer.Context,
        adapter: Optional[str] = typer.Option(
            None,
            "--adapter",
            help="Adapter name (defaults to the configured adapter env var)",
        ),
        action: Optional[str] = typer.Option(
            None,
            "--action",
            help="Action name (defaults to the configured action env var)",
        ),
        json_out: Optional[Path] = typer.Option(
            None, "--json-out", help="Write the decision JSON artifact to this path"
        ),
        summary_out: Optional[Path] = typer.Option(
            None, "--summary-out", help="Write the Markdown decision summary to this path"
        ),
        repo: Optional[Path] = typer.Option(None, "--repo", help="Repo path"),
    ) -> None:
        """Evaluate the policy-gated adapter decision; exits 1 on FAIL."""
        config = require_config(repo, ctx_log_level(ctx))
        adapter_name = _resolve_input(adapter, config.env.adapter_var, raise_exit)
        action_name = _resolve_input(action, config.env.action_var, raise_exit)

        decision = evaluate(
            config.root, adapter_name, action_name, paths=config.paths
        )
        summary = render_decision_summary(decision)

        try:
            if json_out is not None:
                atomic_write(json_out, decision.to_json() + "\n")
            if summary_out is not None:
                atomic_write(summary_out, summary + "\n")
        except OSError as exc:
            raise_exit(f"❌ Failed to write decision artifact: {exc}", cause=exc)

        typer.echo(summary)
        typer.echo(f"\n{DECISION_JSON_MARKER}")
        typer.echo(decision.to_json())

        if not decision.passed:
            raise typer.Exit(code=1)


__all__ = ["DECISION_JSON_MARKER", "register_policy_commands"]
