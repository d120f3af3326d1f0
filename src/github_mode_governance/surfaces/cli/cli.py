from typing import Optional

import typer

from .commands.policy import register_policy_commands
from .commands.scoreboard import register_scoreboard_commands
from .commands.utils import get_version
from .commands.utils import raise_exit as _raise_exit
from .commands.utils import require_config as _require_config

app = typer.Typer(add_completion=False)
policy_app = typer.Typer(add_completion=False)
scoreboard_app = typer.Typer(add_completion=False)


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"github-mode-governance {get_version()}")
    raise typer.Exit(code=0)


@app.callback()
def _root(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override log.level from github-mode-governance.yml.",
    ),
) -> None:
    ctx.obj = {"log_level": log_level}


def main() -> None:
    """Entrypoint for CLI execution."""
    app()


app.add_typer(policy_app, name="policy")
register_policy_commands(
    policy_app,
    require_config=_require_config,
    raise_exit=_raise_exit,
)
app.add_typer(scoreboard_app, name="scoreboard")
register_scoreboard_commands(
    scoreboard_app,
    require_config=_require_config,
    raise_exit=_raise_exit,
)


if __name__ == "__main__":
    app()
