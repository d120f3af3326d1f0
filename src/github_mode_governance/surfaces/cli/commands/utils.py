from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer

from ....core.config import GovernanceConfig, load_governance_config
from ....core.exceptions import ConfigError
from ....core.logging_utils import setup_logging


def get_version() -> str:
    import importlib.metadata

    try:
        return importlib.metadata.version("github-mode-governance")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def raise_exit(message: str, *, cause: Optional[BaseException] = None) -> NoReturn:
    typer.echo(message, err=True)
    if cause is not None:
        raise typer.Exit(code=1) from cause
    raise typer.Exit(code=1)


def require_config(
    repo: Optional[Path], log_level: Optional[str] = None
) -> GovernanceConfig:
    """Load config for ``repo`` (or the CWD) and configure logging from it."""
    try:
        config = load_governance_config(repo)
    except ConfigError as exc:
        raise_exit(f"❌ {exc}", cause=exc)
    if log_level:
        level = log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise_exit(f"❌ Unknown log level: {log_level}")
        config = dataclasses.replace(
            config, log=dataclasses.replace(config.log, level=level)
        )
    setup_logging(config.log)
    return config


def ctx_log_level(ctx: typer.Context) -> Optional[str]:
    obj = ctx.find_root().obj
    if isinstance(obj, dict):
        value = obj.get("log_level")
        return value if isinstance(value, str) else None
    return None


__all__ = ["ctx_log_level", "get_version", "raise_exit", "require_config"]
