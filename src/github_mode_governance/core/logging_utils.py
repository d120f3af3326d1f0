from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import LogConfig

ROOT_LOGGER_NAME = "github_mode_governance"
_HANDLER_MARKER = "_ghm_governance_handler"


def _coerce_field(value: Any) -> Any:
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_coerce_field(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _coerce_field(item) for key, item in value.items()}
    return str(value)


def log_event(
    logger: logging.Logger, level: int, event: str, **fields: Any
) -> None:
    """Emit ``event`` with ``fields`` as a single JSON log line."""
    if not logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {"event": event}
    for key, value in fields.items():
        payload[key] = _coerce_field(value)
    logger.log(level, json.dumps(payload, sort_keys=False))


def setup_logging(log_config: "LogConfig") -> logging.Logger:
    """Attach stderr (and optional rotating file) handlers to the package logger.

    Calling this more than once replaces the handlers installed previously.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    level = logging.getLevelName(log_config.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    root.setLevel(level)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_config.path is not None:
        log_config.path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_config.path,
                maxBytes=log_config.max_bytes,
                backupCount=log_config.backup_count,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARKER, True)
        root.addHandler(handler)
    return root


__all__ = ["ROOT_LOGGER_NAME", "log_event", "setup_logging"]
