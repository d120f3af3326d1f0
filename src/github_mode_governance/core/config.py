import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, cast

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError
from .utils import find_repo_root

logger = logging.getLogger("github_mode_governance.core.config")

ROOT_CONFIG_FILENAME = "github-mode-governance.yml"
ROOT_OVERRIDE_FILENAME = "github-mode-governance.override.yml"

COMMAND_POLICY_PATH = ".GITHUB-MODE/runtime/command-policy.json"
ADAPTER_CONTRACTS_PATH = ".GITHUB-MODE/runtime/adapter-contracts.json"
SCOREBOARD_PATH = ".GITHUB-MODE/runtime/implementation-scoreboard.json"
SPEC_ARTIFACT_PREFIX = ".GITHUB-MODE/docs/planning/"

DEFAULT_ADAPTER_ENV = "GITHUB_MODE_ADAPTER"
DEFAULT_ACTION_ENV = "GITHUB_MODE_ACTION"
DEFAULT_BASE_REF_CANDIDATES: tuple[str, ...] = ("main", "master")


def _default_config() -> Dict[str, Any]:
    return {
        "paths": {
            "command_policy": COMMAND_POLICY_PATH,
            "adapter_contracts": ADAPTER_CONTRACTS_PATH,
            "scoreboard": SCOREBOARD_PATH,
            "spec_artifact_prefix": SPEC_ARTIFACT_PREFIX,
        },
        "git": {
            "base_ref_candidates": list(DEFAULT_BASE_REF_CANDIDATES),
        },
        "env": {
            "adapter_var": DEFAULT_ADAPTER_ENV,
            "action_var": DEFAULT_ACTION_ENV,
        },
        "log": {
            "level": "WARNING",
            "path": None,
            "max_bytes": 1024 * 1024,
            "backup_count": 3,
        },
    }


@dataclasses.dataclass(frozen=True)
class GovernancePaths:
    command_policy: str
    adapter_contracts: str
    scoreboard: str
    spec_artifact_prefix: str


@dataclasses.dataclass(frozen=True)
class EnvConfig:
    adapter_var: str
    action_var: str


@dataclasses.dataclass(frozen=True)
class LogConfig:
    level: str
    path: Optional[Path]
    max_bytes: int
    backup_count: int


@dataclasses.dataclass(frozen=True)
class GovernanceConfig:
    root: Path
    paths: GovernancePaths
    base_ref_candidates: tuple[str, ...]
    env: EnvConfig
    log: LogConfig

    def scoreboard_file(self) -> Path:
        return self.root / self.paths.scoreboard


def _merge_defaults(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = cast(Dict[str, Any], json.loads(json.dumps(base)))
    for key, value in overrides.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml_dict(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return data


def _load_root_config(root: Path) -> Dict[str, Any]:
    merged = _default_config()
    base = _load_yaml_dict(root / ROOT_CONFIG_FILENAME)
    if base:
        merged = _merge_defaults(merged, base)
    override_path = root / ROOT_OVERRIDE_FILENAME
    try:
        override = _load_yaml_dict(override_path)
    except ConfigError as exc:
        raise ConfigError(
            f"Invalid override config {override_path}; fix or delete it: {exc}"
        ) from exc
    if override:
        merged = _merge_defaults(merged, override)
    return merged


def _section(cfg: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = cfg.get(key)
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def _require_str(section: Dict[str, Any], section_name: str, key: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{section_name}.{key} must be a non-empty string")
    return value.strip()


def _require_int(section: Dict[str, Any], section_name: str, key: str) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{section_name}.{key} must be a non-negative integer")
    return value


def _parse_paths(cfg: Dict[str, Any]) -> GovernancePaths:
    section = _section(cfg, "paths")
    return GovernancePaths(
        command_policy=_require_str(section, "paths", "command_policy"),
        adapter_contracts=_require_str(section, "paths", "adapter_contracts"),
        scoreboard=_require_str(section, "paths", "scoreboard"),
        spec_artifact_prefix=_require_str(section, "paths", "spec_artifact_prefix"),
    )


def _parse_base_ref_candidates(cfg: Dict[str, Any]) -> tuple[str, ...]:
    section = _section(cfg, "git")
    raw = section.get("base_ref_candidates")
    if not isinstance(raw, list) or not all(
        isinstance(item, str) and item.strip() for item in raw
    ):
        raise ConfigError("git.base_ref_candidates must be a list of branch names")
    return tuple(item.strip() for item in raw)


def _parse_env_config(cfg: Dict[str, Any]) -> EnvConfig:
    section = _section(cfg, "env")
    return EnvConfig(
        adapter_var=_require_str(section, "env", "adapter_var"),
        action_var=_require_str(section, "env", "action_var"),
    )


def _parse_log_config(cfg: Dict[str, Any], root: Path) -> LogConfig:
    section = _section(cfg, "log")
    level = _require_str(section, "log", "level").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"log.level is not a known logging level: {level}")
    raw_path = section.get("path")
    path: Optional[Path] = None
    if raw_path is not None:
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ConfigError("log.path must be a string path or null")
        path = Path(raw_path).expanduser()
        if not path.is_absolute():
            path = root / path
    return LogConfig(
        level=level,
        path=path,
        max_bytes=_require_int(section, "log", "max_bytes"),
        backup_count=_require_int(section, "log", "backup_count"),
    )


def load_dotenv_for_root(root: Path) -> None:
    """
    Best-effort load of ``.env`` from the repo root.

    Variables already present in the process environment win, so values set by
    the CI workflow are never replaced by a checked-in file.
    """
    try:
        candidate = root.resolve() / ".env"
        if candidate.exists():
            load_dotenv(dotenv_path=candidate, override=False)
    except OSError as exc:
        logger.debug("Failed to load .env file: %s", exc)


def build_governance_config(root: Path, cfg: Dict[str, Any]) -> GovernanceConfig:
    return GovernanceConfig(
        root=root,
        paths=_parse_paths(cfg),
        base_ref_candidates=_parse_base_ref_candidates(cfg),
        env=_parse_env_config(cfg),
        log=_parse_log_config(cfg, root),
    )


def load_governance_config(start: Optional[Path] = None) -> GovernanceConfig:
    """Load config for the repo containing ``start`` (defaults to the CWD)."""
    root = find_repo_root(start)
    load_dotenv_for_root(root)
    return build_governance_config(root, _load_root_config(root))


__all__ = [
    "ADAPTER_CONTRACTS_PATH",
    "COMMAND_POLICY_PATH",
    "DEFAULT_ACTION_ENV",
    "DEFAULT_ADAPTER_ENV",
    "DEFAULT_BASE_REF_CANDIDATES",
    "ROOT_CONFIG_FILENAME",
    "ROOT_OVERRIDE_FILENAME",
    "SCOREBOARD_PATH",
    "SPEC_ARTIFACT_PREFIX",
    "ConfigError",
    "EnvConfig",
    "GovernanceConfig",
    "GovernancePaths",
    "LogConfig",
    "build_governance_config",
    "load_dotenv_for_root",
    "load_governance_config",
]
