from __future__ import annotations

import os
from pathlib import Path

import pytest

from github_mode_governance.core.config import (
    ROOT_CONFIG_FILENAME,
    ROOT_OVERRIDE_FILENAME,
    SCOREBOARD_PATH,
    load_governance_config,
)
from github_mode_governance.core.exceptions import ConfigError


def _repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    return root


def test_defaults_without_config_file(tmp_path: Path) -> None:
    root = _repo(tmp_path)
    config = load_governance_config(root)
    assert config.root == root.resolve()
    assert config.paths.scoreboard == SCOREBOARD_PATH
    assert config.paths.spec_artifact_prefix == ".GITHUB-MODE/docs/planning/"
    assert config.base_ref_candidates == ("main", "master")
    assert config.env.adapter_var == "GITHUB_MODE_ADAPTER"
    assert config.env.action_var == "GITHUB_MODE_ACTION"
    assert config.log.level == "WARNING"
    assert config.log.path is None
    assert config.scoreboard_file() == root.resolve() / SCOREBOARD_PATH


def test_root_is_found_from_nested_directory(tmp_path: Path) -> None:
    root = _repo(tmp_path)
    nested = root / "a" / "b"
    nested.mkdir(parents=True)
    assert load_governance_config(nested).root == root.resolve()


def test_yaml_and_override_are_merged(tmp_path: Path) -> None:
    root = _repo(tmp_path)
    (root / ROOT_CONFIG_FILENAME).write_text(
        "paths:\n"
        "  scoreboard: tracking/board.json\n"
        "git:\n"
        "  base_ref_candidates: [trunk]\n"
        "log:\n"
        "  level: info\n"
        "  path: logs/governance.log\n",
        encoding="utf-8",
    )
    (root / ROOT_OVERRIDE_FILENAME).write_text(
        "env:\n  adapter_var: CUSTOM_ADAPTER\n", encoding="utf-8"
    )
    config = load_governance_config(root)
    assert config.paths.scoreboard == "tracking/board.json"
    assert config.paths.command_policy == ".GITHUB-MODE/runtime/command-policy.json"
    assert config.base_ref_candidates == ("trunk",)
    assert config.env.adapter_var == "CUSTOM_ADAPTER"
    assert config.env.action_var == "GITHUB_MODE_ACTION"
    assert config.log.level == "INFO"
    assert config.log.path == root.resolve() / "logs" / "governance.log"


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    root = _repo(tmp_path)
    (root / ROOT_CONFIG_FILENAME).write_text("paths: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_governance_config(root)


def test_non_mapping_config_raises(tmp_path: Path) -> None:
    root = _repo(tmp_path)
    (root / ROOT_CONFIG_FILENAME).write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_governance_config(root)


def test_bad_override_names_the_override_file(tmp_path: Path) -> None:
    root = _repo(tmp_path)
    (root / ROOT_OVERRIDE_FILENAME).write_text("just a string\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid override config"):
        load_governance_config(root)


@pytest.mark.parametrize(
    "content, message",
    [
        ("paths:\n  scoreboard: ''\n", "paths.scoreboard"),
        ("git:\n  base_ref_candidates: main\n", "git.base_ref_candidates"),
        ("log:\n  level: chatty\n", "log.level"),
        ("log:\n  max_bytes: -1\n", "log.max_bytes"),
        ("env: []\n", "env must be a mapping"),
    ],
)
def test_invalid_fields_raise(tmp_path: Path, content: str, message: str) -> None:
    root = _repo(tmp_path)
    (root / ROOT_CONFIG_FILENAME).write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_governance_config(root)


def test_dotenv_does_not_override_process_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = _repo(tmp_path)
    (root / ".env").write_text(
        "GHM_TEST_FROM_DOTENV=dotenv\nGHM_TEST_PRESET=dotenv\n", encoding="utf-8"
    )
    monkeypatch.delenv("GHM_TEST_FROM_DOTENV", raising=False)
    monkeypatch.setenv("GHM_TEST_PRESET", "process")
    load_governance_config(root)
    try:
        assert os.environ["GHM_TEST_FROM_DOTENV"] == "dotenv"
        assert os.environ["GHM_TEST_PRESET"] == "process"
    finally:
        os.environ.pop("GHM_TEST_FROM_DOTENV", None)
