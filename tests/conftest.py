"""Test harness configuration.

This repo uses a `src/` layout; make sure tests import the in-repo package
rather than an older installed copy.
"""

from __future__ import annotations

import copy
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pytest

DEFAULT_NON_INTEGRATION_TIMEOUT_SECONDS = 60

VALID_COMMAND_POLICY: dict[str, Any] = {
    "schemaVersion": "1.0",
    "policyVersion": "v1.0.0",
    "enforcementMode": "enforce",
    "allowedActions": ["plan", "validate", "open-pr"],
    "allowedCommands": ["explain", "refactor", "test", "diagram"],
    "constraints": [
        "No direct protected-branch mutation outside pull-request flow.",
        "Privileged adapters require trusted trigger context.",
        "Secrets are unavailable to untrusted fork pull-request jobs.",
    ],
}

VALID_ADAPTER_CONTRACTS: dict[str, Any] = {
    "schemaVersion": "1.0",
    "contractsVersion": "v1.0.0",
    "adapters": [
        {
            "name": "repo-write",
            "capability": "Creates branches and pull requests through policy-gated workflows.",
            "trustLevels": ["trusted"],
            "constraints": [
                "No direct writes to protected branches.",
                "All mutations must flow through pull-request automation.",
            ],
        },
        {
            "name": "policy-sim",
            "capability": "Runs deterministic route and policy simulation for validation artifacts.",
            "trustLevels": ["untrusted", "semi-trusted", "trusted"],
            "constraints": [
                "Read-only execution in untrusted contexts.",
                "No secret material in simulation inputs or outputs.",
            ],
        },
    ],
}

VALID_SCOREBOARD: dict[str, Any] = {
    "version": 1,
    "capabilities": [
        {"id": "policy-gate", "description": "Policy gate", "state": "operational"},
        {"id": "parity-report", "description": "Parity report", "state": "scaffold"},
        {"id": "memory", "description": "Memory routing", "state": "spec-only"},
    ],
}

RUNTIME_DIR = Path(".GITHUB-MODE") / "runtime"


def pytest_configure() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_path = str(repo_root / "src")
    if sys.path[:1] != [src_path] and src_path not in sys.path:
        sys.path.insert(0, src_path)


def pytest_collection_modifyitems(
    session: pytest.Session, config: pytest.Config, items: list[pytest.Item]
) -> None:
    """
    Apply a default per-test timeout to non-integration tests.

    This relies on `pytest-timeout` when installed; if it isn't installed, the
    marker is inert but still documents the intent.
    """
    _ = session, config
    for item in items:
        if item.get_closest_marker("integration") is not None:
            continue
        item.add_marker(pytest.mark.timeout(DEFAULT_NON_INTEGRATION_TIMEOUT_SECONDS))


@dataclass(frozen=True)
class GovernanceRoot:
    root: Path

    @property
    def runtime_dir(self) -> Path:
        return self.root / RUNTIME_DIR

    def write_json(self, filename: str, payload: Any) -> Path:
        path = self.runtime_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    def write_text(self, filename: str, text: str) -> Path:
        path = self.runtime_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def remove(self, filename: str) -> None:
        (self.runtime_dir / filename).unlink()


@pytest.fixture()
def valid_documents() -> dict[str, dict[str, Any]]:
    return {
        "command-policy.json": copy.deepcopy(VALID_COMMAND_POLICY),
        "adapter-contracts.json": copy.deepcopy(VALID_ADAPTER_CONTRACTS),
        "implementation-scoreboard.json": copy.deepcopy(VALID_SCOREBOARD),
    }


@pytest.fixture()
def make_governance_root(
    tmp_path: Path,
) -> Callable[[dict[str, Any]], GovernanceRoot]:
    """Build a repo root holding the given runtime documents."""

    counter = {"n": 0}

    def _make(documents: dict[str, Any]) -> GovernanceRoot:
        counter["n"] += 1
        root = tmp_path / f"repo-{counter['n']}"
        (root / RUNTIME_DIR).mkdir(parents=True)
        governance = GovernanceRoot(root=root)
        for filename, payload in documents.items():
            governance.write_json(filename, payload)
        return governance

    return _make


@pytest.fixture()
def governance_root(
    make_governance_root: Callable[[dict[str, Any]], GovernanceRoot],
    valid_documents: dict[str, dict[str, Any]],
) -> GovernanceRoot:
    return make_governance_root(valid_documents)


@pytest.fixture(autouse=True)
def _reset_governance_logging():
    """Drop handlers installed by `setup_logging` so streams don't leak across tests."""
    yield
    root = logging.getLogger("github_mode_governance")
    for handler in list(root.handlers):
        if getattr(handler, "_ghm_governance_handler", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.NOTSET)
