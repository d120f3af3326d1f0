"""Read-only access to the command policy and adapter contract documents.

Both documents are parsed fresh on every call. Accessors never trust the
shape of the JSON: a field with the wrong type reads as missing, and the
decision engine treats missing as denial.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .config import ADAPTER_CONTRACTS_PATH, COMMAND_POLICY_PATH
from .exceptions import ContractReadError
from .logging_utils import log_event

logger = logging.getLogger("github_mode_governance.core.contracts")

UNKNOWN = "unknown"


def read_json_document(root: Path, relative_path: str) -> dict[str, Any]:
    full_path = root / relative_path
    try:
        text = full_path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        log_event(
            logger,
            logging.DEBUG,
            "contracts.read_failed",
            path=relative_path,
            exc=exc,
        )
        raise ContractReadError(relative_path, str(exc)) from exc
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as exc:
        log_event(
            logger,
            logging.DEBUG,
            "contracts.parse_failed",
            path=relative_path,
            exc=exc,
        )
        raise ContractReadError(relative_path, f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ContractReadError(
            relative_path,
            f"expected a JSON object, got {type(payload).__name__}",
        )
    return payload


@dataclass(frozen=True)
class CommandPolicyDocument:
    raw: Mapping[str, Any]

    @property
    def policy_version(self) -> str:
        value = self.raw.get("policyVersion")
        return value if isinstance(value, str) else UNKNOWN

    @property
    def enforcement_mode(self) -> str:
        value = self.raw.get("enforcementMode")
        return value if isinstance(value, str) else UNKNOWN

    @property
    def is_enforcing(self) -> bool:
        return self.raw.get("enforcementMode") == "enforce"

    @property
    def allowed_actions(self) -> Optional[list[Any]]:
        value = self.raw.get("allowedActions")
        return value if isinstance(value, list) else None

    @property
    def constraints(self) -> list[str]:
        value = self.raw.get("constraints")
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]


@dataclass(frozen=True)
class AdapterContract:
    name: str
    capability: str
    trust_levels: tuple[str, ...]
    constraints: Optional[tuple[Any, ...]]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "AdapterContract":
        capability = raw.get("capability")
        trust_levels = raw.get("trustLevels")
        constraints = raw.get("constraints")
        return cls(
            name=str(raw.get("name")),
            capability=capability if isinstance(capability, str) else "",
            trust_levels=(
                tuple(str(level) for level in trust_levels)
                if isinstance(trust_levels, list)
                else ()
            ),
            constraints=tuple(constraints) if isinstance(constraints, list) else None,
        )

    @property
    def has_constraints(self) -> bool:
        return bool(self.constraints)


@dataclass(frozen=True)
class AdapterContractsDocument:
    raw: Mapping[str, Any]

    @property
    def contracts_version(self) -> str:
        value = self.raw.get("contractsVersion")
        return value if isinstance(value, str) else UNKNOWN

    @property
    def adapters(self) -> Optional[list[Any]]:
        value = self.raw.get("adapters")
        return value if isinstance(value, list) else None


def find_adapter(adapters: Sequence[Any], name: str) -> Optional[AdapterContract]:
    """Return the first adapter entry named ``name``.

    Duplicate names are tolerated; later entries are shadowed.
    """
    for entry in adapters:
        if isinstance(entry, Mapping) and entry.get("name") == name:
            return AdapterContract.from_raw(entry)
    return None


def load_command_policy(
    root: Path, path: str = COMMAND_POLICY_PATH
) -> CommandPolicyDocument:
    return CommandPolicyDocument(raw=read_json_document(root, path))


def load_adapter_contracts(
    root: Path, path: str = ADAPTER_CONTRACTS_PATH
) -> AdapterContractsDocument:
    return AdapterContractsDocument(raw=read_json_document(root, path))


__all__ = [
    "UNKNOWN",
    "AdapterContract",
    "AdapterContractsDocument",
    "CommandPolicyDocument",
    "find_adapter",
    "load_adapter_contracts",
    "load_command_policy",
    "read_json_document",
]
