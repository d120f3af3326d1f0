"""Fail-closed policy gate for adapter invocations.

``evaluate`` runs an ordered list of named gates. Each gate either lets the
evaluation continue (returns ``None``) or ends it with a FAIL decision. Only
an evaluation that clears every gate produces PASS, so any missing or
malformed input ends in denial.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Literal, Optional

from .config import ADAPTER_CONTRACTS_PATH, COMMAND_POLICY_PATH, GovernancePaths
from .contracts import (
    UNKNOWN,
    AdapterContract,
    AdapterContractsDocument,
    CommandPolicyDocument,
    find_adapter,
    load_adapter_contracts,
    load_command_policy,
)
from .exceptions import ContractReadError
from .logging_utils import log_event
from .time_utils import utc_timestamp_ms

logger = logging.getLogger("github_mode_governance.core.policy_gate")

GATE_ID = "policy-gated-adapter"
RESULT_PASS = "PASS"
RESULT_FAIL = "FAIL"

DecisionResult = Literal["PASS", "FAIL"]


@dataclass(frozen=True)
class PolicyDecision:
    gate: str
    result: DecisionResult
    adapter: str
    action: str
    reason: str
    evidence: str
    policy_version: str
    enforcement_mode: str
    timestamp: str

    @property
    def passed(self) -> bool:
        return self.result == RESULT_PASS

    def to_dict(self) -> dict[str, Any]:
        return {
            "gate": self.gate,
            "result": self.result,
            "adapter": self.adapter,
            "action": self.action,
            "reason": self.reason,
            "evidence": self.evidence,
            "policyVersion": self.policy_version,
            "enforcementMode": self.enforcement_mode,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class _Evaluation:
    root: Path
    adapter_name: str
    action: str
    command_policy_path: str
    adapter_contracts_path: str
    timestamp: str
    policy: Optional[CommandPolicyDocument] = None
    contracts: Optional[AdapterContractsDocument] = None
    adapters: list[Any] = field(default_factory=list)
    adapter: Optional[AdapterContract] = None
    allowed_actions: list[Any] = field(default_factory=list)

    @property
    def policy_version(self) -> str:
        return self.policy.policy_version if self.policy is not None else UNKNOWN

    @property
    def enforcement_mode(self) -> str:
        return self.policy.enforcement_mode if self.policy is not None else UNKNOWN

    @property
    def policy_file(self) -> str:
        return PurePosixPath(self.command_policy_path).name

    @property
    def contracts_file(self) -> str:
        return PurePosixPath(self.adapter_contracts_path).name

    def decide(self, result: DecisionResult, reason: str, evidence: str) -> PolicyDecision:
        return PolicyDecision(
            gate=GATE_ID,
            result=result,
            adapter=self.adapter_name,
            action=self.action,
            reason=reason,
            evidence=evidence,
            policy_version=self.policy_version,
            enforcement_mode=self.enforcement_mode,
            timestamp=self.timestamp,
        )

    def deny(self, reason: str, evidence: str) -> PolicyDecision:
        return self.decide(RESULT_FAIL, reason, evidence)


GateCheck = Callable[[_Evaluation], Optional[PolicyDecision]]


def _gate_command_policy_readable(ev: _Evaluation) -> Optional[PolicyDecision]:
    try:
        ev.policy = load_command_policy(ev.root, ev.command_policy_path)
    except ContractReadError as exc:
        return ev.deny(
            f"failed to read {ev.policy_file}: {exc.detail}",
            ev.command_policy_path,
        )
    return None


def _gate_enforcement_mode(ev: _Evaluation) -> Optional[PolicyDecision]:
    assert ev.policy is not None
    if ev.policy.is_enforcing:
        return None
    return ev.deny(
        f'command-policy enforcementMode is "{ev.enforcement_mode}", '
        'expected "enforce" - fail-closed denial',
        ev.command_policy_path,
    )


def _gate_adapter_contracts_readable(ev: _Evaluation) -> Optional[PolicyDecision]:
    try:
        ev.contracts = load_adapter_contracts(ev.root, ev.adapter_contracts_path)
    except ContractReadError as exc:
        return ev.deny(
            f"failed to read {ev.contracts_file}: {exc.detail}",
            ev.adapter_contracts_path,
        )
    return None


def _gate_adapters_is_list(ev: _Evaluation) -> Optional[PolicyDecision]:
    assert ev.contracts is not None
    adapters = ev.contracts.adapters
    if adapters is None:
        return ev.deny(
            f"{ev.contracts_file} adapters is not an array - fail-closed denial",
            ev.adapter_contracts_path,
        )
    ev.adapters = adapters
    return None


def _gate_adapter_exists(ev: _Evaluation) -> Optional[PolicyDecision]:
    ev.adapter = find_adapter(ev.adapters, ev.adapter_name)
    if ev.adapter is not None:
        return None
    return ev.deny(
        f'adapter "{ev.adapter_name}" not found in {ev.contracts_file} '
        "- fail-closed denial",
        ev.adapter_contracts_path,
    )


def _gate_adapter_constraints(ev: _Evaluation) -> Optional[PolicyDecision]:
    assert ev.adapter is not None
    if ev.adapter.has_constraints:
        return None
    return ev.deny(
        f'adapter "{ev.adapter_name}" has no constraints defined - fail-closed denial',
        ev.adapter_contracts_path,
    )


def _gate_allowed_actions_is_list(ev: _Evaluation) -> Optional[PolicyDecision]:
    assert ev.policy is not None
    allowed = ev.policy.allowed_actions
    if allowed is None:
        return ev.deny(
            "command-policy allowedActions is not an array - fail-closed denial",
            ev.command_policy_path,
        )
    ev.allowed_actions = allowed
    return None


def _gate_action_allowed(ev: _Evaluation) -> Optional[PolicyDecision]:
    if ev.action in ev.allowed_actions:
        return None
    allowed = ", ".join(str(item) for item in ev.allowed_actions)
    return ev.deny(
        f'action "{ev.action}" is not in allowedActions (allowed: {allowed}) '
        "- policy denial",
        ev.command_policy_path,
    )


GATES: tuple[tuple[str, GateCheck], ...] = (
    ("command_policy_readable", _gate_command_policy_readable),
    ("enforcement_mode", _gate_enforcement_mode),
    ("adapter_contracts_readable", _gate_adapter_contracts_readable),
    ("adapters_is_list", _gate_adapters_is_list),
    ("adapter_exists", _gate_adapter_exists),
    ("adapter_constraints", _gate_adapter_constraints),
    ("allowed_actions_is_list", _gate_allowed_actions_is_list),
    ("action_allowed", _gate_action_allowed),
)


def evaluate(
    root: Path,
    adapter_name: str,
    action: str,
    *,
    paths: Optional[GovernancePaths] = None,
) -> PolicyDecision:
    """Decide whether ``adapter_name`` may perform ``action``.

    Never raises for missing or malformed contract documents; every outcome is
    returned as a complete ``PolicyDecision``.
    """
    ev = _Evaluation(
        root=root,
        adapter_name=adapter_name,
        action=action,
        command_policy_path=paths.command_policy if paths else COMMAND_POLICY_PATH,
        adapter_contracts_path=(
            paths.adapter_contracts if paths else ADAPTER_CONTRACTS_PATH
        ),
        timestamp=utc_timestamp_ms(),
    )
    for gate_name, check in GATES:
        decision = check(ev)
        if decision is None:
            continue
        log_event(
            logger,
            logging.INFO,
            "policy_gate.denied",
            gate=gate_name,
            adapter=adapter_name,
            action=action,
            reason=decision.reason,
        )
        return decision

    decision = ev.decide(
        RESULT_PASS,
        f'adapter "{adapter_name}" with action "{action}" passed policy gate '
        f"(enforcement: {ev.enforcement_mode}, policy: {ev.policy_version})",
        f"{ev.command_policy_path}, {ev.adapter_contracts_path}",
    )
    log_event(
        logger,
        logging.INFO,
        "policy_gate.passed",
        adapter=adapter_name,
        action=action,
        policy_version=ev.policy_version,
    )
    return decision


def render_decision_summary(decision: PolicyDecision) -> str:
    icon = "✅" if decision.passed else "❌"
    lines = [
        "## Policy-Gated Adapter Decision",
        "",
        f"{icon} **Result:** {decision.result}",
        f"- Gate: `{decision.gate}`",
        f"- Adapter: `{decision.adapter}`",
        f"- Action: `{decision.action}`",
        f"- Reason: {decision.reason}",
        f"- Policy Version: `{decision.policy_version}`",
        f"- Enforcement Mode: `{decision.enforcement_mode}`",
        f"- Evidence: {decision.evidence}",
        f"- Timestamp: {decision.timestamp}",
    ]
    return "\n".join(lines)


__all__ = [
    "GATES",
    "GATE_ID",
    "RESULT_FAIL",
    "RESULT_PASS",
    "PolicyDecision",
    "evaluate",
    "render_decision_summary",
]
