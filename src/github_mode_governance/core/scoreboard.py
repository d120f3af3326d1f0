from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

from .exceptions import ScoreboardError, ScoreboardValidationError
from .logging_utils import log_event
from .utils import atomic_write

logger = logging.getLogger("github_mode_governance.core.scoreboard")

STATE_SPEC_ONLY = "spec-only"
STATE_SCAFFOLD = "scaffold"
STATE_OPERATIONAL = "operational"

STATE_ORDER: tuple[str, ...] = (
    STATE_SPEC_ONLY,
    STATE_SCAFFOLD,
    STATE_OPERATIONAL,
)

SCOREBOARD_FILENAME = "implementation-scoreboard.json"

# Fixed so regenerated reports only differ when the scoreboard does.
PARITY_REPORT_GENERATED_AT = "1970-01-01T00:00:00.000Z"

REPORT_FORMAT_JSON = "json"
REPORT_FORMAT_MARKDOWN = "markdown"
REPORT_FORMATS: tuple[str, ...] = (REPORT_FORMAT_JSON, REPORT_FORMAT_MARKDOWN)

ReportFormat = Literal["json", "markdown"]


@dataclass(frozen=True)
class Capability:
    id: str
    description: str
    state: str
    evidence: Optional[tuple[str, ...]] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Capability":
        if not isinstance(raw, Mapping):
            return cls(id="", description="", state="")
        evidence_raw = raw.get("evidence")
        evidence = (
            tuple(str(item) for item in evidence_raw)
            if isinstance(evidence_raw, list)
            else None
        )
        return cls(
            id=_text(raw.get("id")),
            description=_text(raw.get("description")),
            state=_text(raw.get("state")),
            evidence=evidence,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "state": self.state,
        }
        if self.evidence is not None:
            payload["evidence"] = list(self.evidence)
        return payload


@dataclass(frozen=True)
class Scoreboard:
    version: int
    capabilities: Optional[tuple[Capability, ...]]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Scoreboard":
        version = raw.get("version")
        capabilities_raw = raw.get("capabilities")
        return cls(
            version=(
                version
                if isinstance(version, int) and not isinstance(version, bool)
                else 0
            ),
            capabilities=(
                tuple(Capability.from_raw(item) for item in capabilities_raw)
                if isinstance(capabilities_raw, list)
                else None
            ),
        )

    @property
    def entries(self) -> tuple[Capability, ...]:
        return self.capabilities or ()


@dataclass(frozen=True)
class ParityReport:
    generated_at: str
    scoreboard_version: int
    summary: str
    counts: dict[str, int]
    total_capabilities: int
    capabilities: tuple[Capability, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "scoreboardVersion": self.scoreboard_version,
            "summary": self.summary,
            "counts": dict(self.counts),
            "totalCapabilities": self.total_capabilities,
            "capabilities": [capability.to_dict() for capability in self.capabilities],
        }


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def load_scoreboard(path: Path) -> Scoreboard:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        raise ScoreboardError(f"Failed to read scoreboard {path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise ScoreboardError(f"Invalid JSON in scoreboard {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ScoreboardError(f"Scoreboard must be a JSON object: {path}")
    return Scoreboard.from_raw(payload)


def validate_scoreboard(
    scoreboard: Scoreboard, *, source_name: str = SCOREBOARD_FILENAME
) -> None:
    """Raise ``ScoreboardValidationError`` on the first structural problem.

    ``source_name`` is the scoreboard file name used in error messages.
    """
    if not scoreboard.capabilities:
        raise ScoreboardValidationError(
            f"{source_name} must contain at least one capability."
        )

    seen: set[str] = set()
    for capability in scoreboard.capabilities:
        if not capability.id or not capability.description:
            raise ScoreboardValidationError(
                "Each capability requires non-empty id and description fields."
            )
        if capability.id in seen:
            raise ScoreboardValidationError(
                f"Duplicate capability id found: {capability.id}"
            )
        seen.add(capability.id)

        if capability.state not in STATE_ORDER:
            raise ScoreboardValidationError(
                f'Capability {capability.id} has invalid state "{capability.state}". '
                f"Expected one of: {', '.join(STATE_ORDER)}."
            )


def get_score_counts(scoreboard: Scoreboard) -> dict[str, int]:
    counts = {state: 0 for state in STATE_ORDER}
    for capability in scoreboard.entries:
        if capability.state in counts:
            counts[capability.state] += 1
    return counts


def render_summary_markdown(scoreboard: Scoreboard) -> str:
    counts = get_score_counts(scoreboard)
    total = len(scoreboard.entries)
    return "\n".join(
        [
            f"- Capabilities tracked: **{total}**",
            f"- Operational: **{counts[STATE_OPERATIONAL]}**",
            f"- Scaffold: **{counts[STATE_SCAFFOLD]}**",
            f"- Spec-only: **{counts[STATE_SPEC_ONLY]}**",
            "- Implementation ratio (operational/total): "
            f"**{counts[STATE_OPERATIONAL]}/{total}**",
        ]
    )


def build_parity_report(scoreboard: Scoreboard) -> ParityReport:
    return ParityReport(
        generated_at=PARITY_REPORT_GENERATED_AT,
        scoreboard_version=scoreboard.version,
        summary=render_summary_markdown(scoreboard),
        counts=get_score_counts(scoreboard),
        total_capabilities=len(scoreboard.entries),
        capabilities=tuple(sorted(scoreboard.entries, key=lambda item: item.id)),
    )


def render_parity_report_markdown(scoreboard: Scoreboard) -> str:
    report = build_parity_report(scoreboard)
    lines = [
        "# GitHub Mode Parity Report",
        "",
        f"Generated at: {report.generated_at}",
        f"Scoreboard version: {report.scoreboard_version}",
        "",
        "## Summary",
        report.summary,
        "",
        "## Capabilities",
        "| ID | State | Description |",
        "| --- | --- | --- |",
    ]
    lines.extend(
        f"| {capability.id} | {capability.state} | {capability.description} |"
        for capability in report.capabilities
    )
    return "\n".join(lines)


def render_parity_report(scoreboard: Scoreboard, report_format: ReportFormat) -> str:
    if report_format == REPORT_FORMAT_JSON:
        return json.dumps(build_parity_report(scoreboard).to_dict(), indent=2) + "\n"
    if report_format == REPORT_FORMAT_MARKDOWN:
        return render_parity_report_markdown(scoreboard) + "\n"
    raise ValueError(f"unsupported report format: {report_format}")


def write_parity_report(
    scoreboard: Scoreboard, output_path: Path, report_format: ReportFormat
) -> None:
    atomic_write(output_path, render_parity_report(scoreboard, report_format))
    log_event(
        logger,
        logging.INFO,
        "scoreboard.report_written",
        path=str(output_path),
        format=report_format,
    )


__all__ = [
    "PARITY_REPORT_GENERATED_AT",
    "REPORT_FORMATS",
    "REPORT_FORMAT_JSON",
    "REPORT_FORMAT_MARKDOWN",
    "STATE_OPERATIONAL",
    "STATE_ORDER",
    "STATE_SCAFFOLD",
    "SCOREBOARD_FILENAME",
    "STATE_SPEC_ONLY",
    "Capability",
    "ParityReport",
    "Scoreboard",
    "build_parity_report",
    "get_score_counts",
    "load_scoreboard",
    "render_parity_report",
    "render_parity_report_markdown",
    "render_summary_markdown",
    "validate_scoreboard",
    "write_parity_report",
]
