"""Aggregator Module - Merges checker batches into one frozen scan result."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .. import TOOL_NAME, __version__
from .checker import CheckerResult, Finding, Severity
from .options import ScanOptions
from .scorer import RiskScore, Scorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanSummary:
    """Finding counts per severity."""
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    unknown: int = 0
    total: int = 0

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> "ScanSummary":
        """Tally findings by severity. Every finding counts toward ``total``."""
        counts = {severity: 0 for severity in Severity}
        total = 0
        for finding in findings:
            counts[finding.severity] += 1
            total += 1
        return cls(
            critical=counts[Severity.CRITICAL],
            high=counts[Severity.HIGH],
            medium=counts[Severity.MEDIUM],
            low=counts[Severity.LOW],
            info=counts[Severity.INFO],
            unknown=counts[Severity.UNKNOWN],
            total=total,
        )

    def count(self, severity: Severity) -> int:
        """Get the count for one severity."""
        return getattr(self, severity.value)

    def counts(self) -> Dict[Severity, int]:
        """Get counts keyed by severity."""
        return {severity: self.count(severity) for severity in Severity}

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "info": self.info,
            "unknown": self.unknown,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScanSummary":
        """Create summary from dictionary."""
        return cls(**{key: int(data.get(key, 0)) for key in cls.__dataclass_fields__})


@dataclass(frozen=True)
class ScanResult:
    """Complete, frozen result of one scan.

    ``metadata`` is a read-only mapping view; ``to_dict`` returns a plain copy.
    """
    metadata: Mapping[str, Any]
    summary: ScanSummary
    findings: Tuple[Finding, ...] = ()
    risk: RiskScore = field(default_factory=lambda: RiskScore(score=100, rating="Excellent"))

    @property
    def score(self) -> int:
        return self.risk.score

    @property
    def rating(self) -> str:
        return self.risk.rating

    @property
    def errors(self) -> List[Dict[str, Any]]:
        """Get checker-level errors recorded during the scan."""
        return list(self.metadata.get("errors", []))

    def findings_at_or_above(self, severity: Severity) -> List[Finding]:
        """Get findings whose severity ranks at or above ``severity``."""
        return [f for f in self.findings if f.severity.rank >= severity.rank]

    def should_fail(self, fail_on: Severity) -> bool:
        """Whether any finding meets the fail-on threshold."""
        return bool(self.findings_at_or_above(fail_on))

    def to_dict(self) -> Dict[str, Any]:
        """Convert scan result to dictionary."""
        return {
            "metadata": dict(self.metadata),
            "summary": self.summary.to_dict(),
            "score": self.risk.to_dict(),
            "findings": [f.to_dict() for f in self.findings],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanResult":
        """Create scan result from dictionary."""
        return cls(
            metadata=MappingProxyType(dict(data.get("metadata", {}))),
            summary=ScanSummary.from_dict(data.get("summary", {})),
            findings=tuple(Finding.from_dict(f) for f in data.get("findings", [])),
            risk=RiskScore.from_dict(data["score"]) if data.get("score") else RiskScore(100, "Excellent"),
        )


class Aggregator:
    """Merges per-checker batches, tallies severities and scores the scan.

    Merge is single-threaded and runs after every checker has finished.
    Batches are concatenated in dispatch order; there is no cross-checker
    deduplication, so two checkers flagging the same line both report.
    """

    def __init__(self, scorer: Optional[Scorer] = None):
        """Initialize the aggregator.

        Args:
            scorer: Score calculator (default: Scorer())
        """
        self.scorer = scorer or Scorer()

    def merge(self, results: Sequence[CheckerResult], severity_floor: Severity = Severity.INFO) -> List[Finding]:
        """Concatenate findings in dispatch order, applying the severity floor.

        Findings with UNKNOWN severity are kept regardless of the floor.
        """
        merged: List[Finding] = []
        for result in results:
            for finding in result.findings:
                if finding.severity is Severity.UNKNOWN or finding.severity.rank >= severity_floor.rank:
                    merged.append(finding)
        return merged

    def aggregate(
        self,
        results: Sequence[CheckerResult],
        options: ScanOptions,
        languages: Iterable[str] = (),
        started_at: Optional[datetime] = None,
        extra_metadata: Optional[Dict[str, Any]] = None,
    ) -> ScanResult:
        """Build the frozen ScanResult.

        Args:
            results: Checker results in dispatch order
            options: Scan configuration (echoed into metadata)
            languages: Languages detected in the project
            started_at: When the scan started
            extra_metadata: Additional metadata entries

        Returns:
            Fully populated ScanResult
        """
        findings = self.merge(results, options.severity_floor)
        summary = ScanSummary.from_findings(findings)
        risk = self.scorer.calculate(summary.counts())

        errors = [
            {"checker": r.checker_id, "error": r.error_message, "timed_out": r.timed_out}
            for r in results
            if not r.success
        ]

        metadata: Dict[str, Any] = {
            "tool": TOOL_NAME,
            "version": __version__,
            "timestamp": (started_at or datetime.now(timezone.utc)).isoformat(),
            "project_name": _project_name(options.project_path),
            "options": options.to_dict(),
            "languages": sorted(languages),
            "checkers": [r.to_dict() for r in results],
            "errors": errors,
        }
        if extra_metadata:
            metadata.update(extra_metadata)

        logger.info(
            "Aggregated %d findings from %d checkers (score %d, %s)",
            summary.total, len(results), risk.score, risk.rating,
        )

        return ScanResult(
            metadata=MappingProxyType(metadata),
            summary=summary,
            findings=tuple(findings),
            risk=risk,
        )


def _project_name(project_path: str) -> str:
    return Path(project_path).name or project_path
