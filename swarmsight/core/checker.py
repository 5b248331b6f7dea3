"""Checker Module - Defines the finding model and the checker interface."""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

if TYPE_CHECKING:
    from .options import ScanOptions


class Severity(Enum):
    """Severity levels for findings."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int:
        """Get ordering rank (higher is more severe)."""
        ranks = {
            Severity.CRITICAL: 4,
            Severity.HIGH: 3,
            Severity.MEDIUM: 2,
            Severity.LOW: 1,
            Severity.INFO: 0,
            Severity.UNKNOWN: -1,
        }
        return ranks[self]

    @property
    def weight(self) -> float:
        """Get score deduction for one finding of this severity."""
        weights = {
            Severity.CRITICAL: 20.0,
            Severity.HIGH: 10.0,
            Severity.MEDIUM: 5.0,
            Severity.LOW: 1.0,
            Severity.INFO: 0.5,
            Severity.UNKNOWN: 0.0,
        }
        return weights[self]

    @property
    def color(self) -> str:
        """Get console color for severity."""
        colors = {
            Severity.CRITICAL: "red",
            Severity.HIGH: "orange1",
            Severity.MEDIUM: "yellow",
            Severity.LOW: "blue",
            Severity.INFO: "dim",
            Severity.UNKNOWN: "magenta",
        }
        return colors[self]

    @classmethod
    def known(cls) -> List["Severity"]:
        """Get the five reportable severities, most severe first."""
        return [cls.CRITICAL, cls.HIGH, cls.MEDIUM, cls.LOW, cls.INFO]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Map a severity string from any tool vocabulary onto the enum.

        Unrecognized or missing values map to UNKNOWN; this never raises.
        """
        if isinstance(value, Severity):
            return value
        if value is None:
            return cls.UNKNOWN
        normalized = str(value).strip().lower()
        aliases = {
            "critical": cls.CRITICAL,
            "blocker": cls.CRITICAL,
            "high": cls.HIGH,
            "error": cls.HIGH,
            "medium": cls.MEDIUM,
            "moderate": cls.MEDIUM,
            "warning": cls.MEDIUM,
            "low": cls.LOW,
            "note": cls.LOW,
            "style": cls.LOW,
            "info": cls.INFO,
            "information": cls.INFO,
            "informational": cls.INFO,
            "optimization": cls.INFO,
            "performance": cls.INFO,
            "portability": cls.INFO,
        }
        return aliases.get(normalized, cls.UNKNOWN)


@dataclass(frozen=True)
class CheckerInfo:
    """Static description of a checker."""
    id: str
    name: str
    language: str
    category: str
    severity: Severity = Severity.MEDIUM
    analyzer_type: str = "static"
    description: str = ""
    website: Optional[str] = None
    install_hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert checker info to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "category": self.category,
            "severity": self.severity.value,
            "analyzer_type": self.analyzer_type,
            "description": self.description,
            "website": self.website,
            "install_hint": self.install_hint,
        }


def generate_finding_id(checker_id: str, *components: Any) -> str:
    """Generate a deterministic finding ID.

    Args:
        checker_id: Checker that produced the finding
        *components: Location parts to hash

    Returns:
        Finding ID such as ``RUDRA-1f2e3d4c5b6a``
    """
    combined = "|".join(str(c) for c in components if c is not None)
    hash_value = hashlib.md5(combined.encode()).hexdigest()[:12]
    return f"{checker_id.upper()}-{hash_value}"


@dataclass(frozen=True)
class Finding:
    """A single detected issue. Immutable once produced."""
    id: str
    title: str
    severity: Severity
    category: str
    checker_id: str
    file_path: str
    line: int = 1
    column: int = 1
    rule_id: str = ""
    description: str = ""
    recommendation: str = ""
    code_snippet: Optional[str] = None
    confidence: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "severity": self.severity.value,
            "category": self.category,
            "checker": self.checker_id,
            "file": self.file_path,
            "line": self.line,
            "column": self.column,
            "rule": self.rule_id,
            "description": self.description,
            "recommendation": self.recommendation,
            "code_snippet": self.code_snippet,
            "confidence": self.confidence,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        """Create finding from the dictionary produced by ``to_dict``."""
        return cls(
            id=data["id"],
            title=data["title"],
            severity=Severity.parse(data.get("severity")),
            category=data.get("category", ""),
            checker_id=data.get("checker", ""),
            file_path=data.get("file", ""),
            line=int(data.get("line") or 1),
            column=int(data.get("column") or 1),
            rule_id=data.get("rule", ""),
            description=data.get("description", ""),
            recommendation=data.get("recommendation", ""),
            code_snippet=data.get("code_snippet"),
            confidence=data.get("confidence"),
            metadata=data.get("metadata") or {},
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any], info: CheckerInfo) -> "Finding":
        """Normalize a heterogeneous tool record into a Finding.

        External tools disagree on key names (``message`` vs ``title``,
        ``file`` vs ``path``, ``rule`` vs ``check``); missing fields fall back
        to the checker's defaults.

        Args:
            record: Raw record produced by a tool output parser
            info: Checker that owns the record

        Returns:
            Canonical Finding
        """
        def first(*keys: str, default: Any = None) -> Any:
            for key in keys:
                value = record.get(key)
                if value not in (None, ""):
                    return value
            return default

        raw_severity = first("severity", "level", "impact")
        severity = Severity.parse(raw_severity) if raw_severity is not None else info.severity
        title = str(first("title", "message", "description", default=f"{info.name} finding"))
        rule_id = str(first("rule", "rule_id", "ruleId", "check", default=f"{info.id}-finding"))
        file_path = str(first("file", "file_path", "path", default=""))
        line = _positive_int(first("line", "startLine", "line_number"))
        column = _positive_int(first("column", "startColumn", "col"))

        metadata: Dict[str, Any] = dict(record.get("metadata") or {})
        if severity is Severity.UNKNOWN and raw_severity is not None:
            metadata["raw_severity"] = str(raw_severity)

        return cls(
            id=str(first("id", default=generate_finding_id(info.id, rule_id, file_path, line, column))),
            title=title,
            severity=severity,
            category=str(first("category", default=info.category)),
            checker_id=info.id,
            file_path=file_path,
            line=line,
            column=column,
            rule_id=rule_id,
            description=str(first("description", "message", default=title)),
            recommendation=str(first("recommendation", "remediation", default="")),
            code_snippet=first("code_snippet", "codeSnippet"),
            confidence=first("confidence"),
            metadata=metadata,
        )


def _positive_int(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 1
    return number if number > 0 else 1


@dataclass
class CheckerResult:
    """Findings batch produced by one checker run."""
    checker_id: str
    checker_name: str
    language: str
    findings: List[Finding] = field(default_factory=list)
    success: bool = True
    error_message: Optional[str] = None
    timed_out: bool = False
    warnings: List[str] = field(default_factory=list)
    files_scanned: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_ms: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def finding_count(self) -> int:
        """Get total number of findings."""
        return len(self.findings)

    @property
    def status(self) -> str:
        """Get short status label for the run table."""
        if self.timed_out:
            return "timeout"
        if not self.success:
            return "failed"
        if self.metadata.get("unavailable"):
            return "unavailable"
        if self.metadata.get("fallback"):
            return "fallback"
        return "ok"

    def to_dict(self) -> Dict[str, Any]:
        """Convert checker result to dictionary."""
        return {
            "checker": self.checker_id,
            "name": self.checker_name,
            "language": self.language,
            "status": self.status,
            "finding_count": self.finding_count,
            "files_scanned": self.files_scanned,
            "success": self.success,
            "error_message": self.error_message,
            "timed_out": self.timed_out,
            "warnings": list(self.warnings),
            "duration_ms": self.duration_ms,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "metadata": self.metadata,
        }


class Checker(ABC):
    """Interface implemented by every checker variant."""

    def __init__(self, info: CheckerInfo):
        """Initialize the checker.

        Args:
            info: Static description of the checker
        """
        self.info = info

    @property
    def id(self) -> str:
        return self.info.id

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def language(self) -> str:
        return self.info.language

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the checker can run. Must be cheap and side-effect free."""

    @abstractmethod
    async def scan(self, project_path: str | Path, options: "ScanOptions") -> CheckerResult:
        """Scan a project.

        Args:
            project_path: Project root (or a single file)
            options: Scan configuration

        Returns:
            CheckerResult containing the findings batch
        """

    def _create_result(self, started_at: datetime) -> CheckerResult:
        """Create an empty result for this checker."""
        return CheckerResult(
            checker_id=self.info.id,
            checker_name=self.info.name,
            language=self.info.language,
            started_at=started_at,
        )

    def _complete_result(
        self,
        result: CheckerResult,
        started_at: datetime,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> CheckerResult:
        """Complete a result with timing info.

        Args:
            result: The result to complete
            started_at: When the scan started
            success: Whether the scan succeeded
            error_message: Error message if failed

        Returns:
            Updated CheckerResult
        """
        completed_at = datetime.now()
        result.completed_at = completed_at
        result.duration_ms = int((completed_at - started_at).total_seconds() * 1000)
        result.success = success
        result.error_message = error_message
        if not success:
            result.findings = []
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.info.id!r}, language={self.info.language!r})"
