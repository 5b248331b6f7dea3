"""Base Reporter Module - Abstract base class for report formatters."""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..core.aggregator import ScanResult
from ..core.checker import Finding, Severity


class BaseReporter(ABC):
    """Abstract base class for report formatters.

    A reporter turns a frozen ScanResult into bytes. It never mutates the
    result and performs no I/O in ``generate``.
    """

    mime_type = "text/plain"

    @property
    @abstractmethod
    def format(self) -> str:
        """Report format identifier (e.g., 'json', 'sarif', 'html')."""
        pass

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension for the report format."""
        pass

    @abstractmethod
    def generate(self, result: ScanResult) -> bytes:
        """Generate the report content.

        Args:
            result: Scan result to render

        Returns:
            Report content as bytes
        """
        pass

    def generate_filename(
        self,
        project_name: str,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Generate a filename for the report.

        Args:
            project_name: Name of the project
            timestamp: Timestamp for the report (default: now)

        Returns:
            Generated filename
        """
        ts = timestamp or datetime.now()
        ts_str = ts.strftime("%Y%m%d_%H%M%S")
        safe_name = "".join(c if c.isalnum() else "_" for c in project_name)
        return f"swarmsight_report_{safe_name}_{ts_str}.{self.extension}"

    def save(
        self,
        result: ScanResult,
        output_path: Optional[str] = None,
        output_dir: Optional[str] = None,
    ) -> str:
        """Generate and save the report to a file.

        Args:
            result: Scan result to render
            output_path: Destination file (default: auto-generated name in ``output_dir``)
            output_dir: Directory for auto-generated names (default: current directory)

        Returns:
            Path to the saved report
        """
        content = self.generate(result)

        if output_path:
            path = Path(output_path)
        else:
            directory = Path(output_dir) if output_dir else Path.cwd()
            path = directory / self.generate_filename(result.metadata.get("project_name", "project"))

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(content)

        return str(path)


def sort_by_severity(findings: List[Finding]) -> List[Finding]:
    """Sort findings most severe first, keeping input order within a severity."""
    return sorted(findings, key=lambda f: -f.severity.rank)


def group_by_severity(findings: List[Finding]) -> Dict[Severity, List[Finding]]:
    """Group findings by severity, most severe first."""
    groups: Dict[Severity, List[Finding]] = {}
    for finding in sort_by_severity(findings):
        groups.setdefault(finding.severity, []).append(finding)
    return groups
