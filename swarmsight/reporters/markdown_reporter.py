"""Markdown Reporter Module - Generate Markdown reports for pull requests and wikis."""

from typing import List

from ..core.aggregator import ScanResult
from ..core.checker import Finding, Severity
from .base_reporter import BaseReporter, sort_by_severity

SEVERITY_ICONS = {
    Severity.CRITICAL: "🚨",
    Severity.HIGH: "⚠️",
    Severity.MEDIUM: "⚡",
    Severity.LOW: "💡",
    Severity.INFO: "ℹ️",
    Severity.UNKNOWN: "❔",
}


class MarkdownReporter(BaseReporter):
    """Generate reports in Markdown format."""

    mime_type = "text/markdown"

    @property
    def format(self) -> str:
        return "markdown"

    @property
    def extension(self) -> str:
        return "md"

    def generate(self, result: ScanResult) -> bytes:
        """Generate Markdown report.

        Args:
            result: Scan result to render

        Returns:
            Markdown content as bytes
        """
        metadata = result.metadata
        summary = result.summary
        options = metadata.get("options") or {}
        checkers = options.get("checkers", "all")
        if isinstance(checkers, list):
            checkers = ", ".join(checkers)

        lines: List[str] = [
            "# 🔍 SwarmSight Security Report",
            "",
            "## 📊 Scan Information",
            f"- **Project:** {metadata.get('project_name', '')}",
            f"- **Scan Date:** {metadata.get('timestamp', '')}",
            f"- **Version:** {metadata.get('version', '')}",
            f"- **Languages:** {', '.join(metadata.get('languages', [])) or 'none detected'}",
            f"- **Checkers:** {checkers}",
            "",
            "## 📈 Summary",
            f"- **Risk Score:** {result.score}/100 ({result.rating})",
            f"- **Total Issues:** {summary.total}",
            f"- **Critical:** {summary.critical}",
            f"- **High:** {summary.high}",
            f"- **Medium:** {summary.medium}",
            f"- **Low:** {summary.low}",
            f"- **Info:** {summary.info}",
        ]
        if summary.unknown:
            lines.append(f"- **Unknown:** {summary.unknown}")

        runs = metadata.get("checkers") or []
        if runs:
            lines += ["", "## 🧰 Checkers", "", "| Checker | Language | Status | Findings |", "|---|---|---|---|"]
            for run in runs:
                lines.append(
                    f"| {run.get('name', run.get('checker'))} | {run.get('language', '')} "
                    f"| {run.get('status', '')} | {run.get('finding_count', 0)} |"
                )

        lines += ["", "## 🔍 Findings", ""]
        if not result.findings:
            lines += ["No findings.", ""]
        for finding in sort_by_severity(list(result.findings)):
            lines += self._finding_section(finding)

        return "\n".join(lines).encode("utf-8")

    def _finding_section(self, finding: Finding) -> List[str]:
        section = [
            f"### {SEVERITY_ICONS[finding.severity]} {finding.title}",
            "",
            f"- **Severity:** {finding.severity.value.upper()}",
            f"- **File:** `{finding.file_path}`",
            f"- **Line:** {finding.line}",
            f"- **Checker:** {finding.checker_id}",
            f"- **Rule:** {finding.rule_id}",
            "",
            f"**Description:** {finding.description}",
            "",
        ]
        if finding.recommendation:
            section += [f"**Recommendation:** {finding.recommendation}", ""]
        if finding.code_snippet:
            section += ["**Code Snippet:**", "```", finding.code_snippet, "```", ""]
        section += ["---", ""]
        return section
