"""HTML Reporter Module - Generate self-contained HTML reports."""

from html import escape
from typing import Any, Dict

from ..core.aggregator import ScanResult
from ..core.checker import Finding, Severity
from .base_reporter import BaseReporter, sort_by_severity


class HTMLReporter(BaseReporter):
    """Generate reports in HTML format with inline styles."""

    mime_type = "text/html"

    def __init__(self, include_styles: bool = True):
        """Initialize the HTML reporter.

        Args:
            include_styles: Embed the stylesheet in the document
        """
        self.include_styles = include_styles

    @property
    def format(self) -> str:
        return "html"

    @property
    def extension(self) -> str:
        return "html"

    def generate(self, result: ScanResult) -> bytes:
        return self._build_html(result).encode("utf-8")

    def _build_html(self, result: ScanResult) -> str:
        """Build the complete HTML document."""
        styles = self._get_styles() if self.include_styles else ""
        metadata = result.metadata
        summary = result.summary
        project_name = escape(str(metadata.get("project_name", "")))

        summary_cards = "".join(
            f'<div class="count {s.value}"><span>{summary.count(s)}</span>{s.value.title()}</div>'
            for s in Severity.known()
        )
        if summary.unknown:
            summary_cards += f'<div class="count unknown"><span>{summary.unknown}</span>Unknown</div>'

        checker_rows = "".join(self._build_checker_row(run) for run in metadata.get("checkers", []))
        findings = sort_by_severity(list(result.findings))
        finding_rows = "".join(self._build_finding_row(f) for f in findings)
        if not finding_rows:
            finding_rows = '<tr><td colspan="5" class="empty">No findings</td></tr>'

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>SwarmSight Security Report - {project_name}</title>
    {styles}
</head>
<body>
    <div class="container">
        <header class="header">
            <h1>SwarmSight Security Report</h1>
            <p class="subtitle">{project_name}</p>
            <p class="timestamp">Generated: {escape(str(metadata.get("timestamp", "")))}</p>
        </header>

        <section class="summary">
            <div class="score-card rating-{escape(result.rating.lower())}">
                <div class="score-value">{result.score}</div>
                <div class="score-label">Risk Score</div>
                <div class="score-rating">{escape(result.rating)}</div>
            </div>
            <div class="counts">{summary_cards}</div>
            <p>Total findings: <strong>{summary.total}</strong></p>
        </section>

        <section>
            <h2>Checkers</h2>
            <table>
                <thead><tr><th>Checker</th><th>Language</th><th>Status</th><th>Findings</th><th>Duration</th></tr></thead>
                <tbody>{checker_rows}</tbody>
            </table>
        </section>

        <section>
            <h2>Findings</h2>
            <table>
                <thead><tr><th>Severity</th><th>Finding</th><th>Location</th><th>Checker</th><th>Rule</th></tr></thead>
                <tbody>{finding_rows}</tbody>
            </table>
        </section>
    </div>
</body>
</html>"""

    def _build_checker_row(self, run: Dict[str, Any]) -> str:
        return f"""
                <tr class="status-{escape(str(run.get("status", "")))}">
                    <td>{escape(str(run.get("name", run.get("checker", ""))))}</td>
                    <td>{escape(str(run.get("language", "")))}</td>
                    <td>{escape(str(run.get("status", "")))}</td>
                    <td>{run.get("finding_count", 0)}</td>
                    <td>{run.get("duration_ms", 0)} ms</td>
                </tr>"""

    def _build_finding_row(self, finding: Finding) -> str:
        """Build an HTML table row for a finding."""
        severity = finding.severity.value
        snippet = f"<pre>{escape(finding.code_snippet)}</pre>" if finding.code_snippet else ""
        fix = (
            f'<div class="recommendation"><strong>Fix:</strong> {escape(finding.recommendation)}</div>'
            if finding.recommendation else ""
        )
        return f"""
                <tr class="finding severity-{severity}">
                    <td><span class="badge {severity}">{severity.upper()}</span></td>
                    <td>
                        <div class="title">{escape(finding.title)}</div>
                        <div class="description">{escape(finding.description)}</div>
                        {fix}
                        {snippet}
                    </td>
                    <td class="file-path">{escape(finding.file_path)}:{finding.line}:{finding.column}</td>
                    <td>{escape(finding.checker_id)}</td>
                    <td>{escape(finding.rule_id)}</td>
                </tr>"""

    def _get_styles(self) -> str:
        return """<style>
        body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; margin: 0; background: #f5f6fa; color: #2d3436; }
        .container { max-width: 1200px; margin: 0 auto; padding: 24px; }
        .header { border-bottom: 2px solid #dfe6e9; margin-bottom: 24px; }
        .subtitle { font-size: 1.2em; margin: 4px 0; }
        .timestamp { color: #636e72; }
        .summary { display: flex; gap: 24px; align-items: center; flex-wrap: wrap; margin-bottom: 24px; }
        .score-card { background: #fff; border-radius: 8px; padding: 16px 32px; text-align: center; box-shadow: 0 1px 3px rgba(0,0,0,.1); }
        .score-value { font-size: 3em; font-weight: bold; }
        .rating-excellent .score-value, .rating-good .score-value { color: #00b894; }
        .rating-fair .score-value { color: #fdcb6e; }
        .rating-poor .score-value { color: #e17055; }
        .rating-critical .score-value { color: #d63031; }
        .counts { display: flex; gap: 12px; }
        .count { background: #fff; border-radius: 6px; padding: 8px 16px; text-align: center; }
        .count span { display: block; font-size: 1.6em; font-weight: bold; }
        table { width: 100%; border-collapse: collapse; background: #fff; margin-bottom: 24px; }
        th, td { padding: 8px 12px; border-bottom: 1px solid #dfe6e9; text-align: left; vertical-align: top; }
        th { background: #2d3436; color: #fff; }
        .badge { border-radius: 4px; padding: 2px 8px; color: #fff; font-size: .8em; font-weight: bold; }
        .badge.critical { background: #d63031; }
        .badge.high { background: #e17055; }
        .badge.medium { background: #fdcb6e; color: #2d3436; }
        .badge.low { background: #0984e3; }
        .badge.info { background: #636e72; }
        .badge.unknown { background: #6c5ce7; }
        .title { font-weight: bold; }
        .description, .recommendation { margin-top: 4px; }
        .file-path { font-family: monospace; }
        pre { background: #f1f2f6; padding: 6px; overflow-x: auto; }
        .empty { text-align: center; color: #636e72; }
    </style>"""
