"""SARIF Reporter Module - Generate SARIF 2.1.0 reports for code scanning tools."""

import json
from pathlib import Path
from typing import Any, Dict, List

from ..core.aggregator import ScanResult
from ..core.checker import Finding, Severity
from .base_reporter import BaseReporter

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
INFORMATION_URI = "https://github.com/swarmsight/swarmsight"

LEVELS = {
    Severity.CRITICAL: "error",
    Severity.HIGH: "error",
    Severity.MEDIUM: "warning",
    Severity.LOW: "note",
    Severity.INFO: "note",
    Severity.UNKNOWN: "note",
}


class SARIFReporter(BaseReporter):
    """Generate reports in SARIF 2.1.0 format.

    Each result keeps the canonical severity in ``properties.severity`` so the
    five-level scale survives the coarser SARIF ``level``.
    """

    mime_type = "application/sarif+json"

    def __init__(self, indent: int = 2):
        self.indent = indent

    @property
    def format(self) -> str:
        return "sarif"

    @property
    def extension(self) -> str:
        return "sarif"

    def generate(self, result: ScanResult) -> bytes:
        """Generate SARIF report.

        Args:
            result: Scan result to render

        Returns:
            SARIF JSON content as bytes
        """
        document = self._build_document(result)
        return json.dumps(document, indent=self.indent, ensure_ascii=False).encode("utf-8")

    def _build_document(self, result: ScanResult) -> Dict[str, Any]:
        rules: List[Dict[str, Any]] = []
        seen_rules = set()
        results: List[Dict[str, Any]] = []

        for finding in result.findings:
            rule_id = finding.rule_id or "unknown-rule"
            if rule_id not in seen_rules:
                seen_rules.add(rule_id)
                rules.append(self._build_rule(rule_id, finding))
            results.append(self._build_result(rule_id, finding))

        run: Dict[str, Any] = {
            "tool": {
                "driver": {
                    "name": result.metadata.get("tool", "SwarmSight"),
                    "version": result.metadata.get("version", ""),
                    "informationUri": INFORMATION_URI,
                    "rules": rules,
                }
            },
            "results": results,
        }

        project_path = (result.metadata.get("options") or {}).get("project_path")
        if project_path:
            run["originalUriBaseIds"] = {
                "SRCROOT": {"uri": Path(project_path).resolve().as_uri().rstrip("/") + "/"}
            }

        return {"$schema": SARIF_SCHEMA, "version": SARIF_VERSION, "runs": [run]}

    def _build_rule(self, rule_id: str, finding: Finding) -> Dict[str, Any]:
        return {
            "id": rule_id,
            "name": rule_id,
            "shortDescription": {"text": finding.title},
            "fullDescription": {"text": finding.description or finding.title},
            "help": {"text": finding.recommendation or f"This rule is checked by {finding.checker_id}"},
            "properties": {"category": finding.category or "security", "checker": finding.checker_id},
        }

    def _build_result(self, rule_id: str, finding: Finding) -> Dict[str, Any]:
        sarif_result: Dict[str, Any] = {
            "ruleId": rule_id,
            "level": LEVELS[finding.severity],
            "message": {"text": finding.title},
            "locations": [{
                "physicalLocation": {
                    "artifactLocation": {
                        "uri": finding.file_path.replace("\\", "/"),
                        "uriBaseId": "SRCROOT",
                    },
                    "region": {"startLine": finding.line, "startColumn": finding.column},
                }
            }],
            "partialFingerprints": {"swarmsightFindingId": finding.id},
            "properties": {"checker": finding.checker_id, "severity": finding.severity.value},
        }
        if finding.description:
            sarif_result["message"]["markdown"] = finding.description
        return sarif_result


def findings_from_sarif(document: Dict[str, Any]) -> List[Finding]:
    """Read findings back from a SARIF document produced by SARIFReporter.

    Args:
        document: Parsed SARIF JSON

    Returns:
        Findings in document order
    """
    findings: List[Finding] = []
    for run in document.get("runs", []):
        for entry in run.get("results", []):
            properties = entry.get("properties") or {}
            location = (entry.get("locations") or [{}])[0].get("physicalLocation", {})
            region = location.get("region", {})
            message = entry.get("message", {})
            findings.append(Finding(
                id=(entry.get("partialFingerprints") or {}).get("swarmsightFindingId", ""),
                title=message.get("text", ""),
                severity=Severity.parse(properties.get("severity") or entry.get("level")),
                category="",
                checker_id=properties.get("checker", ""),
                file_path=location.get("artifactLocation", {}).get("uri", ""),
                line=region.get("startLine", 1),
                column=region.get("startColumn", 1),
                rule_id=entry.get("ruleId", ""),
                description=message.get("markdown", message.get("text", "")),
            ))
    return findings
