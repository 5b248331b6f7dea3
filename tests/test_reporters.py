"""Tests for report formatters."""

import csv
import io
import json
import tempfile
from pathlib import Path

import pytest

from swarmsight.core.aggregator import Aggregator, ScanResult
from swarmsight.core.checker import CheckerResult, Finding, Severity, generate_finding_id
from swarmsight.core.options import ScanOptions, UnsupportedFormatError
from swarmsight.reporters import (
    CSVReporter,
    HTMLReporter,
    JSONReporter,
    MarkdownReporter,
    ReportGenerator,
    SARIFReporter,
    get_reporter,
)
from swarmsight.reporters.base_reporter import sort_by_severity
from swarmsight.reporters.sarif_reporter import findings_from_sarif


def make_finding(severity: Severity, line: int, rule_id: str, **kwargs) -> Finding:
    return Finding(
        id=generate_finding_id("rudra", rule_id, "src/main.rs", line, 5),
        title=kwargs.pop("title", f"{rule_id} detected"),
        severity=severity,
        category="memory-safety",
        checker_id="rudra",
        file_path="src/main.rs",
        line=line,
        column=5,
        rule_id=rule_id,
        description=kwargs.pop("description", f"{rule_id} in main.rs"),
        recommendation=kwargs.pop("recommendation", "Fix it"),
        code_snippet=kwargs.pop("code_snippet", "let p = Box::into_raw(b);"),
        **kwargs,
    )


@pytest.fixture
def scan_result() -> ScanResult:
    findings = [
        make_finding(Severity.MEDIUM, 2, "panic-safety"),
        make_finding(Severity.CRITICAL, 3, "memory-transmutation", metadata={"cwe": "CWE-416"}),
        make_finding(Severity.LOW, 4, "weird", title="<script>alert(1)</script>", description='a "quoted", value'),
    ]
    batch = CheckerResult(checker_id="rudra", checker_name="Rudra", language="rust", findings=findings)
    options = ScanOptions(project_path="/tmp/demo-project")
    return Aggregator().aggregate([batch], options, languages={"rust"})


@pytest.fixture
def empty_result() -> ScanResult:
    return Aggregator().aggregate([], ScanOptions(project_path="/tmp/demo-project"))


class TestGetReporter:
    """Tests for format resolution."""

    @pytest.mark.parametrize("name,cls", [
        ("json", JSONReporter),
        ("SARIF", SARIFReporter),
        ("markdown", MarkdownReporter),
        ("md", MarkdownReporter),
        ("csv", CSVReporter),
        ("html", HTMLReporter),
    ])
    def test_known_formats(self, name, cls):
        """Test every supported format resolves."""
        assert isinstance(get_reporter(name), cls)

    def test_unknown_format(self):
        """Test an unknown format raises."""
        with pytest.raises(UnsupportedFormatError):
            get_reporter("pdf")


class TestJSONReporter:
    """Tests for JSONReporter class."""

    def test_round_trip(self, scan_result):
        """Test the JSON report reads back into an equal result."""
        data = json.loads(JSONReporter().generate(scan_result))
        restored = ScanResult.from_dict(data)

        assert restored.findings == scan_result.findings
        assert restored.summary == scan_result.summary
        assert restored.score == scan_result.score
        assert restored.rating == scan_result.rating

    def test_document_shape(self, scan_result):
        """Test top-level keys and metadata."""
        data = json.loads(JSONReporter().generate(scan_result))

        assert set(data) == {"metadata", "summary", "score", "findings"}
        assert data["metadata"]["tool"] == "SwarmSight"
        assert data["summary"]["total"] == 3
        assert data["findings"][1]["severity"] == "critical"


class TestSARIFReporter:
    """Tests for SARIFReporter class."""

    def test_document_structure(self, scan_result):
        """Test the SARIF envelope and levels."""
        document = json.loads(SARIFReporter().generate(scan_result))

        assert document["version"] == "2.1.0"
        run = document["runs"][0]
        assert run["tool"]["driver"]["name"] == "SwarmSight"
        assert [r["id"] for r in run["tool"]["driver"]["rules"]] == ["panic-safety", "memory-transmutation", "weird"]
        assert [r["level"] for r in run["results"]] == ["warning", "error", "note"]
        assert run["originalUriBaseIds"]["SRCROOT"]["uri"].startswith("file://")

        location = run["results"][1]["locations"][0]["physicalLocation"]
        assert location["artifactLocation"]["uri"] == "src/main.rs"
        assert location["region"] == {"startLine": 3, "startColumn": 5}

    def test_round_trip(self, scan_result):
        """Test findings read back from SARIF keep identity, severity and location."""
        document = json.loads(SARIFReporter().generate(scan_result))
        restored = findings_from_sarif(document)

        def key(f):
            return (f.id, f.severity, f.file_path, f.line, f.column, f.rule_id, f.checker_id, f.title)

        assert [key(f) for f in restored] == [key(f) for f in scan_result.findings]

    def test_empty(self, empty_result):
        """Test a scan without findings is still valid SARIF."""
        document = json.loads(SARIFReporter().generate(empty_result))
        assert document["runs"][0]["results"] == []


class TestCSVReporter:
    """Tests for CSVReporter class."""

    def test_rows(self, scan_result):
        """Test one row per finding with quoting handled."""
        rows = list(csv.reader(io.StringIO(CSVReporter().generate(scan_result).decode("utf-8"))))

        assert rows[0][0] == "Severity"
        assert len(rows) == 4
        assert rows[1][:4] == ["medium", "panic-safety detected", "src/main.rs", "2"]
        assert rows[3][8] == 'a "quoted", value'

    def test_empty(self, empty_result):
        """Test an empty scan writes a placeholder row."""
        rows = list(csv.reader(io.StringIO(CSVReporter().generate(empty_result).decode("utf-8"))))

        assert rows[1][0] == "No findings"


class TestMarkdownReporter:
    """Tests for MarkdownReporter class."""

    def test_content(self, scan_result):
        """Test summary and findings are rendered, most severe first."""
        content = MarkdownReporter().generate(scan_result).decode("utf-8")

        assert "# 🔍 SwarmSight Security Report" in content
        assert f"- **Risk Score:** {scan_result.score}/100 ({scan_result.rating})" in content
        assert "- **Critical:** 1" in content
        assert content.index("memory-transmutation detected") < content.index("panic-safety detected")
        assert "let p = Box::into_raw(b);" in content

    def test_empty(self, empty_result):
        """Test an empty scan."""
        content = MarkdownReporter().generate(empty_result).decode("utf-8")

        assert "No findings." in content
        assert "100/100 (Excellent)" in content


class TestHTMLReporter:
    """Tests for HTMLReporter class."""

    def test_content_is_escaped(self, scan_result):
        """Test finding text is HTML-escaped."""
        content = HTMLReporter().generate(scan_result).decode("utf-8")

        assert content.startswith("<!DOCTYPE html>")
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in content
        assert "<script>alert(1)</script>" not in content
        assert "src/main.rs:3:5" in content
        assert "<style>" in content

    def test_without_styles(self, empty_result):
        """Test styles can be left out."""
        content = HTMLReporter(include_styles=False).generate(empty_result).decode("utf-8")

        assert "<style>" not in content
        assert "No findings" in content


class TestReportGenerator:
    """Tests for ReportGenerator class."""

    def test_emit_to_stream(self, scan_result):
        """Test the report is written to a stream with a trailing newline."""
        stream = io.BytesIO()

        written = ReportGenerator.for_format("json").emit(scan_result, stream=stream)

        assert written is None
        assert stream.getvalue().endswith(b"\n")
        assert json.loads(stream.getvalue())["summary"]["total"] == 3

    def test_emit_to_file(self, scan_result):
        """Test the report is written to a file, creating parent directories."""
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "reports" / "scan.sarif"

            written = ReportGenerator.for_format("sarif").emit(scan_result, str(target))

            assert written == str(target)
            assert json.loads(target.read_text())["version"] == "2.1.0"

    def test_generated_filename(self, scan_result):
        """Test saving without a path uses a generated name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(MarkdownReporter().save(scan_result, output_dir=tmpdir))

            assert path.parent == Path(tmpdir)
            assert path.name.startswith("swarmsight_report_demo_project_")
            assert path.suffix == ".md"


class TestSortBySeverity:
    """Tests for severity ordering helpers."""

    def test_stable_within_severity(self):
        """Test equal severities keep their order."""
        findings = [
            make_finding(Severity.LOW, 1, "a"),
            make_finding(Severity.HIGH, 2, "b"),
            make_finding(Severity.LOW, 3, "c"),
            make_finding(Severity.UNKNOWN, 4, "d"),
        ]

        assert [f.rule_id for f in sort_by_severity(findings)] == ["b", "a", "c", "d"]
