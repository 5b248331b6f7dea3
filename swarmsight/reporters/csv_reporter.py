"""CSV Reporter Module - Generate spreadsheet-friendly CSV reports."""

import csv
import io

from ..core.aggregator import ScanResult
from .base_reporter import BaseReporter

HEADERS = ["Severity", "Title", "File", "Line", "Column", "Rule", "Checker", "Category", "Description", "Recommendation"]


class CSVReporter(BaseReporter):
    """Generate reports in CSV format, one row per finding."""

    mime_type = "text/csv"

    @property
    def format(self) -> str:
        return "csv"

    @property
    def extension(self) -> str:
        return "csv"

    def generate(self, result: ScanResult) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(HEADERS)

        if not result.findings:
            writer.writerow(["No findings"] + [""] * (len(HEADERS) - 1))

        for finding in result.findings:
            writer.writerow([
                finding.severity.value,
                finding.title,
                finding.file_path,
                finding.line,
                finding.column,
                finding.rule_id,
                finding.checker_id,
                finding.category,
                finding.description,
                finding.recommendation,
            ])

        return output.getvalue().encode("utf-8")
