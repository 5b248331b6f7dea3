"""JSON Reporter Module - Generate JSON format reports."""

import json

from ..core.aggregator import ScanResult
from .base_reporter import BaseReporter


class JSONReporter(BaseReporter):
    """Generate reports in JSON format.

    The document is ``ScanResult.to_dict()`` and can be read back with
    ``ScanResult.from_dict``.
    """

    mime_type = "application/json"

    def __init__(self, indent: int = 2):
        """Initialize the JSON reporter.

        Args:
            indent: JSON indentation level
        """
        self.indent = indent

    @property
    def format(self) -> str:
        return "json"

    @property
    def extension(self) -> str:
        return "json"

    def generate(self, result: ScanResult) -> bytes:
        """Generate JSON report.

        Args:
            result: Scan result to render

        Returns:
            JSON content as bytes
        """
        json_str = json.dumps(result.to_dict(), indent=self.indent, ensure_ascii=False, default=str)
        return json_str.encode("utf-8")
