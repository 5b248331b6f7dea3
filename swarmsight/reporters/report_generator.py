"""Report Generator Module - Resolves report formats and emits reports."""

import logging
import sys
from typing import BinaryIO, Dict, List, Optional, Type

from ..core.aggregator import ScanResult
from ..core.options import UnsupportedFormatError
from .base_reporter import BaseReporter
from .csv_reporter import CSVReporter
from .html_reporter import HTMLReporter
from .json_reporter import JSONReporter
from .markdown_reporter import MarkdownReporter
from .sarif_reporter import SARIFReporter

logger = logging.getLogger(__name__)

REPORTERS: Dict[str, Type[BaseReporter]] = {
    "json": JSONReporter,
    "sarif": SARIFReporter,
    "markdown": MarkdownReporter,
    "csv": CSVReporter,
    "html": HTMLReporter,
}

FORMAT_ALIASES = {"md": "markdown", "htm": "html"}

SUPPORTED_FORMATS: List[str] = list(REPORTERS)


def get_reporter(format_name: str) -> BaseReporter:
    """Get a reporter instance for a format name.

    Args:
        format_name: Format identifier (case-insensitive; ``md`` is accepted for markdown)

    Returns:
        Reporter instance

    Raises:
        UnsupportedFormatError: If no reporter handles the format
    """
    key = str(format_name).strip().lower()
    key = FORMAT_ALIASES.get(key, key)
    if key not in REPORTERS:
        raise UnsupportedFormatError(
            f"Unsupported output format '{format_name}' (expected one of: {', '.join(SUPPORTED_FORMATS)})"
        )
    return REPORTERS[key]()


class ReportGenerator:
    """Renders a scan result and writes it to a file or a stream."""

    def __init__(self, reporter: BaseReporter):
        """Initialize the report generator.

        Args:
            reporter: Formatter used for every report
        """
        self.reporter = reporter

    @classmethod
    def for_format(cls, format_name: str) -> "ReportGenerator":
        """Create a generator for a format name."""
        return cls(get_reporter(format_name))

    def emit(
        self,
        result: ScanResult,
        output_file: Optional[str] = None,
        stream: Optional[BinaryIO] = None,
    ) -> Optional[str]:
        """Write the report to ``output_file``, or to ``stream`` (default: stdout).

        Args:
            result: Scan result to render
            output_file: Destination path
            stream: Binary stream used when no output file is given

        Returns:
            Path of the written file, or None when written to a stream
        """
        if output_file:
            path = self.reporter.save(result, output_path=output_file)
            logger.info("Wrote %s report to %s", self.reporter.format, path)
            return path

        content = self.reporter.generate(result)
        target = stream if stream is not None else sys.stdout.buffer
        target.write(content)
        if not content.endswith(b"\n"):
            target.write(b"\n")
        target.flush()
        return None
