"""Report formatters for SwarmSight."""

from .base_reporter import BaseReporter
from .csv_reporter import CSVReporter
from .html_reporter import HTMLReporter
from .json_reporter import JSONReporter
from .markdown_reporter import MarkdownReporter
from .report_generator import SUPPORTED_FORMATS, ReportGenerator, get_reporter
from .sarif_reporter import SARIFReporter

__all__ = [
    "BaseReporter",
    "CSVReporter",
    "HTMLReporter",
    "JSONReporter",
    "MarkdownReporter",
    "SARIFReporter",
    "ReportGenerator",
    "SUPPORTED_FORMATS",
    "get_reporter",
]
