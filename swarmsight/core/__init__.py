"""Core modules for SwarmSight."""

from .aggregator import Aggregator, ScanResult, ScanSummary
from .checker import Checker, CheckerInfo, CheckerResult, Finding, Severity
from .file_discovery import ProjectWalker, ProjectIndex
from .options import ConfigurationError, ScanOptions, load_options
from .orchestrator import Orchestrator, ScanState
from .parallel_executor import CheckerRegistry, ParallelExecutor
from .rule_matcher import Rule, RuleMatcher
from .scorer import RiskScore, Scorer

__all__ = [
    "Aggregator",
    "ScanResult",
    "ScanSummary",
    "Checker",
    "CheckerInfo",
    "CheckerResult",
    "Finding",
    "Severity",
    "ProjectWalker",
    "ProjectIndex",
    "ConfigurationError",
    "ScanOptions",
    "load_options",
    "Orchestrator",
    "ScanState",
    "CheckerRegistry",
    "ParallelExecutor",
    "Rule",
    "RuleMatcher",
    "RiskScore",
    "Scorer",
]
