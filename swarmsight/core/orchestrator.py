"""Orchestrator Module - Drives one scan from project walk to frozen result."""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from .aggregator import Aggregator, ScanResult
from .checker import Checker
from .file_discovery import ProjectIndex, ProjectWalker
from .options import ConfigurationError, ScanOptions
from .parallel_executor import CheckerRegistry, ParallelExecutor, ProgressCallback

if TYPE_CHECKING:
    from ..reporters.base_reporter import BaseReporter

logger = logging.getLogger(__name__)


class ScanState(Enum):
    """Lifecycle of a scan."""
    IDLE = "idle"
    WALKING = "walking"
    DISPATCHING = "dispatching"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


class Orchestrator:
    """Coordinates the walker, registry, executor and aggregator for a scan.

    Every collaborator is injected; defaults are built when omitted. Each
    instance tracks the state of its most recent scan in ``state``.
    Configuration errors are raised before any checker is dispatched.
    """

    def __init__(
        self,
        registry: CheckerRegistry,
        walker: Optional[ProjectWalker] = None,
        executor: Optional[ParallelExecutor] = None,
        aggregator: Optional[Aggregator] = None,
        reporter: Optional["BaseReporter"] = None,
    ):
        """Initialize the orchestrator.

        Args:
            registry: Declared checkers
            walker: Project walker (default: ProjectWalker())
            executor: Checker executor (default: ParallelExecutor())
            aggregator: Result aggregator (default: Aggregator())
            reporter: Report formatter used by ``render`` (default: resolved
                from ``options.output_format`` at scan time)
        """
        self.registry = registry
        self.walker = walker or ProjectWalker()
        self.executor = executor or ParallelExecutor()
        self.aggregator = aggregator or Aggregator()
        self.reporter = reporter
        self._reporter_injected = reporter is not None
        self.state = ScanState.IDLE
        self.index: Optional[ProjectIndex] = None
        self.dispatched: List[Checker] = []

    def _transition(self, state: ScanState) -> None:
        logger.debug("Scan state %s -> %s", self.state.value, state.value)
        self.state = state

    def validate(self, options: ScanOptions) -> Path:
        """Check the configuration before any work starts.

        Args:
            options: Scan configuration

        Returns:
            Resolved project path

        Raises:
            ConfigurationError: If the project path is missing or not a
                directory, or the output format has no reporter
        """
        project_path = Path(options.project_path)
        if not project_path.exists():
            raise ConfigurationError(f"Project path does not exist: {project_path}")
        if not project_path.is_dir():
            raise ConfigurationError(f"Project path is not a directory: {project_path}")

        if not self._reporter_injected:
            from ..reporters.report_generator import get_reporter

            self.reporter = get_reporter(options.output_format)

        return project_path

    def plan(self, options: ScanOptions, index: ProjectIndex) -> List[Checker]:
        """Select the checkers to dispatch: available and matching a detected language."""
        languages = index.languages
        checkers = [c for c in self.registry.available(options) if c.language in languages]
        skipped = [c.id for c in self.registry.selected(options) if c not in checkers]
        if skipped:
            logger.info("Not dispatching: %s", ", ".join(skipped))
        return checkers

    async def run(
        self,
        options: ScanOptions,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ScanResult:
        """Run a complete scan.

        Args:
            options: Scan configuration
            progress_callback: Optional callback for checker completion

        Returns:
            Frozen ScanResult

        Raises:
            ConfigurationError: On invalid configuration (state becomes FAILED)
        """
        started_at = datetime.now(timezone.utc)
        self.dispatched = []

        try:
            project_path = self.validate(options)
        except ConfigurationError as e:
            logger.error("Scan aborted: %s", e)
            self._transition(ScanState.FAILED)
            raise

        self._transition(ScanState.WALKING)
        self.index = self.walker.walk(project_path, options.exclude)
        for error in self.index.errors:
            logger.warning(error)
        logger.info(
            "Walked %s: %d files, languages: %s",
            project_path, self.index.total_files, ", ".join(sorted(self.index.languages)) or "none",
        )

        self._transition(ScanState.DISPATCHING)
        self.dispatched = self.plan(options, self.index)
        logger.info("Dispatching %d checkers", len(self.dispatched))

        self._transition(ScanState.RUNNING)
        execution = await self.executor.execute(self.dispatched, options, progress_callback)

        self._transition(ScanState.AGGREGATING)
        result = self.aggregator.aggregate(
            execution.checker_results,
            options,
            languages=self.index.languages,
            started_at=started_at,
            extra_metadata={
                "files_walked": self.index.total_files,
                "walk_errors": list(self.index.errors),
                "duration_ms": execution.total_duration_ms,
            },
        )

        self._transition(ScanState.DONE)
        return result

    def run_sync(
        self,
        options: ScanOptions,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ScanResult:
        """Synchronous wrapper for run."""
        return asyncio.run(self.run(options, progress_callback))

    def render(self, result: ScanResult) -> bytes:
        """Format a scan result with the configured reporter.

        Raises:
            ConfigurationError: If no reporter has been configured yet
        """
        if self.reporter is None:
            raise ConfigurationError("No reporter configured")
        return self.reporter.generate(result)
