"""Parallel Executor Module - Runs multiple checkers concurrently."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .checker import Checker, CheckerResult
from .options import ScanOptions

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class ExecutionResult:
    """Result of parallel execution of multiple checkers."""
    checker_results: List[CheckerResult] = field(default_factory=list)
    total_duration_ms: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    checker_count: int = 0
    successful_runs: int = 0
    failed_runs: int = 0
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "checker_results": [r.to_dict() for r in self.checker_results],
            "total_duration_ms": self.total_duration_ms,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "checker_count": self.checker_count,
            "successful_runs": self.successful_runs,
            "failed_runs": self.failed_runs,
            "errors": self.errors,
        }


class ParallelExecutor:
    """Executes checkers concurrently, one task per checker.

    Results come back in dispatch order regardless of completion order.
    A checker that raises or exceeds its timeout yields an empty failed
    CheckerResult; its siblings are unaffected.
    """

    def __init__(
        self,
        max_concurrent: Optional[int] = None,
        timeout_per_checker: Optional[float] = None,
    ):
        """Initialize the parallel executor.

        Args:
            max_concurrent: Maximum number of concurrent checkers (unbounded if None)
            timeout_per_checker: Timeout in seconds for each checker
                (default: the timeout in ScanOptions)
        """
        self.max_concurrent = max_concurrent
        self.timeout_per_checker = timeout_per_checker

    async def execute(
        self,
        checkers: Iterable[Checker],
        options: ScanOptions,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExecutionResult:
        """Execute all checkers in parallel.

        Args:
            checkers: Checkers in dispatch order
            options: Scan configuration; ``options.project_path`` is scanned
            progress_callback: Optional callback called with
                (completed_count, total_count, checker_name) when each checker completes

        Returns:
            ExecutionResult with one CheckerResult per checker
        """
        checkers = list(checkers)
        started_at = datetime.now()
        result = ExecutionResult(started_at=started_at, checker_count=len(checkers))

        if not checkers:
            result.completed_at = datetime.now()
            return result

        timeout = self.timeout_per_checker or options.timeout
        limit = self.max_concurrent or options.max_concurrency
        semaphore = asyncio.Semaphore(limit) if limit else None
        completed_count = 0
        total = len(checkers)

        async def run_checker(checker: Checker) -> CheckerResult:
            nonlocal completed_count
            checker_started = datetime.now()
            try:
                if semaphore is not None:
                    async with semaphore:
                        return await self._run_one(checker, options, timeout, checker_started)
                return await self._run_one(checker, options, timeout, checker_started)
            finally:
                completed_count += 1
                if progress_callback:
                    progress_callback(completed_count, total, checker.name)

        checker_results = await asyncio.gather(*(run_checker(c) for c in checkers))

        for checker_result in checker_results:
            result.checker_results.append(checker_result)
            if checker_result.success:
                result.successful_runs += 1
            else:
                result.failed_runs += 1
                result.errors[checker_result.checker_id] = checker_result.error_message or "failed"

        completed_at = datetime.now()
        result.completed_at = completed_at
        result.total_duration_ms = int((completed_at - started_at).total_seconds() * 1000)

        return result

    async def _run_one(
        self,
        checker: Checker,
        options: ScanOptions,
        timeout: float,
        started_at: datetime,
    ) -> CheckerResult:
        """Run a single checker, converting errors and timeouts into results."""
        logger.debug("Starting checker %s", checker.id)
        try:
            checker_result = await asyncio.wait_for(
                checker.scan(options.project_path, options),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            message = f"Checker timed out after {timeout:g}s"
            logger.warning("%s: %s", checker.id, message)
            checker_result = checker._create_result(started_at)
            checker._complete_result(checker_result, started_at, success=False, error_message=message)
            checker_result.timed_out = True
            return checker_result
        except Exception as e:
            logger.warning("%s failed: %s", checker.id, e)
            checker_result = checker._create_result(started_at)
            return checker._complete_result(
                checker_result, started_at, success=False, error_message=f"{type(e).__name__}: {e}"
            )

        logger.info(
            "Checker %s finished: %d findings (%s)",
            checker.id, checker_result.finding_count, checker_result.status,
        )
        return checker_result


class CheckerRegistry:
    """Registry of declared checkers.

    Declaration order is preserved by every query.
    """

    def __init__(self, checkers: Optional[Iterable[Checker]] = None):
        """Initialize the registry.

        Args:
            checkers: Checkers to register, in declaration order
        """
        self._checkers: Dict[str, Checker] = {}
        for checker in checkers or ():
            self.register(checker)

    def register(self, checker: Checker) -> None:
        """Register a checker.

        Args:
            checker: Checker instance; its id must be unique

        Raises:
            ValueError: If a checker with the same id is already registered
        """
        if checker.id in self._checkers:
            raise ValueError(f"Checker '{checker.id}' is already registered")
        self._checkers[checker.id] = checker

    def all(self) -> List[Checker]:
        """Get every declared checker."""
        return list(self._checkers.values())

    def get(self, id_or_name: str) -> Optional[Checker]:
        """Get a checker by id or case-insensitive name.

        Args:
            id_or_name: Checker id or display name

        Returns:
            Checker instance or None if not found
        """
        key = id_or_name.strip().lower()
        for checker in self._checkers.values():
            if checker.id == key or checker.name.lower() == key:
                return checker
        return None

    def languages(self) -> List[str]:
        """Get languages covered by declared checkers, in declaration order."""
        seen: List[str] = []
        for checker in self._checkers.values():
            if checker.language not in seen:
                seen.append(checker.language)
        return seen

    def is_available(self, checker: Checker) -> bool:
        """Probe availability, treating a raising probe as unavailable."""
        try:
            return bool(checker.is_available())
        except Exception as e:
            logger.warning("Availability check for %s failed: %s", checker.id, e)
            return False

    def selected(self, options: ScanOptions) -> List[Checker]:
        """Get checkers matching the requested ids, names, languages and analyzer types.

        Availability is not considered.
        """
        checkers = self.all()
        if not options.selects_all:
            wanted = set(options.checkers)
            checkers = [
                c for c in checkers
                if c.id in wanted or c.name.lower() in wanted or c.language in wanted
            ]
        if options.analyzer_types:
            checkers = [c for c in checkers if c.info.analyzer_type in options.analyzer_types]
        return checkers

    def available(self, options: ScanOptions) -> List[Checker]:
        """Get the available checkers selected by ``options``.

        Args:
            options: Scan configuration

        Returns:
            Checkers in declaration order
        """
        checkers = [c for c in self.selected(options) if self.is_available(c)]
        logger.debug("Available checkers: %s", ", ".join(c.id for c in checkers) or "none")
        return checkers
