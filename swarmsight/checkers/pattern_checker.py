"""Pattern Checker Module - Checkers driven by a set of textual rules."""

import asyncio
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..core.checker import Checker, CheckerInfo, CheckerResult, Finding, generate_finding_id
from ..core.file_discovery import LANGUAGE_EXTENSIONS, ProjectWalker
from ..core.options import ScanOptions
from ..core.rule_matcher import Rule, RuleMatch, RuleMatcher

logger = logging.getLogger(__name__)


class ScanCancelled(Exception):
    """Raised inside the worker thread when the scan has been cancelled."""


def relative_path(file_path: Path, root: Path) -> str:
    """Get ``file_path`` relative to ``root`` in POSIX form, or as-is if outside it."""
    try:
        relative = file_path.relative_to(root)
    except ValueError:
        return file_path.as_posix()
    return relative.as_posix() if relative.parts else file_path.name


class PatternChecker(Checker):
    """Checker that evaluates its own rules against every file of its language.

    File reading and matching run in a worker thread; cancellation is checked
    between files.
    """

    def __init__(
        self,
        info: CheckerInfo,
        rules: Sequence[Rule],
        extensions: Optional[Sequence[str]] = None,
        walker: Optional[ProjectWalker] = None,
        matcher: Optional[RuleMatcher] = None,
    ):
        """Initialize the pattern checker.

        Args:
            info: Static description of the checker
            rules: Rules evaluated in order on every file
            extensions: File suffixes to scan (default: the language's extensions)
            walker: Project walker (default: ProjectWalker())
            matcher: Rule matcher (default: RuleMatcher())
        """
        super().__init__(info)
        self.rules = list(rules)
        self.extensions = tuple(extensions or LANGUAGE_EXTENSIONS.get(info.language, ()))
        self.walker = walker or ProjectWalker()
        self.matcher = matcher or RuleMatcher()

    def is_available(self) -> bool:
        """Pattern checkers need no external binary."""
        return bool(self.rules)

    async def scan(self, project_path: str | Path, options: ScanOptions) -> CheckerResult:
        """Scan every matching file under ``project_path``.

        Args:
            project_path: Project root or a single source file
            options: Scan configuration (exclude list is honoured)

        Returns:
            CheckerResult with findings in file order, then rule order
        """
        started_at = datetime.now()
        result = self._create_result(started_at)
        cancelled = threading.Event()

        try:
            findings, files_scanned = await asyncio.to_thread(
                self.scan_files, Path(project_path), options.exclude, result.warnings, cancelled
            )
        except asyncio.CancelledError:
            cancelled.set()
            raise
        except ScanCancelled:
            return self._complete_result(result, started_at, success=False, error_message="Scan cancelled")

        result.findings = findings
        result.files_scanned = files_scanned
        return self._complete_result(result, started_at)

    def scan_files(
        self,
        root: Path,
        exclude: Sequence[str] = (),
        warnings: Optional[List[str]] = None,
        cancelled: Optional[threading.Event] = None,
    ) -> Tuple[List[Finding], int]:
        """Synchronously scan files under ``root``.

        Args:
            root: Project root or single file
            exclude: Directory names to skip
            warnings: List collecting per-file and per-rule warnings
            cancelled: Event checked between files

        Returns:
            Tuple of (findings in file order then rule order, files read)

        Raises:
            ScanCancelled: If ``cancelled`` is set before all files are read
        """
        warnings = warnings if warnings is not None else []
        findings: List[Finding] = []
        base = root if root.is_dir() else root.parent
        files_scanned = 0

        for file_path in self.walker.iter_files(root, self.extensions, exclude, errors=warnings):
            if cancelled is not None and cancelled.is_set():
                raise ScanCancelled(self.id)

            try:
                text = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                message = f"Skipping unreadable file {file_path}: {e}"
                logger.warning(message)
                warnings.append(message)
                continue

            files_scanned += 1
            display_path = relative_path(file_path, base)
            matches, rule_warnings = self.matcher.match_file(self.rules, text, display_path)
            warnings.extend(rule_warnings)

            lines = text.split("\n")
            for rule, match in matches:
                findings.append(self._to_finding(rule, match, display_path, lines))

        return findings, files_scanned

    def _to_finding(self, rule: Rule, match: RuleMatch, file_path: str, lines: List[str]) -> Finding:
        snippet = lines[match.line - 1].strip() if match.line <= len(lines) else match.text.strip()
        return Finding(
            id=generate_finding_id(self.id, rule.id, file_path, match.line, match.column),
            title=rule.message,
            severity=rule.severity,
            category=rule.category,
            checker_id=self.id,
            file_path=file_path,
            line=match.line,
            column=match.column,
            rule_id=rule.id,
            description=f"{rule.message} in {Path(file_path).name}",
            recommendation=rule.recommendation,
            code_snippet=snippet,
            confidence=rule.confidence,
        )
