"""External Checker Module - Checkers that wrap a command-line analysis tool."""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..core.checker import Checker, CheckerInfo, CheckerResult, Finding
from ..core.options import ScanOptions
from ..core.rule_matcher import Rule
from .pattern_checker import PatternChecker

logger = logging.getLogger(__name__)

OutputParser = Callable[[str, str], List[Dict[str, Any]]]


def no_records(stdout: str, stderr: str) -> List[Dict[str, Any]]:
    return []


@dataclass(frozen=True)
class ToolInvocation:
    """How to run one external tool and read its output.

    The command is ``binary`` followed by ``args`` and any per-checker
    ``tool_args`` from the scan options. The tool runs with the project root
    as its working directory.
    """
    binary: str
    args: Tuple[str, ...] = ()
    parse_output: OutputParser = no_records
    ok_returncodes: Tuple[int, ...] = (0,)
    probe: Optional[str] = None

    def build_command(self, options: ScanOptions, checker_id: str) -> List[str]:
        """Build the argument vector for one run."""
        return [self.binary, *self.args, *options.args_for(checker_id)]

    def executable(self) -> Optional[str]:
        """Locate the executable that must be on PATH for this tool."""
        return shutil.which(self.probe or self.binary)


class ExternalToolChecker(Checker):
    """Checker that runs an external binary, with an optional rule fallback.

    When the tool is missing, the fallback rules run instead and the result is
    marked with ``metadata["fallback"]``. Without fallback rules the result is
    empty and marked ``metadata["unavailable"]``; findings are never invented.
    """

    def __init__(
        self,
        info: CheckerInfo,
        invocation: ToolInvocation,
        fallback_rules: Sequence[Rule] = (),
    ):
        """Initialize the external checker.

        Args:
            info: Static description of the checker
            invocation: Command and output parser for the tool
            fallback_rules: Rules evaluated when the tool is not installed
        """
        super().__init__(info)
        self.invocation = invocation
        self.fallback = PatternChecker(info, fallback_rules) if fallback_rules else None

    def tool_available(self) -> bool:
        """Check if the external tool is on PATH."""
        return self.invocation.executable() is not None

    def is_available(self) -> bool:
        return self.tool_available() or self.fallback is not None

    async def scan(self, project_path: str | Path, options: ScanOptions) -> CheckerResult:
        """Run the tool (or its fallback) against the project.

        Args:
            project_path: Project root
            options: Scan configuration

        Returns:
            CheckerResult with normalized findings
        """
        started_at = datetime.now()

        if not self.tool_available():
            return await self._scan_without_tool(Path(project_path), options, started_at)

        result = self._create_result(started_at)
        root = Path(project_path)
        cwd = root if root.is_dir() else root.parent
        command = self.invocation.build_command(options, self.id)
        result.metadata["command"] = " ".join(command)
        logger.debug("Running %s in %s", result.metadata["command"], cwd)

        returncode, stdout, stderr = await self._run_command(command, cwd=str(cwd))

        if returncode not in self.invocation.ok_returncodes:
            detail = (stderr or stdout).strip().splitlines()
            message = f"{self.invocation.binary} exited with code {returncode}"
            if detail:
                message += f": {detail[-1]}"
            logger.warning("%s: %s", self.id, message)
            return self._complete_result(result, started_at, success=False, error_message=message)

        try:
            records = self.invocation.parse_output(stdout, stderr)
        except ValueError as e:
            logger.warning("%s: cannot parse tool output: %s", self.id, e)
            return self._complete_result(
                result, started_at, success=False, error_message=f"Cannot parse output: {e}"
            )

        result.findings = [Finding.from_record(record, self.info) for record in records]
        return self._complete_result(result, started_at)

    async def _scan_without_tool(
        self,
        project_path: Path,
        options: ScanOptions,
        started_at: datetime,
    ) -> CheckerResult:
        note = f"{self.invocation.binary} not found on PATH"
        if self.fallback is None:
            result = self._create_result(started_at)
            result.metadata["unavailable"] = note
            result.warnings.append(note)
            return self._complete_result(result, started_at)

        logger.info("%s: %s, using pattern fallback", self.id, note)
        result = await self.fallback.scan(project_path, options)
        result.metadata["fallback"] = f"{note}; pattern rules used instead"
        result.warnings.insert(0, note)
        return result

    async def _run_command(
        self,
        command: List[str],
        cwd: Optional[str] = None,
    ) -> Tuple[int, str, str]:
        """Run a command asynchronously.

        The child process is killed if the awaiting task is cancelled.

        Args:
            command: Command and arguments as list
            cwd: Working directory for the command

        Returns:
            Tuple of (return_code, stdout, stderr)
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as e:
            return (-1, "", str(e))

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return (
            process.returncode or 0,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )
