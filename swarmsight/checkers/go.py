"""Go checkers: GCatch-style concurrency rules."""

from typing import List

from ..core.checker import Checker, CheckerInfo, Severity
from ..core.rule_matcher import Rule
from .pattern_checker import PatternChecker


GCATCH_INFO = CheckerInfo(
    id="gcatch",
    name="GCatch",
    language="go",
    category="concurrency-analysis",
    severity=Severity.HIGH,
    analyzer_type="static",
    description="Statically detecting Go concurrency bugs",
    website="https://github.com/system-pclub/GCatch",
)

GCATCH_RULES = [
    Rule(
        id="goroutine-closure",
        pattern=r"\bgo\s+func\s*\(",
        severity=Severity.MEDIUM,
        message="Goroutine started from a closure",
        recommendation="Pass loop variables as arguments and make sure the goroutine can always exit",
        category="concurrency-analysis",
    ),
    Rule(
        id="unbuffered-channel",
        pattern=r"make\(\s*chan\s+[^,()]+\)",
        severity=Severity.MEDIUM,
        message="Unbuffered channel; every send blocks until a receiver is ready",
        recommendation="Check that each send has a guaranteed receiver or add a buffer",
        category="concurrency-analysis",
    ),
    Rule(
        id="manual-lock",
        pattern=r"\.R?Lock\(\)",
        severity=Severity.LOW,
        message="Mutex acquired; every path must release it",
        recommendation="Release with defer immediately after locking",
        category="concurrency-analysis",
    ),
    Rule(
        id="channel-close",
        pattern=r"\bclose\(\s*\w+\s*\)",
        severity=Severity.LOW,
        message="Channel closed; a second close or a later send panics",
        recommendation="Close channels from the single sending side only",
        category="concurrency-analysis",
    ),
    Rule(
        id="empty-select",
        pattern=r"\bselect\s*\{\s*\}",
        severity=Severity.HIGH,
        message="Empty select blocks the goroutine forever",
        recommendation="Wait on a done channel or context instead",
        category="concurrency-analysis",
    ),
    Rule(
        id="sleep-synchronization",
        pattern=r"\btime\.Sleep\(",
        severity=Severity.LOW,
        message="time.Sleep used where synchronization may be intended",
        recommendation="Use channels, sync.WaitGroup or context for coordination",
        category="concurrency-analysis",
    ),
]


def create_checkers() -> List[Checker]:
    """Create the Go checkers in declaration order."""
    return [PatternChecker(GCATCH_INFO, GCATCH_RULES)]
