"""Rule Matcher Module - Evaluates textual detection rules against file contents."""

import bisect
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Pattern, Sequence, Tuple, Union

from .checker import Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """A single detection pattern owned by one checker.

    ``pattern`` is either a compiled regex (or any object exposing
    ``finditer``) or a pattern string compiled on first use with ``flags``.
    A malformed string therefore fails only when the rule is evaluated.

    Multiline rules are matched against the whole file and reported at the
    line where the match starts. This approximates block-scoped patterns; it
    is not a semantic guarantee about the block.
    """
    id: str
    pattern: Union[str, Pattern, Any]
    severity: Severity
    message: str
    recommendation: str = ""
    category: str = "security"
    multiline: bool = False
    confidence: Optional[str] = None
    flags: int = 0

    def compiled(self):
        """Get the matcher object for this rule."""
        if hasattr(self.pattern, "finditer"):
            return self.pattern
        flags = self.flags | (re.DOTALL if self.multiline else 0)
        return re.compile(self.pattern, flags)


@dataclass(frozen=True)
class RuleMatch:
    """One match location (1-based line and column)."""
    line: int
    column: int
    text: str


def _line_offsets(text: str) -> List[int]:
    offsets = [0]
    for match in re.finditer("\n", text):
        offsets.append(match.end())
    return offsets


def evaluate(rule: Rule, text: str) -> List[RuleMatch]:
    """Evaluate one rule against a file's text.

    Single-line rules scan line by line and emit every non-overlapping match
    in each line. The same (line, column) is never emitted twice for a rule.
    Zero-length matches are ignored.

    Args:
        rule: Rule to evaluate
        text: Full file contents

    Returns:
        Match locations in text order

    Raises:
        Exception: Whatever the rule's pattern raises; callers isolate it
    """
    if not text:
        return []

    matcher = rule.compiled()
    matches: List[RuleMatch] = []
    seen = set()

    if rule.multiline:
        offsets = _line_offsets(text)
        for match in matcher.finditer(text):
            if match.end() == match.start():
                continue
            index = bisect.bisect_right(offsets, match.start()) - 1
            position = (index + 1, match.start() - offsets[index] + 1)
            if position in seen:
                continue
            seen.add(position)
            matches.append(RuleMatch(position[0], position[1], match.group(0)))
        return matches

    for line_number, line in enumerate(text.split("\n"), 1):
        for match in matcher.finditer(line):
            if match.end() == match.start():
                continue
            position = (line_number, match.start() + 1)
            if position in seen:
                continue
            seen.add(position)
            matches.append(RuleMatch(position[0], position[1], match.group(0)))

    return matches


class RuleMatcher:
    """Runs a rule set over file text with per-rule failure isolation."""

    def match_file(
        self,
        rules: Sequence[Rule],
        text: str,
        source: str = "<text>",
    ) -> Tuple[List[Tuple[Rule, RuleMatch]], List[str]]:
        """Evaluate every rule against a file.

        Args:
            rules: Rules in evaluation order
            text: File contents
            source: File name used in warnings

        Returns:
            Tuple of (rule/match pairs in rule order, warnings for rules that failed)
        """
        results: List[Tuple[Rule, RuleMatch]] = []
        warnings: List[str] = []

        for rule in rules:
            try:
                matches = evaluate(rule, text)
            except Exception as e:
                message = f"Rule {rule.id} failed on {source}: {e}"
                logger.warning(message)
                warnings.append(message)
                continue
            results.extend((rule, match) for match in matches)

        return results, warnings
