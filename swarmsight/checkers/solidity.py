"""Solidity checkers: Slither, with a rule fallback when slither is not installed."""

from typing import List

from ..core.checker import Checker, CheckerInfo, Severity
from ..core.rule_matcher import Rule
from .diagnostics import parse_slither_json
from .external_checker import ExternalToolChecker, ToolInvocation


SLITHER_INFO = CheckerInfo(
    id="slither",
    name="Slither",
    language="solidity",
    category="smart-contract",
    severity=Severity.HIGH,
    analyzer_type="static",
    description="Static analysis framework for Solidity smart contracts",
    website="https://github.com/crytic/slither",
    install_hint="pip install slither-analyzer",
)

# Approximations of the most common slither detectors, keyed by detector name.
SLITHER_FALLBACK_RULES = [
    Rule(
        id="tx-origin",
        pattern=r"tx\.origin",
        severity=Severity.HIGH,
        message="tx.origin used for authorization",
        recommendation="Use msg.sender instead of tx.origin for access control",
        category="smart-contract",
    ),
    Rule(
        id="controlled-delegatecall",
        pattern=r"\.delegatecall\s*\(",
        severity=Severity.HIGH,
        message="delegatecall executes foreign code in this contract's storage context",
        recommendation="Only delegatecall trusted, immutable targets",
        category="smart-contract",
    ),
    Rule(
        id="suicidal",
        pattern=r"\b(?:selfdestruct|suicide)\s*\(",
        severity=Severity.HIGH,
        message="Contract can be destroyed with selfdestruct",
        recommendation="Remove selfdestruct or restrict it to a well-protected owner path",
        category="smart-contract",
    ),
    Rule(
        id="low-level-calls",
        pattern=r"\.call(?:\{[^}]*\})?\s*\(",
        severity=Severity.MEDIUM,
        message="Low-level call; return value and reentrancy must be handled",
        recommendation="Check the return value and follow the checks-effects-interactions pattern",
        category="smart-contract",
    ),
    Rule(
        id="weak-prng",
        pattern=r"\bblockhash\s*\(|block\.difficulty|block\.prevrandao",
        severity=Severity.MEDIUM,
        message="Block attributes used as a source of randomness",
        recommendation="Use a verifiable randomness source such as a VRF oracle",
        category="smart-contract",
    ),
    Rule(
        id="timestamp",
        pattern=r"block\.timestamp|\bnow\b",
        severity=Severity.LOW,
        message="Block timestamp used in contract logic",
        recommendation="Avoid relying on block.timestamp for critical comparisons",
        category="smart-contract",
    ),
    Rule(
        id="assembly",
        pattern=r"\bassembly\s*\{",
        severity=Severity.INFO,
        message="Inline assembly bypasses Solidity safety checks",
        recommendation="Keep assembly blocks minimal and well documented",
        category="smart-contract",
    ),
    Rule(
        id="solc-version",
        pattern=r"pragma\s+solidity\s*[\^>~]",
        severity=Severity.INFO,
        message="Floating pragma allows compilation with untested compiler versions",
        recommendation="Pin the compiler version used for deployment",
        category="smart-contract",
    ),
]


def create_checkers() -> List[Checker]:
    """Create the Solidity checkers in declaration order."""
    return [
        ExternalToolChecker(
            SLITHER_INFO,
            ToolInvocation(
                binary="slither",
                args=(".", "--json", "-", "--fail-none"),
                parse_output=lambda stdout, stderr: parse_slither_json(stdout),
                ok_returncodes=(0, 1, 255),
            ),
            fallback_rules=SLITHER_FALLBACK_RULES,
        ),
    ]
