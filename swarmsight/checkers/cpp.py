"""C/C++ checkers: Cppcheck, with a rule fallback when cppcheck is not installed."""

from typing import List

from ..core.checker import Checker, CheckerInfo, Severity
from ..core.rule_matcher import Rule
from .diagnostics import parse_cppcheck_xml
from .external_checker import ExternalToolChecker, ToolInvocation


CPPCHECK_INFO = CheckerInfo(
    id="cppcheck",
    name="Cppcheck",
    language="cpp",
    category="static-analysis",
    severity=Severity.HIGH,
    analyzer_type="static",
    description="Static analysis tool for C/C++ code",
    website="https://cppcheck.sourceforge.io",
    install_hint="apt-get install cppcheck",
)

CPPCHECK_FALLBACK_RULES = [
    Rule(
        id="dangerousFunctionGets",
        pattern=r"\bgets\s*\(",
        severity=Severity.CRITICAL,
        message="gets() cannot limit input length",
        recommendation="Use fgets() with an explicit buffer size",
        category="memory-safety",
    ),
    Rule(
        id="unsafeStringFunction",
        pattern=r"\b(?:strcpy|strcat|sprintf)\s*\(",
        severity=Severity.HIGH,
        message="Unbounded string function may overflow the destination buffer",
        recommendation="Use bounded variants such as snprintf or strncpy",
        category="memory-safety",
    ),
    Rule(
        id="invalidScanfString",
        pattern=r"\bscanf\s*\(\s*\"[^\"]*%s",
        severity=Severity.HIGH,
        message="scanf %s without a field width may overflow the buffer",
        recommendation="Give every %s conversion a maximum field width",
        category="memory-safety",
    ),
    Rule(
        id="formatStringVariable",
        pattern=r"\bprintf\s*\(\s*[A-Za-z_]\w*\s*\)",
        severity=Severity.HIGH,
        message="Non-literal format string",
        recommendation="Use printf(\"%s\", value) instead of passing data as the format",
        category="memory-safety",
    ),
    Rule(
        id="commandExecution",
        pattern=r"\bsystem\s*\(",
        severity=Severity.MEDIUM,
        message="system() runs a shell command",
        recommendation="Avoid shell invocation or strictly validate its input",
        category="security",
    ),
    Rule(
        id="manualAllocation",
        pattern=r"\b(?:malloc|calloc|realloc)\s*\(",
        severity=Severity.LOW,
        message="Manual heap allocation; check for NULL and matching free",
        recommendation="Prefer RAII containers or smart pointers in C++",
        category="memory-safety",
    ),
    Rule(
        id="uncheckedConversion",
        pattern=r"\batoi\s*\(",
        severity=Severity.LOW,
        message="atoi() does not report conversion errors",
        recommendation="Use strtol() and check errno and the end pointer",
        category="reliability",
    ),
]


def create_checkers() -> List[Checker]:
    """Create the C/C++ checkers in declaration order."""
    return [
        ExternalToolChecker(
            CPPCHECK_INFO,
            ToolInvocation(
                binary="cppcheck",
                args=("--xml", "--quiet", "--enable=warning,style,performance,portability", "."),
                parse_output=lambda stdout, stderr: parse_cppcheck_xml(stderr),
            ),
            fallback_rules=CPPCHECK_FALLBACK_RULES,
        ),
    ]
