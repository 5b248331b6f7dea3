"""Rust checkers: lockbud, Rudra, ERASan, Shuttle, MIRAI and Kani."""

import re
from typing import Any, Dict, List

from ..core.checker import Checker, CheckerInfo, Severity
from ..core.rule_matcher import Rule
from .diagnostics import parse_kani_output, parse_rustc_diagnostics
from .external_checker import ExternalToolChecker, ToolInvocation
from .pattern_checker import PatternChecker


LOCKBUD_INFO = CheckerInfo(
    id="lockbud",
    name="Lockbud",
    language="rust",
    category="memory-safety",
    severity=Severity.CRITICAL,
    analyzer_type="static",
    description="Detects memory and concurrency bugs in Rust code",
    website="https://github.com/BurtonQin/lockbud",
    install_hint="cargo install --git https://github.com/BurtonQin/lockbud.git",
)

LOCKBUD_RECOMMENDATIONS = {
    "UAF": "Ensure memory is not accessed after being freed. Consider using safe abstractions like Box<T>, Rc<T>, or Arc<T>.",
    "DOUBLE_FREE": "Avoid freeing memory that has already been freed. Use RAII principles with smart pointers.",
    "DATA_RACE": "Protect shared mutable state with a mutex or use message passing.",
    "DEADLOCK": "Avoid acquiring locks in different orders in different threads.",
    "*": "Review the code carefully and ensure proper memory and concurrency management.",
}


def parse_lockbud(stdout: str, stderr: str) -> List[Dict[str, Any]]:
    # Only coded errors such as error[LOCKBUD_UAF] are lockbud reports.
    return parse_rustc_diagnostics(
        f"{stdout}\n{stderr}",
        "lockbud",
        severity="critical",
        recommendations=LOCKBUD_RECOMMENDATIONS,
        levels=("error",),
        require_code=True,
    )


RUDRA_INFO = CheckerInfo(
    id="rudra",
    name="Rudra",
    language="rust",
    category="static-analysis",
    severity=Severity.HIGH,
    analyzer_type="static",
    description="Static analyzer for Rust that detects common programming errors",
    website="https://github.com/sslab-gatech/Rudra",
)

RUDRA_RULES = [
    Rule(
        id="panic-safety",
        pattern=r"unwrap\(\)|expect\([^)]*\)",
        severity=Severity.MEDIUM,
        message="Potential panic condition detected",
        recommendation="Use proper error handling instead of unwrap/expect",
        category="memory-safety",
    ),
    Rule(
        id="send-sync-variance",
        pattern=r"unsafe\s+impl\s+Send\s+for|unsafe\s+impl\s+Sync\s+for",
        severity=Severity.HIGH,
        message="Unsafe Send/Sync implementation may violate memory safety",
        recommendation="Carefully review thread safety guarantees",
        category="memory-safety",
    ),
    Rule(
        id="memory-transmutation",
        pattern=r"Box::from_raw|Box::into_raw|std::mem::transmute",
        severity=Severity.CRITICAL,
        message="Unsafe memory transmutation detected",
        recommendation="Ensure lifetime and type safety guarantees",
        category="memory-safety",
    ),
    Rule(
        id="static-mut-reference",
        pattern=r"&'static\s+mut|static\s+mut\s+\w+",
        severity=Severity.HIGH,
        message="Static mutable reference may cause data races",
        recommendation="Use thread-safe alternatives or proper synchronization",
        category="memory-safety",
    ),
    Rule(
        id="uninitialized-memory",
        pattern=r"std::mem::uninitialized|MaybeUninit::uninit\(\)\.assume_init",
        severity=Severity.CRITICAL,
        message="Potentially uninitialized memory access",
        recommendation="Ensure memory is properly initialized before use",
        category="memory-safety",
    ),
    Rule(
        id="manual-memory-management",
        pattern=r"std::mem::forget.*Box::|drop\(.*Box::",
        severity=Severity.HIGH,
        message="Manual memory management may lead to double-free",
        recommendation="Let Rust handle memory management automatically",
        category="memory-safety",
    ),
]


ERASAN_INFO = CheckerInfo(
    id="erasan",
    name="ERASan",
    language="rust",
    category="dynamic-analysis",
    severity=Severity.HIGH,
    analyzer_type="dynamic",
    description="Detects data races around static and shared mutable state",
)

ERASAN_RULES = [
    # Reported at the `static mut` declaration; the block ends at the next fn or blank line.
    Rule(
        id="static-mut-data-race",
        pattern=r"static\s+mut\s+\w+[\s\S]*?(?=fn|\n\n|$)",
        severity=Severity.CRITICAL,
        message="Static mutable data may cause data races",
        recommendation="Use thread-safe alternatives like Mutex or atomic types",
        category="concurrency",
        multiline=True,
    ),
    Rule(
        id="unsynchronized-mutation",
        pattern=r"let\s+\w+\s*=\s*&mut\s+.*",
        severity=Severity.HIGH,
        message="Mutable reference shared without synchronization",
        recommendation="Use proper synchronization primitives",
        category="concurrency",
    ),
]


SHUTTLE_INFO = CheckerInfo(
    id="shuttle",
    name="Shuttle",
    language="rust",
    category="concurrency-testing",
    severity=Severity.MEDIUM,
    analyzer_type="dynamic",
    description="Flags concurrency constructs that should be covered by randomized Shuttle tests",
    website="https://github.com/awslabs/shuttle",
)


def _shuttle_rule(rule_id: str, pattern: str, severity: Severity, message: str, recommendation: str, **kwargs) -> Rule:
    return Rule(
        id=rule_id,
        pattern=pattern,
        severity=severity,
        message=message,
        recommendation=recommendation,
        category="concurrency-testing",
        confidence="medium",
        **kwargs,
    )


SHUTTLE_RULES = [
    _shuttle_rule(
        "thread-spawn", r"std::thread::spawn\s*\(", Severity.MEDIUM,
        "Thread spawn detected - potential concurrency issues",
        "Use Shuttle to test thread interactions and detect race conditions",
    ),
    _shuttle_rule(
        "shared-mutex-state", r"Arc<Mutex<[^>]*>>", Severity.MEDIUM,
        "Shared mutable state with Arc<Mutex> - test for deadlocks",
        "Test mutex usage patterns with Shuttle to detect deadlocks",
    ),
    _shuttle_rule(
        "shared-rwlock-state", r"Arc<RwLock<[^>]*>>", Severity.MEDIUM,
        "Shared state with RwLock - verify reader-writer correctness",
        "Test RwLock usage with Shuttle to ensure reader-writer safety",
    ),
    _shuttle_rule(
        "channel-communication", r"channel\(\)|mpsc::", Severity.MEDIUM,
        "Channel communication detected - test message ordering",
        "Use Shuttle to test channel communication patterns",
    ),
    _shuttle_rule(
        "condition-variable", r"Condvar|std::sync::Condvar", Severity.HIGH,
        "Condition variable usage - potential for lost wakeups",
        "Test condition variable patterns with Shuttle for correctness",
    ),
    _shuttle_rule(
        "atomic-operations", r"atomic::|Atomic(?:Bool|I\d+|U\d+|Ptr)", Severity.MEDIUM,
        "Atomic operations detected - verify memory ordering",
        "Test atomic operation ordering with Shuttle",
    ),
    _shuttle_rule(
        "thread-join", r"\.join\(\)", Severity.LOW,
        "Thread join operation - verify completion semantics",
        "Ensure proper thread joining patterns with Shuttle testing",
    ),
    _shuttle_rule(
        "unsafe-send-sync", r"unsafe\s*\{[\s\S]*?(?:send|sync)[\s\S]*?\}", Severity.HIGH,
        "Unsafe Send/Sync implementation - test thread safety",
        "Thoroughly test unsafe Send/Sync implementations with Shuttle",
        flags=re.IGNORECASE,
    ),
    _shuttle_rule(
        "once-initialization", r"std::sync::Once|once_cell", Severity.MEDIUM,
        "One-time initialization detected - test initialization race conditions",
        "Test one-time initialization patterns for race conditions",
    ),
    _shuttle_rule(
        "condvar-wait-notify", r"\.wait\(\)|\.notify_one\(\)|\.notify_all\(\)", Severity.HIGH,
        "Condition variable wait/notify operations - test for missed signals",
        "Test wait/notify patterns with Shuttle to prevent missed signals",
    ),
]


MIRAI_INFO = CheckerInfo(
    id="mirai",
    name="MIRAI",
    language="rust",
    category="static-analysis",
    severity=Severity.HIGH,
    analyzer_type="static",
    description="Abstract interpreter for Rust MIR that finds panics and assertion violations",
    website="https://github.com/endorlabs/MIRAI",
    install_hint="cargo install --locked --git https://github.com/endorlabs/MIRAI.git mirai",
)


def parse_mirai(stdout: str, stderr: str) -> List[Dict[str, Any]]:
    return parse_rustc_diagnostics(f"{stdout}\n{stderr}", "mirai")


KANI_INFO = CheckerInfo(
    id="kani",
    name="Kani",
    language="rust",
    category="formal-verification",
    severity=Severity.HIGH,
    analyzer_type="verifier",
    description="Verification tool for Rust programs using bounded model checking",
    website="https://github.com/model-checking/kani",
    install_hint="cargo install --locked kani-verifier && cargo kani setup",
)


def parse_kani(stdout: str, stderr: str) -> List[Dict[str, Any]]:
    return parse_kani_output(stdout)


def create_checkers() -> List[Checker]:
    """Create the Rust checkers in declaration order."""
    return [
        ExternalToolChecker(
            LOCKBUD_INFO,
            ToolInvocation(binary="lockbud", args=("analyze",), parse_output=parse_lockbud),
        ),
        PatternChecker(RUDRA_INFO, RUDRA_RULES),
        PatternChecker(ERASAN_INFO, ERASAN_RULES),
        PatternChecker(SHUTTLE_INFO, SHUTTLE_RULES),
        ExternalToolChecker(
            MIRAI_INFO,
            ToolInvocation(binary="cargo", args=("mirai",), parse_output=parse_mirai, probe="cargo-mirai"),
        ),
        ExternalToolChecker(
            KANI_INFO,
            # Kani exits 1 when a harness fails verification.
            ToolInvocation(
                binary="cargo", args=("kani",), parse_output=parse_kani,
                ok_returncodes=(0, 1), probe="cargo-kani",
            ),
        ),
    ]
