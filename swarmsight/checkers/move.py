"""Move checkers: the Move Prover."""

from typing import Any, Dict, List

from ..core.checker import Checker, CheckerInfo, Severity
from .diagnostics import parse_rustc_diagnostics
from .external_checker import ExternalToolChecker, ToolInvocation


MOVE_PROVER_INFO = CheckerInfo(
    id="move-prover",
    name="Move Prover",
    language="move",
    category="formal-verification",
    severity=Severity.HIGH,
    analyzer_type="verifier",
    description="Formal verification tool for Move smart contracts",
    website="https://github.com/move-language/move",
    install_hint="cargo install --git https://github.com/move-language/move move-cli",
)


def parse_move_prover(stdout: str, stderr: str) -> List[Dict[str, Any]]:
    # Prover errors are verification failures; compiler warnings are not reported.
    return parse_rustc_diagnostics(
        f"{stdout}\n{stderr}", "move-prover", severity="high", levels=("error",)
    )


def create_checkers() -> List[Checker]:
    """Create the Move checkers in declaration order."""
    return [
        ExternalToolChecker(
            MOVE_PROVER_INFO,
            ToolInvocation(
                binary="move", args=("prove",), parse_output=parse_move_prover, ok_returncodes=(0, 1),
            ),
        ),
    ]
