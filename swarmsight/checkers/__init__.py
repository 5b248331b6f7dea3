"""Checker implementations for SwarmSight."""

from typing import List

from ..core.checker import Checker
from ..core.parallel_executor import CheckerRegistry
from . import cpp, go, move, rust, solidity
from .external_checker import ExternalToolChecker, ToolInvocation
from .pattern_checker import PatternChecker

__all__ = [
    "ExternalToolChecker",
    "ToolInvocation",
    "PatternChecker",
    "default_checkers",
    "default_registry",
]


def default_checkers() -> List[Checker]:
    """Create every built-in checker in declaration order."""
    checkers: List[Checker] = []
    for module in (rust, solidity, go, cpp, move):
        checkers.extend(module.create_checkers())
    return checkers


def default_registry() -> CheckerRegistry:
    """Create a registry holding every built-in checker."""
    return CheckerRegistry(default_checkers())
