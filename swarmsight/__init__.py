"""SwarmSight - Multi-language security scanning orchestrator."""

__version__ = "1.0.0"
TOOL_NAME = "SwarmSight"

__all__ = ["__version__", "TOOL_NAME"]
