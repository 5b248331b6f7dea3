"""Options Module - Scan configuration and config file loading."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import yaml

from .checker import Severity


DEFAULT_EXCLUDES: Tuple[str, ...] = ("node_modules", "target", "build", "dist")
DEFAULT_TIMEOUT = 300.0
ALL_CHECKERS = "all"


class ConfigurationError(ValueError):
    """Fatal configuration problem detected before any checker runs."""


class UnsupportedFormatError(ConfigurationError):
    """Requested report format has no reporter."""


@dataclass(frozen=True)
class ScanOptions:
    """Read-only scan configuration passed to every component."""
    project_path: str
    checkers: Union[str, Tuple[str, ...]] = ALL_CHECKERS
    severity_floor: Severity = Severity.LOW
    exclude: Tuple[str, ...] = DEFAULT_EXCLUDES
    timeout: float = DEFAULT_TIMEOUT
    verbose: bool = False
    output_format: str = "json"
    output_file: Optional[str] = None
    ci: bool = False
    fail_on: Severity = Severity.CRITICAL
    analyzer_types: Tuple[str, ...] = ()
    max_concurrency: Optional[int] = None
    tool_args: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def selects_all(self) -> bool:
        """Whether every checker is selected."""
        return self.checkers == ALL_CHECKERS

    def args_for(self, checker_id: str) -> Tuple[str, ...]:
        """Get extra command-line arguments configured for a checker."""
        return tuple(self.tool_args.get(checker_id, ()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to dictionary for the report metadata echo."""
        return {
            "project_path": self.project_path,
            "checkers": self.checkers if self.selects_all else list(self.checkers),
            "severity": self.severity_floor.value,
            "exclude": list(self.exclude),
            "timeout": self.timeout,
            "verbose": self.verbose,
            "output_format": self.output_format,
            "output_file": self.output_file,
            "ci": self.ci,
            "fail_on": self.fail_on.value,
            "analyzer_types": list(self.analyzer_types),
            "max_concurrency": self.max_concurrency,
            "tool_args": {k: list(v) for k, v in self.tool_args.items()},
        }


def split_list(value: Union[None, str, Iterable[str]]) -> Tuple[str, ...]:
    """Split a comma-separated string (or iterable) into trimmed items."""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(v) for v in value]
    return tuple(item.strip() for item in items if item and item.strip())


def parse_severity(value: Any, option: str) -> Severity:
    """Parse a user-supplied severity, rejecting unknown values.

    Args:
        value: Severity name
        option: Option name used in the error message

    Returns:
        Parsed Severity

    Raises:
        ConfigurationError: If the value is not one of the five severities
    """
    severity = Severity.parse(value)
    if severity is Severity.UNKNOWN or str(value).strip().lower() != severity.value:
        choices = ", ".join(s.value for s in Severity.known())
        raise ConfigurationError(f"Invalid {option} '{value}' (expected one of: {choices})")
    return severity


def _parse_checkers(value: Any) -> Union[str, Tuple[str, ...]]:
    items = split_list(value)
    if not items or ALL_CHECKERS in (i.lower() for i in items):
        return ALL_CHECKERS
    return tuple(i.lower() for i in items)


def _parse_tool_args(value: Any) -> Dict[str, Tuple[str, ...]]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError("tool_args must be a mapping of checker id to argument list")
    parsed = {}
    for checker_id, args in value.items():
        if isinstance(args, str):
            args = args.split()
        parsed[str(checker_id)] = tuple(str(a) for a in args)
    return parsed


def _positive_number(value: Any, option: str, cast=float):
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid {option} '{value}'") from None
    if number <= 0:
        raise ConfigurationError(f"{option} must be positive, got {value}")
    return number


def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML configuration file.

    Keys may use dashes or underscores (``fail-on`` and ``fail_on``).

    Args:
        config_path: Path to the YAML file

    Returns:
        Mapping of normalized option names to raw values

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    return {str(k).replace("-", "_"): v for k, v in data.items()}


_ALIASES = {
    "severity": "severity_floor",
    "format": "output_format",
    "output": "output_file",
    "analyzer_type": "analyzer_types",
    "concurrency": "max_concurrency",
}


def load_options(
    project_path: Union[str, Path],
    config_path: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> ScanOptions:
    """Build ScanOptions from defaults, an optional config file and overrides.

    Overrides whose value is None are ignored so that unset CLI flags do not
    mask config file values.

    Args:
        project_path: Project root to scan
        config_path: Optional YAML config file
        **overrides: Explicit option values (highest precedence)

    Returns:
        Validated ScanOptions

    Raises:
        ConfigurationError: On any invalid value
    """
    raw: Dict[str, Any] = {}
    if config_path:
        raw.update(load_config_file(config_path))
    raw.update({k: v for k, v in overrides.items() if v is not None})
    raw = {_ALIASES.get(k, k): v for k, v in raw.items()}

    known = {f.name for f in fields(ScanOptions)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {"project_path": str(Path(project_path).resolve())}
    raw.pop("project_path", None)

    if "checkers" in raw:
        values["checkers"] = _parse_checkers(raw["checkers"])
    if "severity_floor" in raw:
        values["severity_floor"] = parse_severity(raw["severity_floor"], "severity")
    if "fail_on" in raw:
        values["fail_on"] = parse_severity(raw["fail_on"], "fail-on")
    if "exclude" in raw:
        values["exclude"] = split_list(raw["exclude"])
    if "analyzer_types" in raw:
        values["analyzer_types"] = tuple(t.lower() for t in split_list(raw["analyzer_types"]))
    if "timeout" in raw:
        values["timeout"] = _positive_number(raw["timeout"], "timeout")
    if "max_concurrency" in raw:
        values["max_concurrency"] = _positive_number(raw["max_concurrency"], "max-concurrency", int)
    if "tool_args" in raw:
        values["tool_args"] = _parse_tool_args(raw["tool_args"])
    if "output_format" in raw:
        values["output_format"] = str(raw["output_format"]).strip().lower()
    if "output_file" in raw:
        values["output_file"] = str(raw["output_file"])
    for flag in ("verbose", "ci"):
        if flag in raw:
            values[flag] = bool(raw[flag])

    return ScanOptions(**values)
