"""Diagnostics Module - Parsers that turn external tool output into finding records.

Every parser returns a list of plain dictionaries that ``Finding.from_record``
normalizes. Parsers raise ``ValueError`` when the output cannot be
interpreted at all; a run that reports no problems yields an empty list.
"""

import json
import re
from typing import Any, Dict, List, Optional, Sequence
from xml.etree import ElementTree

# error[LOCKBUD_UAF]: Use-after-free detected
HEADER_PATTERN = re.compile(r"^\s*(error|warning)(?:\[([^\]]+)\])?:\s*(.+?)\s*$")
# --> src/main.rs:42:10   (rustc)   or   ┌─ sources/coin.move:12:9   (codespan)
LOCATION_PATTERN = re.compile(r"^\s*(?:-->|┌─)\s*(.+?):(\d+):(\d+)\s*$")
CODE_LINE_PATTERN = re.compile(r"^\s*(\d+)\s*│?\|?\s?(.*)$")
NOTE_PATTERN = re.compile(r"^\s*=\s*(?:note|help):\s*(.+?)\s*$")
SUMMARY_PATTERN = re.compile(
    r"^(aborting due to|could not compile|\d+ (warning|error)s? (emitted|generated))",
    re.IGNORECASE,
)


def parse_rustc_diagnostics(
    output: str,
    tool: str,
    severity: Optional[str] = None,
    recommendations: Optional[Dict[str, str]] = None,
    levels: Sequence[str] = ("error", "warning"),
    require_code: bool = False,
) -> List[Dict[str, Any]]:
    """Parse rustc-style diagnostics.

    Used for lockbud, MIRAI and the Move prover, which all print
    ``level[CODE]: message`` headers followed by a ``-->`` (or ``┌─``)
    location, source lines and ``= note:`` lines. Compiler summary lines and
    diagnostics without a location are dropped.

    Args:
        output: Combined tool output
        tool: Tool id used for default rule names
        severity: Severity forced on every record (default: from the header level)
        recommendations: Mapping of code substring to recommendation text
        levels: Header levels to report; other headers are skipped
        require_code: Skip headers without a ``[CODE]``, such as plain compiler warnings

    Returns:
        List of finding records
    """
    records: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    notes: List[str] = []

    def flush() -> None:
        if current is not None and current.get("file"):
            if notes:
                current["description"] = "\n\n".join([current["title"]] + notes)
            records.append(current)

    for line in output.splitlines():
        header = HEADER_PATTERN.match(line)
        if header:
            flush()
            notes = []
            level, code, message = header.groups()
            if level not in levels or (require_code and not code) or SUMMARY_PATTERN.match(message):
                current = None
                continue
            rule = code or f"{tool}-{level}"
            current = {
                "rule": rule,
                "title": message,
                "description": message,
                "severity": severity or level,
                "recommendation": _recommendation_for(rule, recommendations),
            }
            continue

        if current is None:
            continue

        location = LOCATION_PATTERN.match(line)
        if location:
            if not current.get("file"):
                current["file"] = location.group(1)
                current["line"] = int(location.group(2))
                current["column"] = int(location.group(3))
            continue

        note = NOTE_PATTERN.match(line)
        if note:
            notes.append(note.group(1))
            continue

        code_line = CODE_LINE_PATTERN.match(line)
        if code_line and "code_snippet" not in current and code_line.group(2).strip():
            if int(code_line.group(1)) == current.get("line"):
                current["code_snippet"] = code_line.group(2).strip()

    flush()
    return records


def _recommendation_for(rule: str, recommendations: Optional[Dict[str, str]]) -> str:
    if not recommendations:
        return ""
    upper = rule.upper()
    for key, text in recommendations.items():
        if key != "*" and key in upper:
            return text
    return recommendations.get("*", "")


KANI_CHECK_PATTERN = re.compile(r"^Check \d+:\s*(\S+)")
KANI_FIELD_PATTERN = re.compile(r"^\s*-\s*(Status|Description|Location):\s*(.*)$")
KANI_LOCATION_PATTERN = re.compile(r"^(.+?):(\d+):(\d+)(?:\s+in function\s+(\S+))?")
KANI_HARNESS_PATTERN = re.compile(r"^Checking harness\s+(\S+?)\.{0,3}$")


def parse_kani_output(output: str) -> List[Dict[str, Any]]:
    """Parse ``cargo kani`` results into one record per failed check.

    Args:
        output: Kani stdout

    Returns:
        List of finding records for checks whose status is FAILURE
    """
    records: List[Dict[str, Any]] = []
    harness: Optional[str] = None
    check: Optional[Dict[str, str]] = None

    def flush() -> None:
        if check and check.get("status", "").upper() == "FAILURE":
            records.append(_kani_record(check, harness))

    for line in output.splitlines():
        harness_match = KANI_HARNESS_PATTERN.match(line.strip())
        if harness_match:
            flush()
            check = None
            harness = harness_match.group(1)
            continue

        check_match = KANI_CHECK_PATTERN.match(line.strip())
        if check_match:
            flush()
            check = {"name": check_match.group(1)}
            continue

        field_match = KANI_FIELD_PATTERN.match(line)
        if field_match and check is not None:
            check[field_match.group(1).lower()] = field_match.group(2).strip().strip('"')

    flush()
    return records


def _kani_record(check: Dict[str, str], harness: Optional[str]) -> Dict[str, Any]:
    name = check["name"]
    # foo.assertion.1 -> assertion
    parts = name.split(".")
    property_class = parts[-2] if len(parts) >= 2 else name
    description = check.get("description") or f"Verification failed for {name}"

    record: Dict[str, Any] = {
        "rule": f"kani-{property_class}",
        "title": description,
        "description": description,
        "severity": "high",
        "recommendation": "Fix the code path that violates the property, or tighten the harness assumptions",
        "metadata": {"check": name, "harness": harness},
    }

    location = KANI_LOCATION_PATTERN.match(check.get("location", ""))
    if location:
        record["file"] = location.group(1)
        record["line"] = int(location.group(2))
        record["column"] = int(location.group(3))
        if location.group(4):
            record["metadata"]["function"] = location.group(4)
    return record


def parse_slither_json(output: str) -> List[Dict[str, Any]]:
    """Parse ``slither --json -`` output.

    Args:
        output: Slither stdout (a JSON document)

    Returns:
        List of finding records, one per detector result

    Raises:
        ValueError: If the output is not JSON or slither reports a failure
    """
    if not output.strip():
        return []

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid slither JSON output: {e}") from e

    if not data.get("success", True):
        raise ValueError(data.get("error") or "slither reported a failure")

    records: List[Dict[str, Any]] = []
    for detector in (data.get("results") or {}).get("detectors", []):
        description = (detector.get("description") or "").strip()
        record: Dict[str, Any] = {
            "rule": detector.get("check", "slither-finding"),
            "title": description.splitlines()[0] if description else detector.get("check", ""),
            "description": description,
            "severity": detector.get("impact"),
            "confidence": (detector.get("confidence") or "").lower() or None,
        }

        for element in detector.get("elements", []):
            mapping = element.get("source_mapping") or {}
            lines = mapping.get("lines") or []
            filename = mapping.get("filename_relative") or mapping.get("filename_short")
            if filename:
                record["file"] = filename
                record["line"] = lines[0] if lines else 1
                record["column"] = mapping.get("starting_column", 1)
                break

        records.append(record)

    return records


def parse_cppcheck_xml(output: str) -> List[Dict[str, Any]]:
    """Parse ``cppcheck --xml`` output (written to stderr by cppcheck).

    Args:
        output: XML report (version 2)

    Returns:
        List of finding records; errors without a location are skipped

    Raises:
        ValueError: If the XML cannot be parsed
    """
    start = output.find("<?xml")
    if start < 0:
        start = output.find("<results")
    if start < 0:
        return []

    try:
        root = ElementTree.fromstring(output[start:])
    except ElementTree.ParseError as e:
        raise ValueError(f"Invalid cppcheck XML output: {e}") from e

    records: List[Dict[str, Any]] = []
    for error in root.iter("error"):
        location = error.find("location")
        if location is None:
            continue

        record: Dict[str, Any] = {
            "rule": error.get("id", "cppcheck-finding"),
            "title": error.get("msg", ""),
            "description": error.get("verbose") or error.get("msg", ""),
            "severity": error.get("severity"),
            "file": location.get("file", ""),
            "line": location.get("line"),
            "column": location.get("column"),
        }
        if error.get("cwe"):
            record["metadata"] = {"cwe": f"CWE-{error.get('cwe')}"}
        records.append(record)

    return records
