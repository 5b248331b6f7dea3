"""Tests for external tool output parsers."""

import json

import pytest

from swarmsight.checkers.diagnostics import (
    parse_cppcheck_xml,
    parse_kani_output,
    parse_rustc_diagnostics,
    parse_slither_json,
)
from swarmsight.checkers.move import parse_move_prover
from swarmsight.checkers.rust import LOCKBUD_INFO, parse_lockbud
from swarmsight.core.checker import Finding, Severity
from swarmsight.core.scorer import Scorer


LOCKBUD_OUTPUT = """\
error[LOCKBUD_UAF]: Use-after-free detected
  --> src/main.rs:42:10
   |
42 |     let y = *ptr;
   |             ^^^^
   = note: pointer freed at src/main.rs:40:5

warning: unused variable: `x`
 --> src/lib.rs:3:9
  |
3 |     let x = 5;
  |         ^

error[LOCKBUD_ATOMICITY_VIOLATION]: Atomicity violation on counter
 --> src/lib.rs:7:5

warning: unlocated problem
error: aborting due to 2 previous errors
"""

CARGO_WARNINGS = """\
warning: unused variable: `x`
 --> src/main.rs:3:9
  |
3 |     let x = 5;
  |         ^ help: if this is intentional, prefix it with an underscore: `_x`
  |
  = note: `#[warn(unused_variables)]` on by default

error: could not find `Cargo.toml` in `/tmp/project` or any parent directory
 --> Cargo.toml:1:1
"""

KANI_OUTPUT = """\
Checking harness verify_add...
RESULTS:
Check 1: add.assertion.1
\t - Status: FAILURE
\t - Description: "attempt to add with overflow"
\t - Location: src/lib.rs:10:5 in function add

Check 2: add.pointer_dereference.1
\t - Status: SUCCESS
\t - Description: "dereference failure: pointer NULL"
\t - Location: src/lib.rs:12:9 in function add

VERIFICATION:- FAILED
"""

MOVE_OUTPUT = """\
error: abort not covered by any of the `aborts_if` clauses
   ┌─ sources/coin.move:12:9
   │
12 │         assert!(amount > 0, 1);
   │         ^^^^^^^^^^^^^^^^^^^^^^
"""

SLITHER_OUTPUT = {
    "success": True,
    "error": None,
    "results": {
        "detectors": [
            {
                "check": "reentrancy-eth",
                "impact": "High",
                "confidence": "Medium",
                "description": "Reentrancy in Bank.withdraw()\n\tExternal calls: ...",
                "elements": [
                    {
                        "type": "function",
                        "source_mapping": {
                            "filename_relative": "contracts/Bank.sol",
                            "lines": [20, 21, 22],
                            "starting_column": 5,
                        },
                    }
                ],
            },
            {
                "check": "solc-version",
                "impact": "Informational",
                "confidence": "High",
                "description": "Pragma version ^0.8.0 allows old versions",
                "elements": [],
            },
        ]
    },
}

CPPCHECK_OUTPUT = """\
Checking main.c ...
<?xml version="1.0" encoding="UTF-8"?>
<results version="2">
    <cppcheck version="2.13.0"/>
    <errors>
        <error id="bufferAccessOutOfBounds" severity="error" msg="Buffer is accessed out of bounds: buf" verbose="Buffer is accessed out of bounds: buf" cwe="788">
            <location file="main.c" line="8" column="5"/>
        </error>
        <error id="missingInclude" severity="information" msg="Include file not found"/>
        <error id="variableScope" severity="style" msg="The scope of the variable 'i' can be reduced.">
            <location file="util.c" line="3" column="9"/>
        </error>
    </errors>
</results>
"""


class TestRustcDiagnostics:
    """Tests for rustc-style diagnostic parsing."""

    def test_lockbud_output(self):
        """Test headers, locations, snippets and notes are captured."""
        records = parse_lockbud(LOCKBUD_OUTPUT, "")

        assert len(records) == 2
        uaf = records[0]
        assert uaf["rule"] == "LOCKBUD_UAF"
        assert uaf["title"] == "Use-after-free detected"
        assert uaf["file"] == "src/main.rs"
        assert uaf["line"] == 42
        assert uaf["column"] == 10
        assert uaf["code_snippet"] == "let y = *ptr;"
        assert "pointer freed at src/main.rs:40:5" in uaf["description"]
        assert uaf["severity"] == "critical"
        assert uaf["recommendation"].startswith("Ensure memory is not accessed after being freed")

        atomicity = records[1]
        assert atomicity["rule"] == "LOCKBUD_ATOMICITY_VIOLATION"
        assert atomicity["file"] == "src/lib.rs"
        assert atomicity["recommendation"].startswith("Review the code carefully")

    def test_lockbud_ignores_compiler_output(self):
        """Test uncoded compiler warnings and errors are not lockbud findings."""
        assert parse_lockbud("", CARGO_WARNINGS) == []

        records = parse_lockbud(CARGO_WARNINGS, LOCKBUD_OUTPUT)
        assert [r["rule"] for r in records] == ["LOCKBUD_UAF", "LOCKBUD_ATOMICITY_VIOLATION"]
        assert all(r["severity"] == "critical" for r in records)

    def test_compiler_warnings_do_not_affect_score(self):
        """Test a lockbud run with only cargo warnings keeps a perfect score."""
        findings = [Finding.from_record(r, LOCKBUD_INFO) for r in parse_lockbud("", CARGO_WARNINGS)]
        counts = {severity: 0 for severity in Severity}
        for finding in findings:
            counts[finding.severity] += 1

        score = Scorer().calculate(counts)

        assert score.score == 100
        assert score.rating == "Excellent"

    def test_severity_from_level(self):
        """Test the header level is used when no severity is forced."""
        records = parse_rustc_diagnostics(LOCKBUD_OUTPUT, "mirai")

        assert [r["severity"] for r in records] == ["error", "warning", "error"]
        assert records[1]["rule"] == "mirai-warning"
        assert records[0]["recommendation"] == ""

    def test_empty_output(self):
        """Test a clean run yields no records."""
        assert parse_rustc_diagnostics("", "lockbud") == []
        assert parse_rustc_diagnostics("    Finished dev [unoptimized] target(s)\n", "lockbud") == []

    def test_records_normalize(self):
        """Test records become findings with the forced severity."""
        finding = Finding.from_record(parse_lockbud(LOCKBUD_OUTPUT, "")[0], LOCKBUD_INFO)

        assert finding.severity is Severity.CRITICAL
        assert finding.checker_id == "lockbud"
        assert finding.rule_id == "LOCKBUD_UAF"

    def test_move_prover_codespan_location(self):
        """Test codespan-style locations from the Move prover."""
        records = parse_move_prover(MOVE_OUTPUT, "")

        assert len(records) == 1
        assert records[0]["file"] == "sources/coin.move"
        assert records[0]["line"] == 12
        assert records[0]["column"] == 9
        assert records[0]["severity"] == "high"
        assert records[0]["code_snippet"] == "assert!(amount > 0, 1);"

    def test_move_prover_skips_warnings(self):
        """Test compiler warnings from the Move toolchain are not reported."""
        output = (
            "warning: unused alias\n"
            "   ┌─ sources/coin.move:3:15\n"
            "   │\n"
            " 3 │     use std::signer;\n"
            "\n" + MOVE_OUTPUT
        )
        records = parse_move_prover(output, "")

        assert [r["file"] for r in records] == ["sources/coin.move"]
        assert [r["line"] for r in records] == [12]


class TestKaniOutput:
    """Tests for Kani result parsing."""

    def test_only_failures_reported(self):
        """Test one record per failed check."""
        records = parse_kani_output(KANI_OUTPUT)

        assert len(records) == 1
        record = records[0]
        assert record["rule"] == "kani-assertion"
        assert record["title"] == "attempt to add with overflow"
        assert record["file"] == "src/lib.rs"
        assert record["line"] == 10
        assert record["column"] == 5
        assert record["severity"] == "high"
        assert record["metadata"] == {"check": "add.assertion.1", "harness": "verify_add", "function": "add"}

    def test_all_checks_pass(self):
        """Test a fully verified run yields nothing."""
        output = KANI_OUTPUT.replace("FAILURE", "SUCCESS")
        assert parse_kani_output(output) == []


class TestSlitherJson:
    """Tests for slither JSON parsing."""

    def test_detectors(self):
        """Test each detector becomes a record."""
        records = parse_slither_json(json.dumps(SLITHER_OUTPUT))

        assert len(records) == 2
        reentrancy = records[0]
        assert reentrancy["rule"] == "reentrancy-eth"
        assert reentrancy["title"] == "Reentrancy in Bank.withdraw()"
        assert reentrancy["severity"] == "High"
        assert reentrancy["confidence"] == "medium"
        assert reentrancy["file"] == "contracts/Bank.sol"
        assert reentrancy["line"] == 20
        assert reentrancy["column"] == 5

        assert "file" not in records[1]
        assert Severity.parse(records[1]["severity"]) is Severity.INFO

    def test_empty_output(self):
        """Test empty stdout yields no records."""
        assert parse_slither_json("") == []

    def test_invalid_json(self):
        """Test garbage output raises ValueError."""
        with pytest.raises(ValueError):
            parse_slither_json("Traceback (most recent call last):")

    def test_reported_failure(self):
        """Test slither's own failure flag raises ValueError."""
        with pytest.raises(ValueError, match="compilation failed"):
            parse_slither_json(json.dumps({"success": False, "error": "compilation failed"}))


class TestCppcheckXml:
    """Tests for cppcheck XML parsing."""

    def test_errors_with_locations(self):
        """Test located errors become records and others are skipped."""
        records = parse_cppcheck_xml(CPPCHECK_OUTPUT)

        assert [r["rule"] for r in records] == ["bufferAccessOutOfBounds", "variableScope"]
        overflow = records[0]
        assert overflow["file"] == "main.c"
        assert overflow["line"] == "8"
        assert overflow["severity"] == "error"
        assert overflow["metadata"] == {"cwe": "CWE-788"}
        assert "metadata" not in records[1]

    def test_no_xml(self):
        """Test output without an XML report yields nothing."""
        assert parse_cppcheck_xml("Checking main.c ...\n") == []

    def test_broken_xml(self):
        """Test truncated XML raises ValueError."""
        with pytest.raises(ValueError):
            parse_cppcheck_xml('<?xml version="1.0"?><results><errors>')
