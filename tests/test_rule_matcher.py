"""Tests for the rule matcher."""

import re

from swarmsight.core.checker import Severity
from swarmsight.core.rule_matcher import Rule, RuleMatcher, evaluate


def rule(pattern, **kwargs) -> Rule:
    return Rule(id=kwargs.pop("id", "r"), pattern=pattern, severity=Severity.MEDIUM, message="m", **kwargs)


class ExplodingPattern:
    """Matcher object that fails on every call."""

    def finditer(self, text):
        raise RuntimeError("matcher exploded")


class TestEvaluate:
    """Tests for evaluate()."""

    def test_empty_text(self):
        """Test empty text yields no matches."""
        assert evaluate(rule(r"unwrap\(\)"), "") == []

    def test_line_and_column_are_one_based(self):
        """Test match positions."""
        text = "fn main() {\n    let x = y.unwrap();\n}\n"
        matches = evaluate(rule(r"unwrap\(\)"), text)

        assert len(matches) == 1
        assert matches[0].line == 2
        assert matches[0].column == 15
        assert matches[0].text == "unwrap()"

    def test_multiple_matches_on_one_line(self):
        """Test every non-overlapping match in a line is reported."""
        matches = evaluate(rule(r"unwrap\(\)"), "a.unwrap().unwrap()")

        assert [(m.line, m.column) for m in matches] == [(1, 3), (1, 12)]

    def test_matches_on_several_lines(self):
        """Test matches on different lines are all reported."""
        text = "x.unwrap()\nnothing\ny.unwrap()"
        matches = evaluate(rule(r"unwrap\(\)"), text)

        assert [m.line for m in matches] == [1, 3]

    def test_zero_length_matches_ignored(self):
        """Test patterns that can match the empty string."""
        assert evaluate(rule(r"x*"), "abc") == []

    def test_multiline_rule_reports_block_start(self):
        """Test a multiline rule reports where the block starts."""
        text = "use std::sync;\n\n  static mut COUNTER: u32 = 0;\nconst X: u8 = 1;\n\nfn main() {}\n"
        matches = evaluate(rule(r"static\s+mut\s+\w+[\s\S]*?(?=fn|\n\n|$)", multiline=True), text)

        assert len(matches) == 1
        assert matches[0].line == 3
        assert matches[0].column == 3
        assert "const X" in matches[0].text

    def test_compiled_pattern_accepted(self):
        """Test a precompiled pattern is used as-is."""
        matches = evaluate(rule(re.compile(r"TODO", re.IGNORECASE)), "// todo: fix")
        assert len(matches) == 1

    def test_flags_applied(self):
        """Test flags are used when compiling a pattern string."""
        matches = evaluate(rule(r"condvar", flags=re.IGNORECASE), "let c = Condvar::new();")
        assert matches[0].column == 9


class TestRuleMatcher:
    """Tests for RuleMatcher class."""

    def test_results_in_rule_order(self):
        """Test matches are grouped by rule in rule order."""
        rules = [rule(r"b", id="second"), rule(r"a", id="first")]
        results, warnings = RuleMatcher().match_file(rules, "a b\nb a")

        assert [r.id for r, _ in results] == ["second", "second", "first", "first"]
        assert warnings == []

    def test_malformed_pattern_is_isolated(self):
        """Test a bad pattern string aborts only its own rule."""
        rules = [rule(r"(unclosed", id="broken"), rule(r"ok", id="good")]
        results, warnings = RuleMatcher().match_file(rules, "ok", "demo.rs")

        assert [r.id for r, _ in results] == ["good"]
        assert len(warnings) == 1
        assert "broken" in warnings[0]
        assert "demo.rs" in warnings[0]

    def test_raising_matcher_is_isolated(self):
        """Test a matcher that raises does not stop other rules."""
        rules = [rule(ExplodingPattern(), id="explodes"), rule(r"ok", id="good")]
        results, warnings = RuleMatcher().match_file(rules, "ok ok")

        assert len(results) == 2
        assert "matcher exploded" in warnings[0]
