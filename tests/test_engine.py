#!/usr/bin/env python3
"""
STYLECURO ENGINE SUITE
----------------------
Rule isolation, encoding fallback, I/O failures, the worker pool
(fail-fast included) and the findings aggregator.

Author: StyleCuro Team
Date: 2026-10-18
"""

import time

from stylecuro.cli.formatter import EXIT_LINT_FAILURE, EXIT_PASS, EXIT_TOOL_FAILURE, exit_code
from stylecuro.core.aggregator import FAIL, PASS, aggregate, status
from stylecuro.core.config import LintConfig
from stylecuro.core.engine import LintEngine, decode_source, lint_text, run_all
from stylecuro.core.models import (
    ENCODING_ERROR,
    ERROR,
    IO_ERROR,
    PARSE_ERROR,
    RULE_INTERNAL_ERROR,
    WARNING,
    Finding,
    Span,
)
from stylecuro.parsing.parser import parse
from stylecuro.rules.base import LINES, Rule
from stylecuro.rules.registry import RULES, get_rule

MESSY = """\
#widget {
    color: #FFFFFF;
    position: absolute;
}
"""


class BrokenRule(Rule):
    id = "Broken"
    description = "Always crashes"

    def check(self, document, config):
        raise RuntimeError("boom")


class SlowErrorRule(Rule):
    id = "SlowError"
    description = "Reports one error per file, slowly"
    scope = LINES

    def check(self, document, config):
        time.sleep(0.05)
        yield self.finding(document, config, "always", Span.at(1, 1))


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


# --- Rule isolation ---------------------------------------------------------

def test_crashing_rule_is_isolated():
    document = parse(MESSY)
    findings = run_all(document, LintConfig(), rules=(BrokenRule(), get_rule("IdSelector")))

    kinds = [f.rule_id for f in findings]
    assert RULE_INTERNAL_ERROR in kinds
    assert "IdSelector" in kinds
    crash = next(f for f in findings if f.rule_id == RULE_INTERNAL_ERROR)
    assert "Broken" in crash.message and "boom" in crash.message


def test_rule_order_does_not_change_findings():
    forward = lint_text(MESSY, rules=RULES)
    backward = lint_text(MESSY, rules=tuple(reversed(RULES)))

    assert forward == backward
    assert {f.rule_id for f in forward} >= {"IdSelector", "HexColor", "DeclarationOrder"}


def test_parse_error_is_reported_alongside_rule_findings():
    findings = lint_text(".a {\n    color: red; \n")

    kinds = [f.rule_id for f in findings]
    assert kinds.count(PARSE_ERROR) == 1
    assert "TrailingWhitespace" in kinds


def test_findings_stay_inside_document():
    class OutOfRange(Rule):
        id = "OutOfRange"

        def check(self, document, config):
            yield self.finding(document, config, "far away", Span(99, 0, 120, 0))

    findings = lint_text(".a {\n}\n", rules=(OutOfRange(),))
    span = findings[0].span

    assert span.line == span.end_line == 2
    assert span.column >= 1


# --- Encoding ---------------------------------------------------------------

def test_decode_source_reports_offending_byte():
    text, finding = decode_source(b".a {\n}\n\xff\n", "bad.css")

    assert "\ufffd" in text
    assert finding.rule_id == ENCODING_ERROR
    assert (finding.span.line, finding.span.column) == (3, 1)


def test_decode_source_accepts_bom():
    text, finding = decode_source(b"\xef\xbb\xbf.a {\n}\n", "bom.css")

    assert finding is None
    assert text.startswith(".a")


def test_undecodable_file_runs_line_rules_only(tmp_path):
    path = tmp_path / "bad.css"
    path.write_bytes(b"#widget {\n    color: red; \n}\n\xff")

    findings = LintEngine().lint_file(path)

    assert findings[0].rule_id == ENCODING_ERROR
    assert {f.rule_id for f in findings} == {ENCODING_ERROR, "TrailingWhitespace"}


# --- Files and the worker pool ----------------------------------------------

def test_missing_path_is_a_tool_failure(tmp_path):
    report = LintEngine().lint_paths([str(tmp_path / "missing.css")])

    assert [f.rule_id for f in report.findings] == [IO_ERROR]
    assert exit_code(report.findings) == EXIT_TOOL_FAILURE


def test_directory_discovery_filters_extensions(tmp_path):
    _write(tmp_path, "a.css", ".a {\n}\n")
    _write(tmp_path, "notes.txt", "#nope {\n}\n")
    (tmp_path / "nested").mkdir()
    _write(tmp_path / "nested", "b.less", ".b {\n}\n")

    files, missing = LintEngine().collect_files([str(tmp_path)])

    assert [f.name for f in files] == ["a.css", "b.less"]
    assert missing == []


def test_concurrent_matches_sequential(tmp_path):
    for i in range(6):
        _write(tmp_path, f"f{i}.css", MESSY if i % 2 else ".a {\n    color: red;\n}\n")

    engine = LintEngine(jobs=4)
    concurrent = engine.lint_paths([str(tmp_path)])
    sequential = engine.lint_sequential([str(tmp_path)])

    assert concurrent.findings == sequential.findings
    assert concurrent.status == sequential.status == FAIL
    assert len({f.path for f in concurrent.findings}) == 3


def test_fail_fast_cancels_pending_files(tmp_path):
    for i in range(5):
        _write(tmp_path, f"f{i}.css", ".a {\n}\n")

    engine = LintEngine(rules=(SlowErrorRule(),), jobs=1, fail_fast=True)
    report = engine.lint_paths([str(tmp_path)])

    assert report.cancelled >= 1
    assert len({f.path for f in report.findings}) < 5


def test_fail_fast_ignores_warnings(tmp_path):
    for i in range(3):
        _write(tmp_path, f"f{i}.css", ".a {\n    margin: 0px;\n}\n")

    report = LintEngine(jobs=1, fail_fast=True).lint_paths([str(tmp_path)])

    assert report.cancelled == 0
    assert report.status == PASS
    assert {f.severity for f in report.findings} == {WARNING}


def test_progress_callback_and_summary(tmp_path):
    _write(tmp_path, "a.css", MESSY)
    _write(tmp_path, "b.css", ".b {\n    margin: 0px;\n}\n")
    calls = []

    engine = LintEngine(jobs=2)
    report = engine.lint_paths([str(tmp_path)], progress_callback=lambda done, total: calls.append((done, total)))
    summary = engine.generate_summary(report)

    assert sorted(calls) == [(1, 2), (2, 2)]
    assert summary["total_files"] == 2
    assert summary["files_with_findings"] == 2
    assert summary["warnings"] >= 1
    assert summary["errors"] >= 1
    assert summary["status"] == FAIL


# --- Aggregation & exit codes -----------------------------------------------

def _f(rule_id, line, column, path="a.css", severity=ERROR, message="m"):
    return Finding(rule_id, severity, message, Span.at(line, column), path)


def test_aggregate_sorts_and_deduplicates():
    first = [_f("HexColor", 2, 5), _f("IdSelector", 1, 1)]
    second = [_f("HexColor", 2, 5), _f("Indentation", 1, 1, path="0.css")]

    merged = aggregate({"x": first, "y": second})

    assert [(f.path, f.rule_id) for f in merged] == [
        ("0.css", "Indentation"),
        ("a.css", "IdSelector"),
        ("a.css", "HexColor"),
    ]


def test_aggregate_is_order_independent():
    groups = [[_f("A", 3, 1)], [_f("B", 1, 1)], [_f("A", 3, 1, message="other")]]

    assert aggregate(groups) == aggregate(list(reversed(groups)))


def test_status_and_exit_codes():
    warning = _f("ZeroUnit", 1, 1, severity=WARNING)
    error = _f("IdSelector", 1, 1)
    crash = _f(RULE_INTERNAL_ERROR, 1, 1)

    assert status([]) == PASS
    assert status([warning]) == PASS
    assert status([warning, error]) == FAIL

    assert exit_code([warning]) == EXIT_PASS
    assert exit_code([error]) == EXIT_LINT_FAILURE
    assert exit_code([error, crash]) == EXIT_TOOL_FAILURE
