#!/usr/bin/env python3
"""
STYLECURO CLI SUITE
-------------------
End-to-end runs through StyleCuroCLI: report formats on stdout,
configuration handling and the 0 / 1 / 2 exit code contract.

Author: StyleCuro Team
Date: 2026-10-18
"""

import json

import pytest

from stylecuro.cli.formatter import EXIT_LINT_FAILURE, EXIT_PASS, EXIT_TOOL_FAILURE, format_line, render
from stylecuro.cli.main import StyleCuroCLI, main
from stylecuro.core.models import ERROR, Finding, Span

CLEAN = ".tweet {\n    margin: 0;\n}\n"
DIRTY = "#widget {\n    color: blue;\n}\n"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """An isolated working directory so no stray config file is discovered."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _lint(*args):
    return StyleCuroCLI().run(["lint", *args])


def test_clean_file_exits_zero(workspace, capsys):
    (workspace / "clean.css").write_text(CLEAN, encoding="utf-8")

    assert _lint("clean.css", "--format", "json") == EXIT_PASS
    assert json.loads(capsys.readouterr().out) == []


def test_json_report(workspace, capsys):
    (workspace / "dirty.css").write_text(DIRTY, encoding="utf-8")

    assert _lint("dirty.css", "--format", "json") == EXIT_LINT_FAILURE
    records = json.loads(capsys.readouterr().out)

    assert records == [{
        "path": "dirty.css",
        "line": 1,
        "column": 1,
        "end_line": 1,
        "end_column": 7,
        "severity": "error",
        "rule": "IdSelector",
        "message": "ID selector '#widget'; use [id=\"widget\"] instead",
    }]


def test_human_report(workspace, capsys):
    (workspace / "dirty.css").write_text(DIRTY, encoding="utf-8")

    assert _lint("dirty.css", "--no-summary") == EXIT_LINT_FAILURE
    out = capsys.readouterr().out

    assert "dirty.css:1:1: [error] ID selector '#widget'" in out
    assert "(IdSelector)" in out
    assert "Summary Report" not in out


def test_human_report_with_summary(workspace, capsys):
    (workspace / "clean.css").write_text(CLEAN, encoding="utf-8")

    assert _lint("clean.css") == EXIT_PASS
    out = capsys.readouterr().out
    assert "Summary Report" in out
    assert "PASS" in out


def test_missing_file_exits_two(workspace, capsys):
    assert _lint("missing.css", "--format", "json") == EXIT_TOOL_FAILURE
    records = json.loads(capsys.readouterr().out)
    assert records[0]["rule"] == "IOError"


def test_bad_config_exits_two(workspace, capsys):
    (workspace / "clean.css").write_text(CLEAN, encoding="utf-8")
    (workspace / ".stylecuro.yaml").write_text("indent-width: nope\n", encoding="utf-8")

    assert _lint("clean.css", "--format", "json") == EXIT_TOOL_FAILURE
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Configuration error" in captured.err


def test_unknown_config_key_is_only_a_warning(workspace, capsys):
    (workspace / "clean.css").write_text(CLEAN, encoding="utf-8")
    (workspace / ".stylecuro.yaml").write_text("indentation-width: 2\n", encoding="utf-8")

    assert _lint("clean.css", "--format", "json") == EXIT_PASS
    records = json.loads(capsys.readouterr().out)
    assert [(r["rule"], r["severity"], r["line"]) for r in records] == [("UnknownConfigKey", "warning", 1)]


def test_option_override_and_explicit_config(workspace, capsys):
    (workspace / "dirty.css").write_text(DIRTY, encoding="utf-8")
    (workspace / "lint.json").write_text('{"rules": {"IdSelector": "warning"}}', encoding="utf-8")

    assert _lint("dirty.css", "--config", "lint.json", "--format", "json") == EXIT_PASS
    assert json.loads(capsys.readouterr().out)[0]["severity"] == "warning"

    assert _lint("dirty.css", "-o", "rules={IdSelector: off}", "--format", "json") == EXIT_PASS
    assert json.loads(capsys.readouterr().out) == []


def test_bad_override_exits_two(workspace, capsys):
    (workspace / "clean.css").write_text(CLEAN, encoding="utf-8")

    assert _lint("clean.css", "-o", "indent-width") == EXIT_TOOL_FAILURE


def test_rules_command_lists_every_rule(capsys):
    assert StyleCuroCLI().run(["rules"]) == EXIT_PASS
    out = capsys.readouterr().out
    assert "NamingConvention" in out
    assert "DeclarationOrder" in out


def test_no_arguments_prints_help(capsys):
    assert StyleCuroCLI().run([]) == EXIT_PASS
    assert "usage: stylecuro" in capsys.readouterr().out


def test_main_exits_with_code(workspace):
    (workspace / "dirty.css").write_text(DIRTY, encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["lint", "dirty.css", "--format", "json"])
    assert excinfo.value.code == EXIT_LINT_FAILURE


def test_plain_text_rendering():
    finding = Finding("HexColor", ERROR, "Hex color '#FFF' should be written '#fff'", Span.at(2, 12, 4), "a.css")

    assert format_line(finding) == "a.css:2:12: [error] Hex color '#FFF' should be written '#fff' (HexColor)"
    assert render([finding]) == format_line(finding)
    with pytest.raises(ValueError):
        render([finding], "xml")


def test_json_rendering_includes_related_span():
    finding = Finding("DeclarationOrder", ERROR, "m", Span.at(3, 5), "a.css", related=Span.at(2, 5))

    [record] = json.loads(render([finding], "json"))
    assert record["related"] == {"line": 2, "column": 5}
