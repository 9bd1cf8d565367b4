# src/stylecuro/cli/formatter.py
import json
from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from stylecuro.core.aggregator import FAIL, status
from stylecuro.core.models import ERROR, TOOL_FAILURE_KINDS, Finding

HUMAN = "human"
JSON = "json"
FORMATS = (HUMAN, JSON)

EXIT_PASS = 0
EXIT_LINT_FAILURE = 1
EXIT_TOOL_FAILURE = 2


def format_line(finding: Finding) -> str:
    """`path:line:col: [severity] message (rule-id)`"""
    return (f"{finding.path}:{finding.span.line}:{finding.span.column}: "
            f"[{finding.severity}] {finding.message} ({finding.rule_id})")


def to_record(finding: Finding) -> Dict[str, Any]:
    record = {
        "path": finding.path,
        "line": finding.span.line,
        "column": finding.span.column,
        "end_line": finding.span.end_line,
        "end_column": finding.span.end_column,
        "severity": finding.severity,
        "rule": finding.rule_id,
        "message": finding.message,
    }
    if finding.related is not None:
        record["related"] = {"line": finding.related.line, "column": finding.related.column}
    return record


def render(findings: Sequence[Finding], fmt: str = HUMAN) -> str:
    """Renders findings as line-oriented text or as a JSON array of records."""
    if fmt == JSON:
        return json.dumps([to_record(f) for f in findings], indent=2)
    if fmt != HUMAN:
        raise ValueError(f"Unknown output format '{fmt}'")
    return "\n".join(format_line(f) for f in findings)


def exit_code(findings: Sequence[Finding]) -> int:
    """
    0 when the run passes, 1 when error-severity lint findings exist and
    2 when the tool itself failed (unreadable file, crashed rule).
    """
    if any(f.rule_id in TOOL_FAILURE_KINDS for f in findings):
        return EXIT_TOOL_FAILURE
    if status(findings) == FAIL:
        return EXIT_LINT_FAILURE
    return EXIT_PASS


class StyleFormatter:
    """
    The visual side of the CLI.
    Responsible for severity-colored finding lines, the run summary and
    the rule listing.
    """

    def __init__(self, console: Console):
        self.console = console

    def print_findings(self, findings: List[Finding]):
        for finding in findings:
            color = "red" if finding.severity == ERROR else "yellow"
            line = Text()
            line.append(f"{finding.path}:{finding.span.line}:{finding.span.column}: ", style="cyan")
            line.append(f"[{finding.severity}]", style=f"bold {color}")
            line.append(f" {finding.message} ")
            line.append(f"({finding.rule_id})", style="dim")
            # soft_wrap keeps one finding per physical line for grep/CI parsers
            self.console.print(line, soft_wrap=True)

    def print_summary(self, summary: Dict[str, Any]):
        passed = summary["status"] != FAIL
        color = "green" if passed else "red"
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Files Checked:  {summary['total_files']}\n"
            f"With Findings:  {summary['files_with_findings']}\n"
            f"Errors:         [red]{summary['errors']}[/red]\n"
            f"Warnings:       [yellow]{summary['warnings']}[/yellow]\n"
            f"Cancelled:      {summary['cancelled']}\n"
            f"Result:         [bold {color}]{summary['status'].upper()}[/bold {color}]",
            border_style="dim",
            expand=False,
        ))

    def print_rules(self, rules):
        table = Table(title="StyleCuro Rules", show_header=True, header_style="bold magenta")
        table.add_column("Rule", style="cyan")
        table.add_column("Scope")
        table.add_column("Severity")
        table.add_column("Description")

        for rule in rules:
            color = "red" if rule.severity == ERROR else "yellow"
            table.add_row(rule.id, rule.scope, f"[{color}]{rule.severity}[/{color}]", rule.description)

        self.console.print(table)
