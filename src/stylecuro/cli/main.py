#!/usr/bin/env python3
"""
STYLECURO CLI - Lint Front End
------------------------------
Translates command line arguments into engine runs. The rendered report
goes to stdout; progress, logging and tool-level errors go to stderr.

Exit codes: 0 pass, 1 lint failures present, 2 tool-level error
(unreadable input, crashed rule, bad configuration).

Author: StyleCuro Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from typing import List, Optional

# Rich library components for terminal UI
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from stylecuro.cli.formatter import EXIT_PASS, EXIT_TOOL_FAILURE, FORMATS, HUMAN, StyleFormatter, exit_code, render
from stylecuro.core.aggregator import aggregate
from stylecuro.core.config import ConfigError, LoadedConfig, load_config, parse_override
from stylecuro.core.engine import LintEngine
from stylecuro.rules.registry import RULE_IDS, RULES

VERSION = "1.0.0"

# stdout carries the report, stderr everything else
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("stylecuro.cli")


class StyleCuroCLI:
    """
    CLI wrapper that translates user commands into LintEngine runs and
    renders the aggregated findings.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="stylecuro",
            description="StyleCuro - CSS / Less / SCSS style-guide linter",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=f"stylecuro v{VERSION}")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        lint_parser = subparsers.add_parser("lint", help="Check stylesheets against the style guide")
        lint_parser.add_argument("paths", nargs="+", help="Stylesheet files or directories")
        lint_parser.add_argument("--config", help="Path to a YAML/JSON configuration file")
        lint_parser.add_argument("--format", choices=FORMATS, default=HUMAN, help="Report format (default: human)")
        lint_parser.add_argument("--fail-fast", action="store_true", default=None,
                                 help="Stop scheduling files after the first error")
        lint_parser.add_argument("--jobs", type=int, help="Number of worker threads (default: CPU count)")
        lint_parser.add_argument("-o", "--option", action="append", default=[], metavar="KEY=VALUE",
                                 help="Override a configuration key, e.g. -o max-line-length=120")
        lint_parser.add_argument("--no-summary", action="store_true", help="Omit the summary panel")
        lint_parser.add_argument("--verbose", action="store_true", help="Debug logging on stderr")

        subparsers.add_parser("rules", help="List the registered rules")

    def print_header(self, subtitle: str):
        """Renders the splash header (stderr, so reports stay clean)."""
        err_console.print(Panel.fit(
            f"[bold cyan]StyleCuro v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan",
        ))

    def _configure_logging(self, verbose: bool):
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )

    def _load_config(self, args: argparse.Namespace) -> LoadedConfig:
        overrides = dict(parse_override(item) for item in args.option)
        return load_config(args.config, known_rules=RULE_IDS, overrides=overrides)

    def _run_lint(self, args: argparse.Namespace) -> int:
        """Main processing orchestration."""
        self._configure_logging(args.verbose)

        # Configuration errors halt the run before any file is touched
        try:
            loaded = self._load_config(args)
        except ConfigError as e:
            err_console.print(f"[bold red]Configuration error:[/bold red] {e}")
            return EXIT_TOOL_FAILURE
        logger.debug(f"Configuration source: {loaded.source or 'built-in defaults'}")

        engine = LintEngine(loaded.config, jobs=args.jobs, fail_fast=args.fail_fast)
        show_progress = args.format == HUMAN and err_console.is_terminal

        if show_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(bar_width=40),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=err_console,
                transient=True,
            ) as progress:
                task_id = progress.add_task("Linting stylesheets...", total=None)

                def advance(done: int, total: int):
                    progress.update(task_id, completed=done, total=total)

                report = engine.lint_paths(args.paths, progress_callback=advance)
        else:
            report = engine.lint_paths(args.paths)

        findings = aggregate([loaded.warnings, report.findings])
        report.findings = findings

        if args.format == HUMAN:
            formatter = StyleFormatter(console)
            formatter.print_findings(findings)
            if not args.no_summary:
                formatter.print_summary(engine.generate_summary(report))
        else:
            console.out(render(findings, args.format), highlight=False)

        return exit_code(findings)

    def _run_rules(self) -> int:
        self.print_header("Registered Rules")
        StyleFormatter(console).print_rules(RULES)
        return EXIT_PASS

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point. Returns the process exit code."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("CSS Style Linter")
            self.parser.print_help()
            return EXIT_PASS

        args = self.parser.parse_args(argv)
        if args.command == "lint":
            return self._run_lint(args)
        if args.command == "rules":
            return self._run_rules()
        self.parser.print_help()
        return EXIT_PASS


def main(argv: Optional[List[str]] = None):
    """Application entry point with interrupt handling."""
    try:
        code = StyleCuroCLI().run(argv)
    except KeyboardInterrupt:
        err_console.print("\n[bold red]Terminated by user.[/bold red]")
        code = EXIT_TOOL_FAILURE
    sys.exit(code)


if __name__ == "__main__":
    main()
