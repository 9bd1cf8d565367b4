#!/usr/bin/env python3
"""
STYLECURO ENGINE - The Lint Orchestrator
----------------------------------------
The LintEngine manages the lifecycle of a stylesheet through the lint
phases: read, decode, parse, rule evaluation and aggregation.

Files are independent, so they are linted concurrently by a bounded
worker pool. Workers share nothing but the frozen configuration and the
fixed rule table. File-level and rule-level failures are isolated and
reported as findings; they never abort the run.

Author: StyleCuro Team
Date: 2026-10-18
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from stylecuro.core.aggregator import aggregate, status
from stylecuro.core.config import LintConfig
from stylecuro.core.models import (
    ENCODING_ERROR,
    ERROR,
    IO_ERROR,
    RULE_INTERNAL_ERROR,
    WARNING,
    Document,
    Finding,
    Span,
)
from stylecuro.parsing.parser import parse
from stylecuro.rules.base import LINES, Rule
from stylecuro.rules.registry import RULES

logger = logging.getLogger("stylecuro.engine")


def run_all(document: Document, config: LintConfig, rules: Sequence[Rule] = RULES) -> List[Finding]:
    """
    Runs every enabled rule against one document.

    A rule that raises is isolated: its failure becomes a RuleInternalError
    finding and the remaining rules still run. When the file could not be
    decoded cleanly only line-scoped rules are attempted.
    """
    findings: List[Finding] = []
    if not document.encoding_failed:
        findings.extend(document.errors)

    for rule in rules:
        if not config.is_enabled(rule.id):
            continue
        if document.encoding_failed and rule.scope != LINES:
            continue
        try:
            produced = list(rule.check(document, config))
        except Exception as e:
            logger.exception(f"Rule {rule.id} crashed on {document.path}")
            findings.append(Finding(
                rule_id=RULE_INTERNAL_ERROR,
                severity=ERROR,
                message=f"Rule '{rule.id}' failed: {e.__class__.__name__}: {e}",
                span=Span.at(1, 1),
                path=document.path,
            ))
            continue

        for finding in produced:
            # Every finding must point inside its document
            if not document.contains(finding.span):
                finding = replace(finding, span=document.clamp(finding.span))
            findings.append(finding)

    return findings


def decode_source(raw: bytes, path: str) -> Tuple[str, Optional[Finding]]:
    """
    Decodes file bytes as UTF-8 (BOM-aware). On failure the text is decoded
    again with replacement characters and an EncodingError finding points at
    the first offending byte.
    """
    try:
        return raw.decode("utf-8-sig"), None
    except UnicodeDecodeError as e:
        prefix = raw[:e.start].decode("utf-8-sig", errors="replace")
        line = prefix.count("\n") + 1
        column = len(prefix) - prefix.rfind("\n")
        finding = Finding(
            rule_id=ENCODING_ERROR,
            severity=ERROR,
            message=f"File is not valid UTF-8 (byte 0x{raw[e.start]:02x}); content rules skipped",
            span=Span.at(line, column),
            path=path,
        )
        return raw.decode("utf-8-sig", errors="replace"), finding


def lint_text(text: str, config: Optional[LintConfig] = None, path: str = "<string>",
              rules: Sequence[Rule] = RULES) -> List[Finding]:
    """Parses and lints one in-memory stylesheet; returns aggregated findings."""
    config = config or LintConfig()
    document = parse(text, path=path)
    return aggregate([run_all(document, config, rules)])


@dataclass
class LintReport:
    """Outcome of one engine run over a set of paths."""
    findings: List[Finding] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    cancelled: int = 0

    @property
    def status(self) -> str:
        return status(self.findings)


class LintEngine:
    """
    Principal orchestrator for stylesheet linting.
    Holds the immutable configuration and the rule table, discovers input
    files and fans them out over a worker pool.
    """

    def __init__(self, config: Optional[LintConfig] = None, rules: Sequence[Rule] = RULES,
                 jobs: Optional[int] = None, fail_fast: Optional[bool] = None):
        self.config = config or LintConfig()
        self.rules = tuple(rules)
        self.jobs = jobs or self.config.jobs or os.cpu_count() or 1
        self.fail_fast = self.config.fail_fast if fail_fast is None else fail_fast

    # --- Phase 1: Discovery ---------------------------------------------------

    def collect_files(self, paths: Iterable[str]) -> Tuple[List[Path], List[Finding]]:
        """
        Expands directories recursively (symlinks are skipped to avoid
        loops) and reports missing paths as IOError findings.
        """
        files: List[Path] = []
        missing: List[Finding] = []
        extensions = tuple(ext.lower() for ext in self.config.extensions)

        for raw in paths:
            path = Path(raw)
            if path.is_file():
                files.append(path)
            elif path.is_dir():
                found = sorted(
                    f for f in path.rglob("*")
                    if f.is_file() and not f.is_symlink() and f.suffix.lower() in extensions
                )
                logger.debug(f"Discovered {len(found)} stylesheet(s) under {path}")
                files.extend(found)
            else:
                missing.append(self._io_error(str(path), "Path not found"))

        # Keep the first occurrence of each file
        unique = list(dict.fromkeys(files))
        return unique, missing

    # --- Phase 2: Single file -------------------------------------------------

    def lint_file(self, path: Path) -> List[Finding]:
        """Reads, decodes, parses and lints one file. Never raises."""
        name = str(path)
        try:
            raw = Path(path).read_bytes()
        except OSError as e:
            logger.error(f"Unable to read {name}: {e.strerror or e}")
            return [self._io_error(name, f"Unable to read file: {e.strerror or e}")]

        text, encoding_error = decode_source(raw, name)
        try:
            document = parse(text, path=name, encoding="utf-8",
                             encoding_failed=encoding_error is not None)
            findings = run_all(document, self.config, self.rules)
        except Exception as e:
            logger.exception(f"Error processing {name}")
            return [Finding(RULE_INTERNAL_ERROR, ERROR, f"Internal failure while linting: {e}",
                            Span.at(1, 1), name)]

        if encoding_error is not None:
            findings.insert(0, replace(encoding_error, span=document.clamp(encoding_error.span)))
        return findings

    # --- Phase 3: Fan-out & aggregation ---------------------------------------

    def lint_paths(self, paths: Iterable[str],
                   progress_callback: Optional[Callable[[int, int], None]] = None) -> LintReport:
        """
        Lints every file under `paths` concurrently and aggregates the
        findings globally. With fail_fast, pending files are cancelled once
        any file reports an error-severity finding.
        """
        files, missing = self.collect_files(paths)
        results: Dict[str, List[Finding]] = {"<missing>": missing}
        report = LintReport(files=[str(f) for f in files])
        if not files:
            report.findings = aggregate(results)
            return report

        workers = max(1, min(self.jobs, len(files)))
        logger.debug(f"Linting {len(files)} file(s) with {workers} worker(s)")
        processed = 0

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.lint_file, f): f for f in files}
            for future in as_completed(futures):
                results[str(futures[future])] = future.result()
                processed += 1
                if progress_callback:
                    progress_callback(processed, len(files))

                if self.fail_fast and any(f.is_error for f in results[str(futures[future])]):
                    report.cancelled = sum(1 for fut in futures if fut.cancel())
                    logger.info(f"Fail-fast: cancelled {report.cancelled} pending file(s)")
                    break

        report.findings = aggregate(results)
        return report

    def lint_sequential(self, paths: Iterable[str]) -> LintReport:
        """Single-threaded run; produces the same findings as lint_paths."""
        files, missing = self.collect_files(paths)
        results: Dict[str, List[Finding]] = {"<missing>": missing}
        for path in files:
            results[str(path)] = self.lint_file(path)
        return LintReport(findings=aggregate(results), files=[str(f) for f in files])

    def generate_summary(self, report: LintReport) -> Dict[str, Any]:
        """Provides run metrics for the CLI summary panel."""
        findings = report.findings
        return {
            "total_files": len(report.files),
            "files_with_findings": len({f.path for f in findings if f.path in report.files}),
            "errors": sum(1 for f in findings if f.severity == ERROR),
            "warnings": sum(1 for f in findings if f.severity == WARNING),
            "cancelled": report.cancelled,
            "status": report.status,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _io_error(self, path: str, message: str) -> Finding:
        return Finding(rule_id=IO_ERROR, severity=ERROR, message=message, span=Span.at(1, 1), path=path)
