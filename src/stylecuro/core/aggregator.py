#!/usr/bin/env python3
"""
STYLECURO FINDINGS AGGREGATOR
-----------------------------
Merges the findings of every rule and every file into one ordered list:
sorted by (path, line, column, rule id), with duplicate reports of the
same rule at the same span collapsed into one.

Author: StyleCuro Team
Date: 2026-10-18
"""

from typing import Iterable, List, Mapping, Sequence, Union

from stylecuro.core.models import Finding

PASS = "pass"
FAIL = "fail"

FindingSources = Union[Mapping[str, Sequence[Finding]], Iterable[Sequence[Finding]]]


def aggregate(findings_by_source: FindingSources) -> List[Finding]:
    """
    Accepts either a mapping of source -> findings or an iterable of finding
    sequences. The result does not depend on the order sources arrive in.
    """
    if isinstance(findings_by_source, Mapping):
        groups = findings_by_source.values()
    else:
        groups = findings_by_source

    merged: List[Finding] = []
    for group in groups:
        merged.extend(group)

    # Stable sort, then keep the first report of each (path, span, rule)
    merged.sort(key=lambda f: (f.sort_key, f.span, f.severity, f.message))
    seen = set()
    unique = []
    for finding in merged:
        key = (finding.path, finding.span, finding.rule_id)
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)
    return unique


def status(findings: Iterable[Finding]) -> str:
    """`fail` when any error-severity finding exists; warnings never fail a run."""
    return FAIL if any(f.is_error for f in findings) else PASS
