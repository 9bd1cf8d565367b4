"""
Declaration order: Positioning, Box-model, Typography, Visual, Misc.
"""

from typing import Iterator, List, Sequence, Tuple

from stylecuro.core.config import LintConfig
from stylecuro.core.models import PROPERTY, Comment, Declaration, Document, Finding, Span
from stylecuro.parsing.properties import CATEGORY_NAMES
from stylecuro.rules.base import Rule


def _overridden(declaration: Declaration, comments: Sequence[Comment], marker: str) -> bool:
    """An override comment on the declaration's line or on the line right above it."""
    line = declaration.span.line
    for comment in comments:
        if marker not in comment.text:
            continue
        if comment.span.line <= line <= comment.span.end_line or comment.span.end_line == line - 1:
            return True
    return False


class DeclarationOrderRule(Rule):
    id = "DeclarationOrder"
    description = "Declarations are grouped Positioning, Box-model, Typography, Visual, Misc."

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        for block in document.blocks():
            declarations = [d for d in block.declarations if d.kind == PROPERTY]
            violations = self._violations(declarations, block.comments, config.order_override_marker)
            if not violations:
                continue

            if config.order_report == "ruleset":
                previous, current = violations[0]
                yield self.finding(
                    document, config,
                    f"{len(violations)} declaration(s) out of order in this block; "
                    f"expected {', '.join(CATEGORY_NAMES.values())}",
                    self._name_span(current),
                    related=previous.span,
                )
                continue

            for previous, current in violations:
                yield self.finding(
                    document, config,
                    f"'{current.property}' ({CATEGORY_NAMES[current.category]}) should come before "
                    f"'{previous.property}' ({CATEGORY_NAMES[previous.category]}) on line {previous.span.line}",
                    self._name_span(current),
                    related=previous.span,
                )

    @staticmethod
    def _name_span(declaration: Declaration) -> Span:
        return Span.at(declaration.span.line, declaration.span.column, len(declaration.property))

    @staticmethod
    def _violations(declarations: List[Declaration], comments: Sequence[Comment],
                    marker: str) -> List[Tuple[Declaration, Declaration]]:
        pairs = []
        for previous, current in zip(declarations, declarations[1:]):
            if current.category < previous.category and not _overridden(current, comments, marker):
                pairs.append((previous, current))
        return pairs
