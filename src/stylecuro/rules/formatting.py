"""
Ruleset formatting rules: brace placement and declaration separation.
"""

from typing import Iterator, Optional, Sequence

from stylecuro.core.config import LintConfig
from stylecuro.core.models import Declaration, Document, Finding, Ruleset, Span
from stylecuro.rules.base import Rule


class BracePlacementRule(Rule):
    id = "BracePlacement"
    description = ("Opening brace on the last selector's line after one space; "
                   "closing brace alone on its line, aligned with the first selector.")

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        for block in document.blocks():
            if block.open_brace is None:
                continue
            if isinstance(block, Ruleset):
                if not block.selectors:
                    continue
                header_end = block.selectors[-1].span.end_line
                anchor = block.selectors[0].span.column
                what = "selector"
            else:
                header_end = block.prelude_tokens[-1].end[0] if block.prelude_tokens else block.span.line
                anchor = block.span.column
                what = f"@{block.name} rule"

            yield from self._opening(document, config, block, header_end, what)
            yield from self._closing(document, config, block, anchor, what)

    def _opening(self, document, config, block, header_end: int, what: str) -> Iterator[Finding]:
        brace = block.open_brace
        if brace.line != header_end:
            yield self.finding(document, config,
                               f"Opening brace must be on the same line as the last {what}", brace)
            return
        line = document.lines[brace.line - 1]
        before = line[:brace.column - 1]
        if not before.endswith(" ") or before.endswith("  ") or before.endswith("\t "):
            yield self.finding(document, config, "Opening brace must be preceded by exactly one space", brace)

    def _closing(self, document, config, block, anchor: int, what: str) -> Iterator[Finding]:
        brace = block.close_brace
        if brace is None:
            return
        line = document.lines[brace.line - 1]
        if line.strip() != "}":
            yield self.finding(document, config, "Closing brace must be on a line of its own", brace)
        elif brace.column != anchor:
            yield self.finding(
                document, config,
                f"Closing brace at column {brace.column}; expected column {anchor} to align with the {what}",
                brace,
            )


class DeclarationSeparationRule(Rule):
    id = "DeclarationSeparation"
    description = "Exactly one declaration per line, each terminated by a semicolon."

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        yield from self._check_block(document, config, document.declarations)
        for block in document.blocks():
            yield from self._check_block(document, config, block.declarations)

    def _check_block(self, document: Document, config: LintConfig,
                     declarations: Sequence[Declaration]) -> Iterator[Finding]:
        previous: Optional[Declaration] = None
        for declaration in declarations:
            name = declaration.property
            if previous is not None and declaration.span.line == previous.span.end_line:
                yield self.finding(document, config, f"Declaration '{name}' must be on its own line",
                                   Span.at(declaration.span.line, declaration.span.column, len(name)))
            if not declaration.terminated:
                end = Span.at(declaration.span.end_line, declaration.span.end_column)
                yield self.finding(document, config,
                                   f"Declaration '{name}' must be terminated with a semicolon", end)
            previous = declaration
