"""
Line-level whitespace rules: indentation, trailing whitespace and line length.
These only need the raw line index, so they still run on files that had
to be decoded with replacement characters.
"""

from typing import Iterator, Set

from stylecuro.core.config import LintConfig
from stylecuro.core.models import WARNING, Document, Finding, Span
from stylecuro.rules.base import LINES, Rule


def _leading(line: str) -> str:
    return line[:len(line) - len(line.lstrip(" \t"))]


def _comment_lines(document: Document) -> Set[int]:
    """Lines that sit inside a multi-line block comment (past its first line)."""
    inside = set()
    for comment in document.all_comments():
        inside.update(range(comment.span.line + 1, comment.span.end_line + 1))
    return inside


class IndentationRule(Rule):
    id = "Indentation"
    description = "Indent with spaces only; declarations by a multiple of the indent width."
    scope = LINES

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        width = config.indent_width
        in_comment = _comment_lines(document)

        for number, line in enumerate(document.lines, 1):
            leading = _leading(line)
            if "\t" in leading and number not in in_comment:
                column = leading.index("\t") + 1
                yield self.finding(document, config, "Tab character in indentation; use spaces",
                                   Span(number, column, number, len(leading)))

        seen = set()
        for declaration in document.all_declarations():
            number = declaration.span.line
            if number in seen or number > len(document.lines):
                continue
            seen.add(number)
            line = document.lines[number - 1]
            leading = _leading(line)
            # Only judge lines that start with the declaration itself
            if "\t" in leading or len(leading) + 1 != declaration.span.column:
                continue
            if len(leading) % width:
                yield self.finding(
                    document, config,
                    f"Declaration indented by {len(leading)} spaces; expected a multiple of {width}",
                    Span(number, 1, number, max(len(leading), 1)),
                )


class TrailingWhitespaceRule(Rule):
    id = "TrailingWhitespace"
    description = "No line may end with spaces or tabs."
    scope = LINES

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        for number, line in enumerate(document.lines, 1):
            stripped = line.rstrip(" \t")
            if len(stripped) != len(line):
                yield self.finding(document, config, "Trailing whitespace",
                                   Span(number, len(stripped) + 1, number, len(line)))


class MaxLineLengthRule(Rule):
    id = "MaxLineLength"
    description = "Lines must not exceed the configured maximum length."
    severity = WARNING
    scope = LINES

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        limit = config.max_line_length
        if not limit:
            return
        for number, line in enumerate(document.lines, 1):
            if len(line) > limit:
                yield self.finding(
                    document, config,
                    f"Line is {len(line)} characters long; maximum is {limit}",
                    Span(number, limit + 1, number, len(line)),
                )
