#!/usr/bin/env python3
"""
STYLECURO CORE MODELS
---------------------
Defines the fundamental data structures used across the StyleCuro engine.
Every node carries a Span so that findings can point at the exact
line and column of the offending construct.

Author: StyleCuro Team
Date: 2026-10-18
"""

from dataclasses import dataclass, replace
from typing import Iterator, Optional, Tuple, Union

# Severity levels (a Finding is one or the other, never both)
ERROR = "error"
WARNING = "warning"
SEVERITIES = (ERROR, WARNING)

# Structural finding kinds emitted by the engine rather than a registered rule
PARSE_ERROR = "ParseError"
ENCODING_ERROR = "EncodingError"
RULE_INTERNAL_ERROR = "RuleInternalError"
IO_ERROR = "IOError"
UNKNOWN_CONFIG_KEY = "UnknownConfigKey"

# Kinds that mean "the tool broke", not "the stylesheet needs fixing"
TOOL_FAILURE_KINDS = (IO_ERROR, RULE_INTERNAL_ERROR)


@dataclass(frozen=True, order=True)
class Span:
    """
    A source region. Lines and columns are 1-based and the end
    position points at the last character of the region.
    """
    line: int
    column: int
    end_line: int
    end_column: int

    @classmethod
    def at(cls, line: int, column: int, length: int = 1) -> "Span":
        """Single-line span starting at (line, column)."""
        return cls(line, column, line, column + max(length, 1) - 1)


def locate(line: int, column: int, text: str, offset: int) -> Tuple[int, int]:
    """
    Returns the (line, column) of `text[offset]` when `text` starts
    at (line, column) in the source.
    """
    head = text[:offset]
    breaks = head.count("\n")
    if not breaks:
        return line, column + offset
    return line + breaks, offset - head.rfind("\n")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int
    column: int
    offset: int

    @property
    def end(self) -> Tuple[int, int]:
        """(line, column) of the last character of the token."""
        return locate(self.line, self.column, self.text, max(len(self.text) - 1, 0))

    @property
    def span(self) -> Span:
        end_line, end_column = self.end
        return Span(self.line, self.column, end_line, end_column)


@dataclass(frozen=True)
class Finding:
    """
    One reported rule violation. Created by a single rule check and
    never mutated afterwards.
    """
    rule_id: str
    severity: str
    message: str
    span: Span
    path: str = "<string>"
    related: Optional[Span] = None  # Second location (e.g. the earlier declaration)

    @property
    def sort_key(self) -> Tuple[str, int, int, str]:
        return (self.path, self.span.line, self.span.column, self.rule_id)

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    def with_path(self, path: str) -> "Finding":
        return replace(self, path=path)


# ---------------------------------------------------------------------------
# Document tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Comment:
    text: str
    span: Span
    inline: bool = False  # True for Less/SCSS `//` comments


@dataclass(frozen=True)
class Attribute:
    """An attribute selector such as [type="text"]."""
    name: str
    operator: Optional[str]
    value: Optional[str]
    quote: Optional[str]  # '"', "'" or None for unquoted/absent values
    offset: int           # Offset of '[' within the selector text


@dataclass(frozen=True)
class SimpleName:
    """A class or id name together with its offset in the selector text."""
    name: str
    offset: int


@dataclass(frozen=True)
class Compound:
    """
    A sequence of simple selectors not separated by a combinator,
    e.g. `ul.nav:hover`.
    """
    text: str
    offset: int
    type_name: Optional[str] = None
    ids: Tuple[SimpleName, ...] = ()
    classes: Tuple[SimpleName, ...] = ()
    attributes: Tuple[Attribute, ...] = ()
    pseudo_classes: Tuple[str, ...] = ()
    pseudo_elements: Tuple[str, ...] = ()
    has_parent_ref: bool = False  # Less/SCSS `&`

    @property
    def is_qualified(self) -> bool:
        return bool(self.type_name and self.type_name != "*" and (self.classes or self.ids))


@dataclass(frozen=True)
class Selector:
    text: str
    span: Span
    compounds: Tuple[Compound, ...] = ()
    specificity: Tuple[int, int, int] = (0, 0, 0)

    @property
    def part_count(self) -> int:
        return len(self.compounds)

    @property
    def has_id(self) -> bool:
        return any(c.ids for c in self.compounds)

    @property
    def has_bare_type(self) -> bool:
        return any(
            c.type_name and c.type_name != "*" and not (c.classes or c.ids or c.attributes)
            for c in self.compounds
        )

    @property
    def has_attribute(self) -> bool:
        return any(c.attributes for c in self.compounds)

    def position(self, offset: int) -> Tuple[int, int]:
        """Source (line, column) of a character inside the selector text."""
        return locate(self.span.line, self.span.column, self.text, offset)


# Declaration kinds
PROPERTY = "property"
VARIABLE = "variable"
MIXIN = "mixin"


@dataclass(frozen=True)
class Declaration:
    property: str
    value: str
    span: Span
    kind: str = PROPERTY
    important: bool = False
    category: int = 4
    value_tokens: Tuple[Token, ...] = ()
    terminated: bool = True
    important_span: Optional[Span] = None


@dataclass(frozen=True)
class Ruleset:
    selectors: Tuple[Selector, ...]
    span: Span
    open_brace: Span
    close_brace: Optional[Span] = None  # None when the block was never closed
    declarations: Tuple[Declaration, ...] = ()
    comments: Tuple[Comment, ...] = ()
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class AtRule:
    name: str
    prelude: str
    span: Span
    prelude_tokens: Tuple[Token, ...] = ()
    open_brace: Optional[Span] = None  # None for statements like @import
    close_brace: Optional[Span] = None
    declarations: Tuple[Declaration, ...] = ()
    comments: Tuple[Comment, ...] = ()
    children: Tuple["Node", ...] = ()

    @property
    def has_block(self) -> bool:
        return self.open_brace is not None


Node = Union[Ruleset, AtRule, Declaration, Selector, Comment]
Block = Union[Ruleset, AtRule]


@dataclass(frozen=True)
class Document:
    """
    The full source text of one stylesheet together with its parse tree.
    Immutable once loaded.
    """
    text: str
    path: str = "<string>"
    encoding: str = "utf-8"
    lines: Tuple[str, ...] = ()
    root: Tuple[Block, ...] = ()
    comments: Tuple[Comment, ...] = ()
    declarations: Tuple[Declaration, ...] = ()  # Top-level (Less/SCSS variables)
    errors: Tuple[Finding, ...] = ()
    encoding_failed: bool = False

    def walk(self) -> Iterator[Tuple[Block, int]]:
        """
        Yields every ruleset and at-rule in source order together with its
        ruleset nesting depth (1 for a top-level ruleset). Traversal uses an
        explicit stack so arbitrarily deep nesting cannot exhaust the
        interpreter's recursion limit.
        """
        stack = [(node, 0) for node in reversed(self.root)]
        while stack:
            node, parent_depth = stack.pop()
            depth = parent_depth + 1 if isinstance(node, Ruleset) else parent_depth
            yield node, depth
            for child in reversed(node.children):
                stack.append((child, depth))

    def rulesets(self) -> Iterator[Ruleset]:
        for node, _ in self.walk():
            if isinstance(node, Ruleset):
                yield node

    def blocks(self) -> Iterator[Block]:
        for node, _ in self.walk():
            yield node

    def all_comments(self) -> Iterator[Comment]:
        yield from self.comments
        for node in self.blocks():
            yield from node.comments

    def all_declarations(self) -> Iterator[Declaration]:
        yield from self.declarations
        for node in self.blocks():
            yield from node.declarations

    @property
    def line_count(self) -> int:
        return max(len(self.lines), 1)

    def contains(self, span: Span) -> bool:
        if not (1 <= span.line <= span.end_line <= self.line_count):
            return False
        return span.column >= 1 and span.end_column >= 1

    def clamp(self, span: Span) -> Span:
        """Pulls a span back inside the document bounds."""
        last = self.line_count
        line = min(max(span.line, 1), last)
        end_line = min(max(span.end_line, line), last)
        column = max(span.column, 1)
        end_column = max(span.end_column, 1)
        if end_line == line:
            end_column = max(end_column, column)
        return Span(line, column, end_line, end_column)
