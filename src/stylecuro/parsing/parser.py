#!/usr/bin/env python3
"""
STYLECURO PARSER - Document Builder
-----------------------------------
Turns the token stream into an immutable Document tree of rulesets,
at-rules, selectors, declarations and comments.

The parser is a pure function over text and never raises on malformed
input. Nesting is handled with an explicit stack of open block frames,
so deeply nested Less/SCSS cannot exhaust the recursion limit. The first
structural problem becomes the document's single ParseError finding and
a best-effort partial tree is still returned.

Author: StyleCuro Team
Date: 2026-10-18
"""

import re
from typing import List, Optional, Sequence, Tuple

from stylecuro.core.models import (
    ERROR,
    MIXIN,
    PARSE_ERROR,
    PROPERTY,
    VARIABLE,
    AtRule,
    Comment,
    Declaration,
    Document,
    Finding,
    Ruleset,
    Selector,
    Span,
    Token,
)
from stylecuro.parsing.lexer import (
    COLON,
    COMMA,
    COMMENT,
    LBRACE,
    LBRACKET,
    LPAREN,
    RBRACE,
    RBRACKET,
    RPAREN,
    SEMICOLON,
    WORD,
    WS,
    clean_artifacts,
    tokenize,
)
from stylecuro.parsing.properties import MISC, category_for
from stylecuro.parsing.selectors import parse_selector

IMPORTANT = re.compile(r"!\s*important\s*$", re.IGNORECASE)
AT_NAME = re.compile(r"^@([\w-]+)")


def _strip(tokens: Sequence[Token]) -> List[Token]:
    """Drops leading/trailing whitespace tokens."""
    start, end = 0, len(tokens)
    while start < end and tokens[start].kind == WS:
        start += 1
    while end > start and tokens[end - 1].kind == WS:
        end -= 1
    return list(tokens[start:end])


def _text(tokens: Sequence[Token]) -> str:
    return "".join(t.text for t in tokens)


def _span(first: Token, last: Token) -> Span:
    end_line, end_column = last.end
    return Span(first.line, first.column, end_line, end_column)


class _Frame:
    """
    Mutable builder for one open block. Frozen into a Ruleset/AtRule
    when its closing brace (or end of input) is reached.
    """

    def __init__(self, kind: str, start: Optional[Token] = None, open_brace: Optional[Token] = None,
                 selectors: Tuple[Selector, ...] = (), name: str = "", prelude: Sequence[Token] = ()):
        self.kind = kind  # "root", "ruleset" or "atrule"
        self.start = start
        self.open_brace = open_brace
        self.selectors = selectors
        self.name = name
        self.prelude = list(prelude)
        self.declarations: List[Declaration] = []
        self.comments: List[Comment] = []
        self.children: list = []

    def freeze(self, end: Token, close_brace: Optional[Token]):
        span = _span(self.start, end)
        open_span = self.open_brace.span if self.open_brace else None
        close_span = close_brace.span if close_brace else None
        if self.kind == "ruleset":
            return Ruleset(
                selectors=self.selectors,
                span=span,
                open_brace=open_span,
                close_brace=close_span,
                declarations=tuple(self.declarations),
                comments=tuple(self.comments),
                children=tuple(self.children),
            )
        return AtRule(
            name=self.name,
            prelude=_text(self.prelude[1:]).strip(),
            span=span,
            prelude_tokens=tuple(self.prelude),
            open_brace=open_span,
            close_brace=close_span,
            declarations=tuple(self.declarations),
            comments=tuple(self.comments),
            children=tuple(self.children),
        )


class StyleParser:
    """
    Builds a Document from stylesheet text.
    Statement boundaries are `{`, `}` and `;` (the latter only outside
    parentheses, so `url(data:...;base64,...)` stays in one value).
    """

    def __init__(self, text: str, path: str = "<string>", encoding: str = "utf-8",
                 encoding_failed: bool = False):
        self.text = clean_artifacts(text)
        self.path = path
        self.encoding = encoding
        self.encoding_failed = encoding_failed
        self.errors: List[Finding] = []

    def _error(self, message: str, token: Token):
        self.errors.append(Finding(
            rule_id=PARSE_ERROR,
            severity=ERROR,
            message=message,
            span=token.span,
            path=self.path,
        ))

    # --- Selector / statement builders -------------------------------------

    def _selectors(self, tokens: List[Token]) -> Tuple[Selector, ...]:
        groups: List[List[Token]] = [[]]
        depth = 0
        for tok in tokens:
            if tok.kind in (LPAREN, LBRACKET):
                depth += 1
            elif tok.kind in (RPAREN, RBRACKET):
                depth = max(depth - 1, 0)
            if tok.kind == COMMA and depth == 0:
                groups.append([])
                continue
            groups[-1].append(tok)

        selectors = []
        for group in groups:
            group = _strip(group)
            if not group:
                continue
            selectors.append(parse_selector(_text(group), group[0].line, group[0].column))
        return tuple(selectors)

    def _declaration(self, tokens: List[Token], terminator: Optional[Token]) -> Optional[Declaration]:
        colon = next((i for i, t in enumerate(tokens) if t.kind == COLON), None)
        end_token = terminator or tokens[-1]
        span = _span(tokens[0], end_token)
        terminated = terminator is not None

        if colon is None:
            text = _text(tokens).strip()
            # Less mixin call: `.rounded(4px);` / `#ns > .mixin();`
            if text[:1] in (".", "#") or text.endswith(")"):
                return Declaration(property=text, value="", span=span, kind=MIXIN,
                                   category=MISC, terminated=terminated)
            self._error(f"Expected ':' in declaration '{text}'", tokens[0])
            return None

        prop = _text(tokens[:colon]).strip()
        value_tokens = _strip(tokens[colon + 1:])
        value = _text(value_tokens)

        important = False
        important_span = None
        match = IMPORTANT.search(value)
        if match:
            important = True
            value = value[:match.start()].rstrip()
            important_span = self._important_span(value_tokens)

        if prop.startswith(("--", "$", "@")):
            kind, category = VARIABLE, MISC
        else:
            kind, category = PROPERTY, category_for(prop)

        return Declaration(
            property=prop,
            value=value,
            span=span,
            kind=kind,
            important=important,
            category=category,
            value_tokens=tuple(value_tokens),
            terminated=terminated,
            important_span=important_span,
        )

    @staticmethod
    def _important_span(value_tokens: List[Token]) -> Optional[Span]:
        for tok in reversed(value_tokens):
            idx = tok.text.rfind("!")
            if tok.kind == WORD and idx != -1:
                start = Span.at(tok.line, tok.column + idx)
                last = value_tokens[-1]
                end_line, end_column = last.end
                return Span(start.line, start.column, end_line, end_column)
        return None

    @staticmethod
    def _is_variable(tokens: List[Token]) -> bool:
        """`@name: value` (Less) as opposed to an at-rule such as `@import`."""
        rest = [t for t in tokens[1:2] + tokens[2:3] if t.kind != WS]
        return tokens[0].text.startswith("@") and bool(rest) and rest[0].kind == COLON

    def _statement(self, frame: _Frame, tokens: List[Token], terminator: Optional[Token]):
        """Handles a `;`-terminated (or unterminated) statement."""
        if tokens[0].kind == WORD and tokens[0].text.startswith("@") and not self._is_variable(tokens):
            match = AT_NAME.match(tokens[0].text)
            end = terminator or tokens[-1]
            frame.children.append(AtRule(
                name=match.group(1) if match else tokens[0].text[1:],
                prelude=_text(tokens[1:]).strip(),
                span=_span(tokens[0], end),
                prelude_tokens=tuple(tokens),
            ))
            return

        declaration = self._declaration(tokens, terminator)
        if declaration is None:
            return
        if frame.kind == "root" and declaration.kind == PROPERTY:
            self._error(f"Declaration '{declaration.property}' outside of a block", tokens[0])
        frame.declarations.append(declaration)

    def _open_block(self, frame_stack: List[_Frame], tokens: List[Token], brace: Token):
        if not tokens:
            self._error("Block without a selector", brace)
            frame_stack.append(_Frame("ruleset", start=brace, open_brace=brace))
            return
        first = tokens[0]
        if first.kind == WORD and first.text.startswith("@") and not first.text.startswith("@{"):
            match = AT_NAME.match(first.text)
            name = match.group(1) if match else first.text[1:]
            frame_stack.append(_Frame("atrule", start=first, open_brace=brace, name=name, prelude=tokens))
        else:
            frame_stack.append(_Frame("ruleset", start=first, open_brace=brace,
                                      selectors=self._selectors(tokens)))

    # --- Main loop ----------------------------------------------------------

    def parse(self) -> Document:
        tokens, lex_errors = tokenize(self.text)
        self.errors.extend(f.with_path(self.path) for f in lex_errors)

        stack: List[_Frame] = [_Frame("root")]
        pending: List[Token] = []
        depth = 0

        for tok in tokens:
            frame = stack[-1]
            if tok.kind == COMMENT:
                frame.comments.append(Comment(tok.text, tok.span, inline=tok.text.startswith("//")))
                continue

            if tok.kind in (LPAREN, LBRACKET):
                depth += 1
            elif tok.kind in (RPAREN, RBRACKET):
                depth = max(depth - 1, 0)

            if tok.kind == SEMICOLON and depth == 0:
                statement = _strip(pending)
                if statement:
                    self._statement(frame, statement, tok)
                pending = []
            elif tok.kind == LBRACE:
                self._open_block(stack, _strip(pending), tok)
                pending, depth = [], 0
            elif tok.kind == RBRACE:
                statement = _strip(pending)
                if statement:
                    self._statement(frame, statement, None)
                pending, depth = [], 0
                if len(stack) == 1:
                    self._error("Unexpected '}'", tok)
                    continue
                closed = stack.pop()
                stack[-1].children.append(closed.freeze(tok, tok))
            else:
                pending.append(tok)

        # --- End of input: flush and close whatever is still open ---
        statement = _strip(pending)
        if statement:
            self._statement(stack[-1], statement, None)
        last = tokens[-1] if tokens else None
        while len(stack) > 1:
            frame = stack.pop()
            self._error(f"Unclosed block opened at line {frame.open_brace.line}", frame.open_brace)
            stack[-1].children.append(frame.freeze(last, None))

        root = stack[0]
        lines = self.text.split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()

        return Document(
            text=self.text,
            path=self.path,
            encoding=self.encoding,
            lines=tuple(lines),
            root=tuple(root.children),
            comments=tuple(root.comments),
            declarations=tuple(root.declarations),
            errors=tuple(sorted(self.errors, key=lambda f: f.span)[:1]),
            encoding_failed=self.encoding_failed,
        )


def parse(text: str, path: str = "<string>", encoding: str = "utf-8",
          encoding_failed: bool = False) -> Document:
    """Parses stylesheet text into a Document. Never raises on malformed input."""
    return StyleParser(text, path=path, encoding=encoding, encoding_failed=encoding_failed).parse()
