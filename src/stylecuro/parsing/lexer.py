#!/usr/bin/env python3
"""
STYLECURO LEXER - Position-Tracking Tokenizer
---------------------------------------------
Decomposes raw CSS / Less / SCSS text into Tokens. Every token keeps its
line, column and offset so that the parser and the rules can point at
exact source positions.

The lexer never raises on malformed input: unterminated comments and
strings are recorded as ParseError findings and tokenizing carries on.

Author: StyleCuro Team
Date: 2026-10-18
"""

import re
from typing import List, Optional, Tuple

from stylecuro.core.models import ERROR, PARSE_ERROR, Finding, Span, Token

# Token kinds
WS = "WS"
COMMENT = "COMMENT"
STRING = "STRING"
BAD_STRING = "BAD_STRING"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
SEMICOLON = "SEMICOLON"
COLON = "COLON"
COMMA = "COMMA"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"
WORD = "WORD"

SINGLE_CHAR_TOKENS = {
    "{": LBRACE,
    "}": RBRACE,
    ";": SEMICOLON,
    ":": COLON,
    ",": COMMA,
    "(": LPAREN,
    ")": RPAREN,
    "[": LBRACKET,
    "]": RBRACKET,
}
WHITESPACE = " \t\n\f"
QUOTES = "\"'"

RETURNS = re.compile("\r\n|\r")


def clean_artifacts(text: str) -> str:
    """
    Removes the UTF-8 BOM marker and standardizes line endings to LF.
    """
    return RETURNS.sub("\n", text.lstrip("\ufeff"))


class StyleLexer:
    """
    Converts stylesheet text into a flat list of Tokens.
    Tracks parenthesis depth so that `//` inside `url(...)` is not
    mistaken for a Less/SCSS line comment.
    """

    def __init__(self, text: str):
        self.text = text
        self.line = 1
        self.column = 1
        self.paren_depth = 0
        self.errors: List[Finding] = []

    def _error(self, message: str, line: int, column: int):
        self.errors.append(Finding(
            rule_id=PARSE_ERROR,
            severity=ERROR,
            message=message,
            span=Span.at(line, column),
        ))

    def _advance(self, chunk: str):
        breaks = chunk.count("\n")
        if breaks:
            self.line += breaks
            self.column = len(chunk) - chunk.rfind("\n")
        else:
            self.column += len(chunk)

    def _peek(self, i: int) -> Optional[str]:
        return self.text[i] if i < len(self.text) else None

    def _scan_whitespace(self, i: int) -> int:
        while i < len(self.text) and self.text[i] in WHITESPACE:
            i += 1
        return i

    def _scan_block_comment(self, i: int) -> int:
        end = self.text.find("*/", i + 2)
        if end == -1:
            self._error("Unterminated comment", self.line, self.column)
            return len(self.text)
        return end + 2

    def _scan_line_comment(self, i: int) -> int:
        end = self.text.find("\n", i)
        return len(self.text) if end == -1 else end

    def _scan_string(self, i: int) -> Tuple[int, bool]:
        """Quote-aware scan honouring backslash escapes. Strings end at a newline."""
        quote = self.text[i]
        j = i + 1
        while j < len(self.text):
            char = self.text[j]
            if char == "\\":
                j += 2
                continue
            if char == quote:
                return j + 1, True
            if char == "\n":
                break
            j += 1
        self._error("Unterminated string", self.line, self.column)
        return min(j, len(self.text)), False

    def _scan_word(self, i: int) -> int:
        text = self.text
        j = i
        while j < len(text):
            char = text[j]
            # Interpolation: #{$var} (SCSS) and @{var} (Less)
            if char in "#@$" and self._peek(j + 1) == "{":
                close = text.find("}", j + 2)
                if close != -1:
                    j = close + 1
                    continue
            if char == "\\" and j + 1 < len(text) and text[j + 1] != "\n":
                j += 2
                continue
            if char in WHITESPACE or char in SINGLE_CHAR_TOKENS or char in QUOTES:
                break
            if char == "/" and self._peek(j + 1) == "*":
                break
            if char == "/" and self._peek(j + 1) == "/" and self.paren_depth == 0:
                break
            j += 1
        return j if j > i else i + 1

    def tokenize(self) -> List[Token]:
        """Tokenizes the whole source at once."""
        text = self.text
        tokens: List[Token] = []
        i = 0

        while i < len(text):
            char = text[i]
            nxt = self._peek(i + 1)

            if char in WHITESPACE:
                kind, end = WS, self._scan_whitespace(i)
            elif char == "/" and nxt == "*":
                kind, end = COMMENT, self._scan_block_comment(i)
            elif char == "/" and nxt == "/" and self.paren_depth == 0:
                kind, end = COMMENT, self._scan_line_comment(i)
            elif char in QUOTES:
                end, closed = self._scan_string(i)
                kind = STRING if closed else BAD_STRING
            elif char in SINGLE_CHAR_TOKENS:
                kind, end = SINGLE_CHAR_TOKENS[char], i + 1
                if kind == LPAREN:
                    self.paren_depth += 1
                elif kind == RPAREN:
                    self.paren_depth = max(self.paren_depth - 1, 0)
                elif kind in (LBRACE, RBRACE):
                    self.paren_depth = 0
            else:
                kind, end = WORD, self._scan_word(i)

            chunk = text[i:end]
            tokens.append(Token(kind, chunk, self.line, self.column, i))
            self._advance(chunk)
            i = end

        return tokens


def tokenize(text: str) -> Tuple[List[Token], List[Finding]]:
    """Tokenizes `text` and returns the tokens with any lexical errors."""
    lexer = StyleLexer(text)
    tokens = lexer.tokenize()
    return tokens, lexer.errors
