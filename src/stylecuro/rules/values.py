"""
Declaration value rules: hex colors, quote style, superfluous zero units
and `!important`.
"""

import re
from pathlib import PurePath
from typing import Iterator, List, Tuple

from stylecuro.core.config import LintConfig
from stylecuro.core.models import PROPERTY, WARNING, AtRule, Document, Finding, Span, Token
from stylecuro.parsing.lexer import LPAREN, RPAREN, STRING, WORD
from stylecuro.rules.base import Rule

HEX_COLOR = re.compile(r"(?<![\w-])#([0-9a-fA-F]{3,8})(?![\w-])")
ZERO_WITH_UNIT = re.compile(
    r"^[+-]?0+(?:\.0+)?(px|em|rem|ex|ch|vw|vh|vmin|vmax|cm|mm|in|pt|pc|q)$",
    re.IGNORECASE,
)
# Inside these functions a unitless zero changes meaning (or is invalid)
UNIT_REQUIRED_FUNCTIONS = ("calc", "min", "max", "clamp")
UNIT_REQUIRED_PROPERTIES = ("flex", "flex-basis")


def shorten_hex(digits: str) -> str:
    """Lowercases a hex color and collapses aabbcc -> abc (and aabbccdd -> abcd)."""
    digits = digits.lower()
    if len(digits) in (6, 8) and all(digits[i] == digits[i + 1] for i in range(0, len(digits), 2)):
        return digits[::2]
    return digits


class HexColorRule(Rule):
    id = "HexColor"
    description = "Hex colors are lowercase and use the 3-digit form when possible."

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        for declaration in document.all_declarations():
            for token in declaration.value_tokens:
                if token.kind != WORD:
                    continue
                for match in HEX_COLOR.finditer(token.text):
                    digits = match.group(1)
                    if len(digits) not in (3, 4, 6, 8):
                        continue
                    preferred = shorten_hex(digits)
                    if preferred != digits:
                        yield self.finding(
                            document, config,
                            f"Hex color '#{digits}' should be written '#{preferred}'",
                            Span.at(token.line, token.column + match.start(), len(digits) + 1),
                        )


class QuoteStyleRule(Rule):
    id = "QuoteStyle"
    description = "Strings and attribute selector values use double quotes."

    def _strings(self, tokens) -> Iterator[Token]:
        for token in tokens:
            if token.kind == STRING and token.text.startswith("'") and '"' not in token.text:
                yield token

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        message = "Use double quotes instead of single quotes"
        for declaration in document.all_declarations():
            for token in self._strings(declaration.value_tokens):
                yield self.finding(document, config, message, token.span)

        for block, _ in document.walk():
            if isinstance(block, AtRule):
                for token in self._strings(block.prelude_tokens):
                    yield self.finding(document, config, message, token.span)
                continue
            for selector in block.selectors:
                for compound in selector.compounds:
                    for attribute in compound.attributes:
                        if attribute.quote == "'" and '"' not in (attribute.value or ""):
                            line, column = selector.position(attribute.offset)
                            yield self.finding(
                                document, config,
                                f"Use double quotes in attribute selector [{attribute.name}]",
                                Span.at(line, column),
                            )


class ZeroUnitRule(Rule):
    id = "ZeroUnit"
    description = "A zero length needs no unit."
    severity = WARNING

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        for declaration in document.all_declarations():
            prop = declaration.property.lower()
            if declaration.kind != PROPERTY or prop in UNIT_REQUIRED_PROPERTIES:
                continue
            for token, functions in self._words(declaration.value_tokens):
                if any(f in UNIT_REQUIRED_FUNCTIONS for f in functions):
                    continue
                match = ZERO_WITH_UNIT.match(token.text)
                if match:
                    yield self.finding(
                        document, config,
                        f"Unit '{match.group(1)}' is superfluous on '{token.text}'; use 0",
                        token.span,
                    )

    @staticmethod
    def _words(tokens) -> Iterator[Tuple[Token, List[str]]]:
        """Yields WORD tokens with the stack of enclosing function names."""
        stack: List[str] = []
        previous = None
        for token in tokens:
            if token.kind == LPAREN:
                name = previous.text if previous is not None and previous.kind == WORD else ""
                stack.append(re.sub(r"^-\w+-", "", name.lower()))
            elif token.kind == RPAREN:
                if stack:
                    stack.pop()
            elif token.kind == WORD:
                yield token, stack
            previous = token


def _matches_any(path: str, patterns) -> bool:
    pure = PurePath(path)
    return any(pure.match(pattern) for pattern in patterns)


class ImportantUsageRule(Rule):
    id = "ImportantUsage"
    description = "`!important` is reserved for utility/override stylesheets."

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        if _matches_any(document.path, config.allow_important_in):
            return
        for declaration in document.all_declarations():
            if declaration.important:
                yield self.finding(
                    document, config,
                    f"Avoid !important on '{declaration.property}' outside utility stylesheets",
                    declaration.important_span or declaration.span,
                )
