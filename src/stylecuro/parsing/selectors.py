#!/usr/bin/env python3
"""
STYLECURO SELECTOR ANALYSIS
---------------------------
Splits a selector into compounds and classifies every simple selector
(type, #id, .class, [attr], :pseudo-class, ::pseudo-element, &).
The derived specificity tuple is (ids, classes/attributes/pseudo-classes,
types/pseudo-elements).

Author: StyleCuro Team
Date: 2026-10-18
"""

import re
from typing import List, Optional, Tuple

from stylecuro.core.models import Attribute, Compound, Selector, SimpleName, Span, locate

COMBINATORS = ">+~"
LEGACY_PSEUDO_ELEMENTS = ("before", "after", "first-line", "first-letter")
# Functional pseudo-classes whose weight is that of their most specific argument
ARGUMENT_WEIGHTED = ("not", "is", "has", "matches", "-moz-any", "-webkit-any")
ZERO_WEIGHTED = ("where",)

ATTRIBUTE_PATTERN = re.compile(
    r"""^\s*(?P<name>[^\s~|^$*!=]+)\s*
        (?:(?P<op>[~|^$*]?=)\s*(?P<value>"(?:\\.|[^"])*"|'(?:\\.|[^'])*'|[^\s]+))?
        \s*(?:[iIsS])?\s*$""",
    re.VERBOSE,
)


def _skip_interpolation(text: str, i: int) -> int:
    """Returns the index after `#{...}` / `@{...}` starting at i, or i if none."""
    if text[i] in "#@$" and i + 1 < len(text) and text[i + 1] == "{":
        close = text.find("}", i + 2)
        if close != -1:
            return close + 1
    return i


def _matching(text: str, i: int, opener: str, closer: str) -> int:
    """Index just past the bracket matching text[i], quote-aware."""
    depth = 0
    quote = None
    j = i
    while j < len(text):
        c = text[j]
        if quote:
            if c == "\\":
                j += 2
                continue
            if c == quote:
                quote = None
        elif c in "\"'":
            quote = c
        elif c == opener:
            depth += 1
        elif c == closer:
            depth -= 1
            if depth == 0:
                return j + 1
        j += 1
    return len(text)


def _is_ident_char(c: str) -> bool:
    return c.isalnum() or c in "-_" or ord(c) >= 0x80


def _read_ident(text: str, i: int) -> Tuple[str, int]:
    j = i
    while j < len(text):
        c = text[j]
        if c == "\\" and j + 1 < len(text):
            j += 2
            continue
        nxt = _skip_interpolation(text, j)
        if nxt != j:
            j = nxt
            continue
        if not _is_ident_char(c):
            break
        j += 1
    return text[i:j], j


def split_compounds(text: str) -> List[Tuple[str, int]]:
    """Splits a selector on combinators, returning (compound text, offset) pairs."""
    compounds = []
    start = None
    depth = 0
    quote = None
    i = 0
    while i < len(text):
        c = text[i]
        if quote:
            if c == "\\":
                i += 2
                continue
            if c == quote:
                quote = None
            i += 1
            continue
        skipped = _skip_interpolation(text, i)
        if skipped != i:
            if start is None:
                start = i
            i = skipped
            continue
        if c == "\\":
            if start is None:
                start = i
            i += 2
            continue
        if c in "\"'":
            quote = c
        elif c in "([":
            depth += 1
        elif c in ")]":
            depth = max(depth - 1, 0)
        elif depth == 0 and (c.isspace() or c in COMBINATORS):
            if start is not None:
                compounds.append((text[start:i], start))
                start = None
            i += 1
            continue
        if start is None:
            start = i
        i += 1
    if start is not None:
        compounds.append((text[start:], start))
    return compounds


def split_top_level(text: str, sep: str = ",") -> List[Tuple[str, int]]:
    """Splits on `sep` outside brackets and quotes."""
    parts = []
    depth = 0
    quote = None
    start = 0
    for i, c in enumerate(text):
        if quote:
            if c == quote and text[i - 1] != "\\":
                quote = None
            continue
        if c in "\"'":
            quote = c
        elif c in "([":
            depth += 1
        elif c in ")]":
            depth = max(depth - 1, 0)
        elif c == sep and depth == 0:
            parts.append((text[start:i], start))
            start = i + 1
    parts.append((text[start:], start))
    return parts


def _parse_attribute(body: str, offset: int) -> Attribute:
    match = ATTRIBUTE_PATTERN.match(body)
    if not match:
        return Attribute(name=body.strip(), operator=None, value=None, quote=None, offset=offset)
    value = match.group("value")
    quote = None
    if value and value[0] in "\"'":
        quote = value[0]
        value = value[1:-1]
    return Attribute(match.group("name"), match.group("op"), value, quote, offset)


def _argument_weight(args: str) -> Tuple[int, int, int]:
    best = (0, 0, 0)
    for part, _ in split_top_level(args):
        if not part.strip():
            continue
        weight = specificity_of(part.strip())
        if weight > best:
            best = weight
    return best


def parse_compound(text: str, offset: int = 0) -> Tuple[Compound, Tuple[int, int, int]]:
    """
    Classifies the simple selectors of one compound. Returns the compound
    together with its specificity contribution.
    """
    type_name: Optional[str] = None
    ids: List[SimpleName] = []
    classes: List[SimpleName] = []
    attributes: List[Attribute] = []
    pseudo_classes: List[str] = []
    pseudo_elements: List[str] = []
    parent_ref = False
    a = b = c = 0

    i = 0
    while i < len(text):
        ch = text[i]
        skipped = _skip_interpolation(text, i)
        if skipped != i:
            i = skipped
            continue
        if ch == "&":
            parent_ref = True
            # `&-suffix` in Less/SCSS extends the parent name
            _, i = _read_ident(text, i + 1)
        elif ch == "*":
            type_name = "*"
            i += 1
        elif ch == ".":
            name, i = _read_ident(text, i + 1)
            classes.append(SimpleName(name, offset + i - len(name) - 1))
            b += 1
        elif ch == "#":
            name, i = _read_ident(text, i + 1)
            ids.append(SimpleName(name, offset + i - len(name) - 1))
            a += 1
        elif ch == "%" and i + 1 < len(text) and _is_ident_char(text[i + 1]):
            # SCSS placeholder selector
            _, i = _read_ident(text, i + 1)
            b += 1
        elif ch == "[":
            end = _matching(text, i, "[", "]")
            attributes.append(_parse_attribute(text[i + 1:end - 1], offset + i))
            b += 1
            i = end
        elif ch == ":":
            element = text.startswith("::", i)
            name, j = _read_ident(text, i + (2 if element else 1))
            name = name.lower()
            args = None
            if j < len(text) and text[j] == "(":
                end = _matching(text, j, "(", ")")
                args = text[j + 1:end - 1]
                j = end
            if element or name in LEGACY_PSEUDO_ELEMENTS:
                pseudo_elements.append(name)
                c += 1
            else:
                pseudo_classes.append(name)
                if name in ZERO_WEIGHTED:
                    pass
                elif name in ARGUMENT_WEIGHTED and args is not None:
                    da, db, dc = _argument_weight(args)
                    a, b, c = a + da, b + db, c + dc
                else:
                    b += 1
            i = j
        elif ch == "(":
            # Less mixin parameters / guards: `.mixin(@a) when (@a > 0)`
            i = _matching(text, i, "(", ")")
        elif ch == "\\" or _is_ident_char(ch) and not ch.isdigit():
            name, j = _read_ident(text, i)
            # A lone trailing backslash reads as an empty name
            i = j if j > i else i + 1
            if not name:
                continue
            if type_name is None:
                type_name = name
                c += 1
        else:
            i += 1

    compound = Compound(
        text=text,
        offset=offset,
        type_name=type_name,
        ids=tuple(ids),
        classes=tuple(classes),
        attributes=tuple(attributes),
        pseudo_classes=tuple(pseudo_classes),
        pseudo_elements=tuple(pseudo_elements),
        has_parent_ref=parent_ref,
    )
    return compound, (a, b, c)


def _analyse(text: str) -> Tuple[Tuple[Compound, ...], Tuple[int, int, int]]:
    compounds = []
    a = b = c = 0
    for part, offset in split_compounds(text):
        compound, (da, db, dc) = parse_compound(part, offset)
        compounds.append(compound)
        a, b, c = a + da, b + db, c + dc
    return tuple(compounds), (a, b, c)


def specificity_of(text: str) -> Tuple[int, int, int]:
    return _analyse(text)[1]


def parse_selector(text: str, line: int = 1, column: int = 1) -> Selector:
    """Builds a Selector for `text`, which starts at (line, column) in the source."""
    compounds, specificity = _analyse(text)
    end_line, end_column = locate(line, column, text, max(len(text) - 1, 0))
    return Selector(
        text=text,
        span=Span(line, column, end_line, end_column),
        compounds=compounds,
        specificity=specificity,
    )
