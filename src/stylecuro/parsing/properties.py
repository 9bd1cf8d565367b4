"""
Property -> ordering category lookup.

Declarations inside a ruleset are grouped in the order
Positioning, Box-model, Typography, Visual, Misc.
"""

import re
from typing import Dict

POSITIONING = 0
BOX_MODEL = 1
TYPOGRAPHY = 2
VISUAL = 3
MISC = 4

CATEGORY_NAMES = {
    POSITIONING: "Positioning",
    BOX_MODEL: "Box-model",
    TYPOGRAPHY: "Typography",
    VISUAL: "Visual",
    MISC: "Misc",
}

_GROUPS = {
    POSITIONING: (
        "position", "top", "right", "bottom", "left", "inset",
        "inset-block", "inset-inline", "z-index", "float", "clear",
    ),
    BOX_MODEL: (
        "display", "box-sizing", "overflow", "overflow-x", "overflow-y",
        "width", "min-width", "max-width", "height", "min-height", "max-height",
        "margin", "margin-top", "margin-right", "margin-bottom", "margin-left",
        "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
        "border", "border-top", "border-right", "border-bottom", "border-left",
        "border-width", "border-top-width", "border-right-width",
        "border-bottom-width", "border-left-width",
        "flex", "flex-basis", "flex-direction", "flex-flow", "flex-grow",
        "flex-shrink", "flex-wrap", "order", "align-content", "align-items",
        "align-self", "justify-content", "justify-items", "justify-self",
        "grid", "grid-area", "grid-template", "grid-template-areas",
        "grid-template-columns", "grid-template-rows", "grid-column",
        "grid-row", "gap", "row-gap", "column-gap", "table-layout",
        "vertical-align", "columns", "column-count", "column-width",
    ),
    TYPOGRAPHY: (
        "font", "font-family", "font-size", "font-style", "font-weight",
        "font-variant", "font-stretch", "font-smoothing", "line-height",
        "letter-spacing", "word-spacing", "text-align", "text-decoration",
        "text-indent", "text-overflow", "text-rendering", "text-shadow",
        "text-transform", "white-space", "word-break", "word-wrap",
        "overflow-wrap", "hyphens", "direction", "unicode-bidi",
        "list-style", "list-style-type", "list-style-position",
        "list-style-image", "quotes", "content",
    ),
    VISUAL: (
        "color", "background", "background-color", "background-image",
        "background-position", "background-repeat", "background-size",
        "background-attachment", "background-clip", "background-origin",
        "border-color", "border-style", "border-radius",
        "border-top-left-radius", "border-top-right-radius",
        "border-bottom-left-radius", "border-bottom-right-radius",
        "border-top-color", "border-right-color", "border-bottom-color",
        "border-left-color", "border-collapse", "border-spacing",
        "box-shadow", "outline", "outline-color", "outline-offset",
        "outline-style", "outline-width", "opacity", "visibility",
        "cursor", "filter", "transform", "transform-origin", "transition",
        "transition-delay", "transition-duration", "transition-property",
        "transition-timing-function", "animation", "animation-delay",
        "animation-direction", "animation-duration", "animation-fill-mode",
        "animation-iteration-count", "animation-name",
        "animation-play-state", "animation-timing-function", "clip",
        "clip-path", "fill", "stroke",
    ),
}

PROPERTY_CATEGORIES: Dict[str, int] = {
    name: category for category, names in _GROUPS.items() for name in names
}

VENDOR_PREFIX = re.compile(r"^-(?:webkit|moz|ms|o)-")


def category_for(prop: str) -> int:
    """Category rank for a property name; unknown properties are Misc."""
    name = VENDOR_PREFIX.sub("", prop.strip().lower())
    return PROPERTY_CATEGORIES.get(name, MISC)
