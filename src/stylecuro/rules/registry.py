"""
Fixed rule table.

Rules are registered once here, in the order they are run. The table is a
tuple, so the set of checks is known statically and cannot change at runtime.
"""

from typing import Dict, Optional, Tuple

from stylecuro.rules.base import Rule
from stylecuro.rules.formatting import BracePlacementRule, DeclarationSeparationRule
from stylecuro.rules.naming import NamingConventionRule
from stylecuro.rules.ordering import DeclarationOrderRule
from stylecuro.rules.selectors import IdSelectorRule, NestingDepthRule, QualifiedSelectorRule
from stylecuro.rules.values import HexColorRule, ImportantUsageRule, QuoteStyleRule, ZeroUnitRule
from stylecuro.rules.whitespace import IndentationRule, MaxLineLengthRule, TrailingWhitespaceRule

RULES: Tuple[Rule, ...] = (
    # Whitespace (raw lines)
    IndentationRule(),
    TrailingWhitespaceRule(),
    MaxLineLengthRule(),
    # Ruleset formatting
    BracePlacementRule(),
    DeclarationSeparationRule(),
    # Values
    HexColorRule(),
    QuoteStyleRule(),
    ZeroUnitRule(),
    ImportantUsageRule(),
    # Ordering
    DeclarationOrderRule(),
    # Selectors
    IdSelectorRule(),
    QualifiedSelectorRule(),
    NestingDepthRule(),
    # Naming
    NamingConventionRule(),
)

_BY_ID: Dict[str, Rule] = {rule.id: rule for rule in RULES}
RULE_IDS: Tuple[str, ...] = tuple(_BY_ID)


def get_rule(rule_id: str) -> Optional[Rule]:
    return _BY_ID.get(rule_id)
