"""
Selector discipline: no ID selectors, no type-qualified classes/IDs and
bounded Less/SCSS nesting.
"""

from typing import Iterator

from stylecuro.core.config import LintConfig
from stylecuro.core.models import WARNING, Document, Finding, Ruleset, Span
from stylecuro.rules.base import Rule


class IdSelectorRule(Rule):
    id = "IdSelector"
    description = "Avoid ID selectors; an attribute selector keeps specificity low."

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        for ruleset in document.rulesets():
            for selector in ruleset.selectors:
                for compound in selector.compounds:
                    for ident in compound.ids:
                        line, column = selector.position(ident.offset)
                        yield self.finding(
                            document, config,
                            f"ID selector '#{ident.name}'; use [id=\"{ident.name}\"] instead",
                            Span.at(line, column, len(ident.name) + 1),
                        )


class QualifiedSelectorRule(Rule):
    id = "QualifiedSelector"
    description = "Do not qualify a class or ID with a type selector."
    severity = WARNING

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        allowed = {name.lower() for name in config.qualified_selector_allow}
        for ruleset in document.rulesets():
            for selector in ruleset.selectors:
                for compound in selector.compounds:
                    if not compound.is_qualified or compound.type_name.lower() in allowed:
                        continue
                    line, column = selector.position(compound.offset)
                    yield self.finding(
                        document, config,
                        f"Qualified selector '{compound.text}'; drop the type selector '{compound.type_name}'",
                        Span.at(line, column, len(compound.text)),
                    )


class NestingDepthRule(Rule):
    id = "NestingDepth"
    description = "Nested rulesets may not exceed the configured depth."
    severity = WARNING

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        limit = config.max_nesting_depth
        if not limit:
            return
        for node, depth in document.walk():
            if isinstance(node, Ruleset) and depth > limit and node.selectors:
                first = node.selectors[0]
                yield self.finding(
                    document, config,
                    f"Ruleset '{first.text}' is nested {depth} levels deep; maximum is {limit}",
                    Span.at(first.span.line, first.span.column, len(first.text.split("\n")[0])),
                )
