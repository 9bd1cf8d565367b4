"""
Class naming conventions.

    .tweet                root module (single word)
    .tweet-header         sub-module of `tweet`
    .tweet--expanded      modifier of `tweet`
    .is-active            state, always chained: `.tweet.is-active`
    .js-open              JavaScript hook, never styled
"""

import re
from typing import Iterator, List, NamedTuple

from stylecuro.core.config import LintConfig
from stylecuro.core.models import PROPERTY, Compound, Document, Finding, Ruleset, Selector, SimpleName, Span
from stylecuro.rules.base import Rule

STATE_PREFIX = "is-"
HOOK_PREFIX = "js-"


class ClassUse(NamedTuple):
    ruleset: Ruleset
    selector: Selector
    compound: Compound
    name: SimpleName

    @property
    def span(self) -> Span:
        line, column = self.selector.position(self.name.offset)
        return Span.at(line, column, len(self.name.name) + 1)

    @property
    def is_mixin_definition(self) -> bool:
        local = self.name.offset - self.compound.offset
        return self.compound.text[local + 1 + len(self.name.name):].startswith("(")


def class_uses(document: Document) -> List[ClassUse]:
    uses = []
    for ruleset in document.rulesets():
        for selector in ruleset.selectors:
            for compound in selector.compounds:
                for name in compound.classes:
                    uses.append(ClassUse(ruleset, selector, compound, name))
    return uses


class NamingConventionRule(Rule):
    id = "NamingConvention"
    description = "Class names follow the module / sub-module / modifier / is- / js- conventions."

    def check(self, document: Document, config: LintConfig) -> Iterator[Finding]:
        pattern = re.compile(config.class_pattern)
        exceptions = set(config.root_module_exceptions)
        uses = [u for u in class_uses(document) if not u.is_mixin_definition]
        # Every hyphenless class in the document names a root module
        roots = {u.name.name for u in uses if "-" not in u.name.name}

        for use in uses:
            name = use.name.name
            if "{" in name:
                continue  # interpolated, unknown until compile time

            if not pattern.match(name):
                yield self.finding(document, config,
                                   f"Class '.{name}' does not match the naming pattern", use.span)
                continue

            if name.startswith(HOOK_PREFIX):
                if any(d.kind == PROPERTY for d in use.ruleset.declarations):
                    yield self.finding(
                        document, config,
                        f"JavaScript hook '.{name}' must not carry styles; style a module class instead",
                        use.span,
                    )
                continue

            if name.startswith(STATE_PREFIX):
                partners = [c for c in use.compound.classes
                            if not c.name.startswith((STATE_PREFIX, HOOK_PREFIX))]
                if not partners and not use.compound.has_parent_ref:
                    yield self.finding(
                        document, config,
                        f"State class '.{name}' must be chained to a module class (e.g. '.module.{name}')",
                        use.span,
                    )
                continue

            if "-" not in name:
                continue

            if name.count("--") > 1:
                yield self.finding(document, config,
                                   f"Class '.{name}' stacks modifiers; use one '--' modifier per class",
                                   use.span)
                continue

            if "--" in name and "-" in name.split("--", 1)[1]:
                yield self.finding(document, config,
                                   f"Class '.{name}' must end with its '--' modifier",
                                   use.span)
                continue

            root = name.split("-", 1)[0]
            if root in roots:
                continue  # sub-module or modifier of a known module
            if not config.root_module_allow_hyphen and name not in exceptions:
                yield self.finding(
                    document, config,
                    f"Root module '.{name}' should be a single word without hyphens",
                    use.span,
                )
