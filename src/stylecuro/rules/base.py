#!/usr/bin/env python3
"""
STYLECURO RULE BASE
-------------------
Every check is a Rule subclass with a stable id, a default severity and
a scope. Rules are pure: they read the Document and the LintConfig and
return Findings. They never see each other's results.

Author: StyleCuro Team
Date: 2026-10-18
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from stylecuro.core.config import LintConfig
from stylecuro.core.models import ERROR, Document, Finding, Span

# Scopes: "lines" rules only need the raw line index and still run when the
# file could not be decoded cleanly; "tree" rules need the parse tree.
LINES = "lines"
TREE = "tree"


class Rule(ABC):
    """
    Base class for style rules.

    Concrete rules set `id`, `description`, optionally `severity` and
    `scope`, and implement `check()`.
    """

    id: str = ""
    description: str = ""
    severity: str = ERROR
    scope: str = TREE

    @abstractmethod
    def check(self, document: Document, config: LintConfig) -> Iterable[Finding]:
        """Yields the findings for one document."""

    def finding(self, document: Document, config: LintConfig, message: str, span: Span,
                related: Optional[Span] = None) -> Finding:
        return Finding(
            rule_id=self.id,
            severity=config.severity_for(self.id, self.severity),
            message=message,
            span=span,
            path=document.path,
            related=related,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.id!r})"
