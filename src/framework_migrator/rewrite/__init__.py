"""Rule-based rewriter: stateless rules applied by category."""

from .base import (
    ImportRequirement,
    PageRoute,
    RewriteContext,
    RewriteRule,
    RuleCategory,
    RuleOutcome,
    TransformResult,
)
from .rewriter import active_rules, passthrough, rewrite

__all__ = [
    "ImportRequirement",
    "PageRoute",
    "RewriteContext",
    "RewriteRule",
    "RuleCategory",
    "RuleOutcome",
    "TransformResult",
    "active_rules",
    "passthrough",
    "rewrite",
]
