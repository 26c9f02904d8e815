"""Markup element and attribute retargeting rules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from framework_migrator.rewrite.base import RewriteContext, RuleCategory, RuleOutcome
from framework_migrator.syntax.emitter import delete, insert, replace
from framework_migrator.syntax.nodes import (
    MarkupAttribute,
    MarkupElement,
    NodeKind,
    StructuralNode,
)


@dataclass(frozen=True)
class ElementSpec:
    """How one source-framework component maps onto the target.

    Parameters
    ----------
    module : str
        Source module the component is imported from.
    imported : str
        Imported name (``"default"`` for default imports).
    label : str
        Component name used in messages.
    target_tag : str
        Tag emitted in place of the local component name.
    target_module : str
        Target module, named in warnings.
    dropped : frozenset[str]
        Attributes with no target equivalent.
    renamed : Mapping[str, str]
        Attributes whose name changes.
    default_attribute : tuple[str, str] | None
        ``(name, rendered value)`` injected when none of ``default_unless``
        is present.
    default_unless : frozenset[str]
        Attributes whose presence suppresses the default.
    """

    module: str
    imported: str
    label: str
    target_tag: str
    target_module: str
    dropped: frozenset[str] = frozenset()
    renamed: Mapping[str, str] | None = None
    default_attribute: tuple[str, str] | None = None
    default_unless: frozenset[str] = frozenset()

    def local_tag(self, context: RewriteContext) -> str | None:
        return context.local_for(self.module, self.imported)


@dataclass(frozen=True)
class ElementRetargetRule:
    """Rename a component's tags and inject its default attribute."""

    spec: ElementSpec
    feature: str | None = "convert_components"
    name: str = "markup-element"

    category: ClassVar[RuleCategory] = RuleCategory.MARKUP
    node_kind: ClassVar[NodeKind] = NodeKind.MARKUP_ELEMENT

    def _needs_default(self, node: MarkupElement) -> bool:
        if self.spec.default_attribute is None:
            return False
        present = {attribute.name for attribute in node.attributes}
        return not present & (self.spec.default_unless | {self.spec.default_attribute[0]})

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        if not isinstance(node, MarkupElement) or node.is_fragment:
            return False
        local = self.spec.local_tag(context)
        if local is None or node.tag != local:
            return False
        return local != self.spec.target_tag or self._needs_default(node)

    def apply(self, node: MarkupElement, context: RewriteContext) -> RuleOutcome:
        edits = [replace(span, self.spec.target_tag) for span in node.name_spans]
        message = f"<{node.tag}> retargeted to <{self.spec.target_tag}>"
        if self._needs_default(node):
            attribute, value = self.spec.default_attribute
            edits.append(insert(node.attribute_insert_at, f" {attribute}={value}"))
            message = f"{message} with default {attribute}={value}"
        return RuleOutcome.change(message, *edits)


@dataclass(frozen=True)
class AttributeDropRule:
    """Remove an attribute the target component does not support."""

    spec: ElementSpec
    feature: str | None = "convert_components"
    name: str = "markup-attribute-drop"

    category: ClassVar[RuleCategory] = RuleCategory.MARKUP
    node_kind: ClassVar[NodeKind] = NodeKind.MARKUP_ATTRIBUTE

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, MarkupAttribute)
            and node.name in self.spec.dropped
            and node.element_tag == self.spec.local_tag(context)
        )

    def apply(self, node: MarkupAttribute, context: RewriteContext) -> RuleOutcome:
        return RuleOutcome.warning(
            f"{self.spec.label} attribute '{node.name}' dropped: "
            f"not supported by {self.spec.target_module}",
            delete(node.removal_span),
            consume_subtree=True,
        )


@dataclass(frozen=True)
class AttributeRenameRule:
    """Rename an attribute whose meaning carries over under a new name."""

    spec: ElementSpec
    feature: str | None = "convert_components"
    name: str = "markup-attribute-rename"

    category: ClassVar[RuleCategory] = RuleCategory.MARKUP
    node_kind: ClassVar[NodeKind] = NodeKind.MARKUP_ATTRIBUTE

    def matches(self, node: StructuralNode, context: RewriteContext) -> bool:
        return (
            isinstance(node, MarkupAttribute)
            and bool(self.spec.renamed)
            and node.name in self.spec.renamed
            and node.element_tag == self.spec.local_tag(context)
        )

    def apply(self, node: MarkupAttribute, context: RewriteContext) -> RuleOutcome:
        target = self.spec.renamed[node.name]
        return RuleOutcome.change(
            f"{self.spec.label} attribute '{node.name}' renamed to '{target}'",
            replace(node.name_span, target),
        )


def element_rules(spec: ElementSpec, feature: str | None = "convert_components") -> list:
    """Element, drop and rename rules for one component spec."""
    return [
        ElementRetargetRule(spec, feature=feature, name=f"markup-element:{spec.label}"),
        AttributeDropRule(spec, feature=feature, name=f"markup-attribute-drop:{spec.label}"),
        AttributeRenameRule(spec, feature=feature, name=f"markup-attribute-rename:{spec.label}"),
    ]
