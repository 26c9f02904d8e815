"""Closed tagged-union node types for parsed modules.

Each variant is a frozen dataclass carrying only the fields valid for its
kind. ``children`` is derived from those fields, so traversal never needs
to probe optional attributes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from functools import cached_property
from enum import StrEnum
from typing import ClassVar

from framework_migrator.types import Dialect


class NodeKind(StrEnum):
    """Tag identifying a structural node variant."""

    PROGRAM = "program"
    IMPORT = "import"
    EXPORT = "export"
    FUNCTION_DEF = "function_def"
    VARIABLE_BINDING = "variable_binding"
    CALL = "call"
    MEMBER_ACCESS = "member_access"
    IDENTIFIER = "identifier"
    MARKUP_ELEMENT = "markup_element"
    MARKUP_ATTRIBUTE = "markup_attribute"
    LITERAL = "literal"
    BLOCK = "block"
    RETURN = "return"
    COMMENT = "comment"
    TYPE_SYNTAX = "type_syntax"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Byte range of a node plus its 1-based start position."""

    start_byte: int
    end_byte: int
    line: int = 1
    column: int = 1


@dataclass(frozen=True, slots=True)
class SyntaxOptions:
    """Syntax features enabled for one parse.

    Parameters
    ----------
    typescript : bool
        Accept type-annotation syntax.
    markup : bool
        Accept embedded markup (JSX) syntax.
    """

    typescript: bool = False
    markup: bool = True

    @property
    def dialect(self) -> Dialect:
        if self.typescript and self.markup:
            return "tsx"
        if self.typescript:
            return "typescript"
        return "javascript"


@dataclass(frozen=True, slots=True)
class ImportBinding:
    """One name bound by an import statement.

    ``imported`` is ``"default"`` for default imports and ``"*"`` for
    namespace imports.
    """

    imported: str
    local: str
    type_only: bool = False


@dataclass(frozen=True, kw_only=True)
class _NodeBase:
    kind: ClassVar[NodeKind]

    span: SourceSpan

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return ()


@dataclass(frozen=True, kw_only=True)
class Program(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.PROGRAM

    body: tuple[StructuralNode, ...]
    source_text: str
    filename: str
    syntax: SyntaxOptions

    @cached_property
    def source_bytes(self) -> bytes:
        return self.source_text.encode("utf-8")

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return self.body


@dataclass(frozen=True, kw_only=True)
class Import(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.IMPORT

    source_path: str
    bindings: tuple[ImportBinding, ...]
    type_only: bool = False
    quote: str = "'"
    has_semicolon: bool = True


@dataclass(frozen=True, kw_only=True)
class Export(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.EXPORT

    names: tuple[str, ...]
    is_default: bool = False
    declaration: StructuralNode | None = None
    value: StructuralNode | None = None
    source_path: str | None = None
    type_only: bool = False

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return tuple(node for node in (self.declaration, self.value) if node is not None)


@dataclass(frozen=True, kw_only=True)
class FunctionDef(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION_DEF

    name: str | None
    name_span: SourceSpan | None
    parameters: tuple[StructuralNode, ...]
    parameters_span: SourceSpan | None
    body: StructuralNode | None
    is_arrow: bool = False
    is_async: bool = False
    return_type: StructuralNode | None = None
    type_parameters: StructuralNode | None = None

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        head = () if self.type_parameters is None else (self.type_parameters,)
        tail = tuple(node for node in (self.return_type, self.body) if node is not None)
        return (*head, *self.parameters, *tail)


@dataclass(frozen=True, kw_only=True)
class VariableBinding(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_BINDING

    name: str | None
    pattern: StructuralNode
    value: StructuralNode | None = None
    type_annotation: StructuralNode | None = None

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return tuple(
            node
            for node in (self.pattern, self.type_annotation, self.value)
            if node is not None
        )


@dataclass(frozen=True, kw_only=True)
class Call(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.CALL

    callee: StructuralNode
    arguments: tuple[StructuralNode, ...]
    arguments_span: SourceSpan
    type_arguments: StructuralNode | None = None

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        head = (self.callee,) if self.type_arguments is None else (
            self.callee,
            self.type_arguments,
        )
        return (*head, *self.arguments)


@dataclass(frozen=True, kw_only=True)
class MemberAccess(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.MEMBER_ACCESS

    target: StructuralNode
    member: str
    member_span: SourceSpan
    is_callee: bool = False
    optional: bool = False

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return (self.target,)


@dataclass(frozen=True, kw_only=True)
class Identifier(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER

    name: str


@dataclass(frozen=True, kw_only=True)
class MarkupAttribute(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.MARKUP_ATTRIBUTE

    name: str
    name_span: SourceSpan
    element_tag: str
    removal_span: SourceSpan
    value: StructuralNode | None = None

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return () if self.value is None else (self.value,)


@dataclass(frozen=True, kw_only=True)
class MarkupElement(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.MARKUP_ELEMENT

    tag: str
    name_spans: tuple[SourceSpan, ...]
    attributes: tuple[MarkupAttribute, ...]
    body: tuple[StructuralNode, ...]
    self_closing: bool = False
    attribute_insert_at: int = 0

    @property
    def is_fragment(self) -> bool:
        return not self.tag

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return (*self.attributes, *self.body)


@dataclass(frozen=True, kw_only=True)
class Literal(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.LITERAL

    value: str
    raw: str


@dataclass(frozen=True, kw_only=True)
class Block(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.BLOCK

    statements: tuple[StructuralNode, ...]

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return self.statements


@dataclass(frozen=True, kw_only=True)
class Return(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.RETURN

    value: StructuralNode | None
    implicit: bool = False

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return () if self.value is None else (self.value,)


@dataclass(frozen=True, kw_only=True)
class Comment(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    text: str


@dataclass(frozen=True, kw_only=True)
class TypeSyntax(_NodeBase):
    """TypeScript-only syntax.

    ``removal_span`` is the byte range deleted when types are stripped; for
    assertions it covers only the ``as T`` / ``!`` tail so that edits inside
    ``inner`` stay independent.
    """

    kind: ClassVar[NodeKind] = NodeKind.TYPE_SYNTAX

    role: str
    removal_span: SourceSpan
    inner: StructuralNode | None = None

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return () if self.inner is None else (self.inner,)


@dataclass(frozen=True, kw_only=True)
class Other(_NodeBase):
    kind: ClassVar[NodeKind] = NodeKind.OTHER

    cst_type: str
    nodes: tuple[StructuralNode, ...] = ()

    @property
    def children(self) -> tuple[StructuralNode, ...]:
        return self.nodes


type StructuralNode = (
    Program
    | Import
    | Export
    | FunctionDef
    | VariableBinding
    | Call
    | MemberAccess
    | Identifier
    | MarkupElement
    | MarkupAttribute
    | Literal
    | Block
    | Return
    | Comment
    | TypeSyntax
    | Other
)


def walk(node: StructuralNode) -> Iterator[StructuralNode]:
    """Yield ``node`` and its descendants in pre-order without recursion."""
    stack: list[StructuralNode] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def walk_pruned(
    node: StructuralNode,
    prune: set[int],
) -> Iterator[StructuralNode]:
    """Pre-order walk that skips the subtrees of nodes whose ``id`` is pruned.

    ``prune`` may grow while iterating; a node added after it was yielded
    has its children skipped.
    """
    stack: list[StructuralNode] = [node]
    while stack:
        current = stack.pop()
        yield current
        if id(current) in prune:
            continue
        stack.extend(reversed(current.children))


def node_text(program: Program, node: StructuralNode | SourceSpan) -> str:
    """Return the source text covered by a node or span."""
    span = node if isinstance(node, SourceSpan) else node.span
    return program.source_bytes[span.start_byte : span.end_byte].decode("utf-8")
