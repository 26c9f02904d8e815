"""Tree-sitter front-end producing structural trees for one module."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import lru_cache
from pathlib import PurePosixPath

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from framework_migrator.errors import ParseError
from framework_migrator.syntax.nodes import (
    Block,
    Call,
    Comment,
    Export,
    FunctionDef,
    Identifier,
    Import,
    ImportBinding,
    Literal,
    MarkupAttribute,
    MarkupElement,
    MemberAccess,
    Other,
    Program,
    Return,
    SourceSpan,
    StructuralNode,
    SyntaxOptions,
    TypeSyntax,
    VariableBinding,
)
from framework_migrator.types import Dialect

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = frozenset({".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts"})
TYPESCRIPT_SUFFIXES = frozenset({".ts", ".tsx", ".mts", ".cts"})
MARKUP_FREE_SUFFIXES = frozenset({".ts", ".mts", ".cts"})

# Conversion recurses once per CST level; this keeps well inside the
# interpreter's default recursion limit.
MAX_NESTING_DEPTH = 256

_GRAMMARS: dict[Dialect, Callable[[], object]] = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_COMMENT_TYPES = frozenset({"comment", "html_comment"})
_LITERAL_TYPES = ("number", "true", "false", "null", "undefined", "regex")
_TYPE_ROLES = {
    "type_annotation": "annotation",
    "asserts_annotation": "annotation",
    "type_predicate_annotation": "annotation",
    "interface_declaration": "declaration",
    "type_alias_declaration": "declaration",
    "type_arguments": "arguments",
    "type_parameters": "parameters",
    "accessibility_modifier": "modifier",
}
_DECLARATION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "class_declaration",
        "abstract_class_declaration",
        "interface_declaration",
        "type_alias_declaration",
        "enum_declaration",
    }
)


class _NestingTooDeep(Exception):
    pass


def syntax_for(filename: str) -> SyntaxOptions:
    """Derive default syntax options from a module filename.

    ``.ts`` modules never accept markup; ``.tsx`` accepts both. Plain
    JavaScript suffixes use the JSX-capable JavaScript grammar.
    """
    suffix = PurePosixPath(filename).suffix.lower()
    if suffix in TYPESCRIPT_SUFFIXES:
        return SyntaxOptions(typescript=True, markup=suffix not in MARKUP_FREE_SUFFIXES)
    return SyntaxOptions(typescript=False, markup=True)


@lru_cache(maxsize=None)
def _language(dialect: Dialect) -> Language:
    return Language(_GRAMMARS[dialect]())


def _parser(dialect: Dialect) -> Parser:
    return Parser(_language(dialect))


def parse_module(
    source_text: str,
    filename: str,
    syntax: SyntaxOptions | None = None,
) -> Program:
    """Parse one module into a structural tree.

    Parameters
    ----------
    source_text : str
        Full module text.
    filename : str
        Module name used for diagnostics and default syntax selection.
    syntax : SyntaxOptions | None
        Enabled syntax features. Derived from ``filename`` when omitted.

    Returns
    -------
    Program
        Root of the structural tree.

    Raises
    ------
    ParseError
        If the text contains any syntax error, if markup appears while
        markup is disabled, or if nesting exceeds the converter bound.
    """
    syntax = syntax or syntax_for(filename)
    data = source_text.encode("utf-8")
    tree = _parser(syntax.dialect).parse(data)
    root = tree.root_node
    if root.has_error:
        raise ParseError(filename, _describe_error(root))

    builder = _TreeBuilder(data)
    try:
        body = builder.children(root)
    except (_NestingTooDeep, RecursionError) as exc:
        raise ParseError(filename, "nesting exceeds the supported depth") from exc
    if builder.markup_position is not None and not syntax.markup:
        line, column = builder.markup_position
        raise ParseError(
            filename,
            f"markup syntax is not enabled (line {line}, column {column})",
        )
    logger.debug("Parsed %s as %s (%d top-level nodes)", filename, syntax.dialect, len(body))
    return Program(
        span=SourceSpan(0, len(data)),
        body=body,
        source_text=source_text,
        filename=filename,
        syntax=syntax,
    )


def _describe_error(root: Node) -> str:
    stack = [root]
    while stack:
        node = stack.pop()
        row, column = node.start_point
        if node.is_missing:
            return f"missing '{node.type}' at line {row + 1}, column {column + 1}"
        if node.type == "ERROR":
            return f"unexpected syntax at line {row + 1}, column {column + 1}"
        if node.has_error:
            stack.extend(reversed(node.children))
    return "syntax error"


def _span(node: Node) -> SourceSpan:
    row, column = node.start_point
    return SourceSpan(node.start_byte, node.end_byte, row + 1, column + 1)


def _has_token(node: Node, *tokens: str) -> bool:
    return any(not child.is_named and child.type in tokens for child in node.children)


class _TreeBuilder:
    """Convert a tree-sitter CST into structural nodes.

    Builders are looked up by CST node type; anything without a builder
    becomes ``Other`` wrapping its converted named children.
    """

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._depth = 0
        self.markup_position: tuple[int, int] | None = None
        self._builders: dict[str, Callable[[Node], StructuralNode]] = {
            "import_statement": self._import,
            "export_statement": self._export,
            "function_declaration": self._function,
            "generator_function_declaration": self._function,
            "function_expression": self._function,
            "function": self._function,
            "generator_function": self._function,
            "arrow_function": self._function,
            "method_definition": self._function,
            "variable_declarator": self._binding,
            "call_expression": self._call,
            "member_expression": self._member,
            "identifier": self._identifier,
            "jsx_element": self._element,
            "jsx_self_closing_element": self._element,
            "jsx_fragment": self._element,
            "string": self._string,
            "statement_block": self._block,
            "return_statement": self._return,
            "comment": self._comment,
            "html_comment": self._comment,
            "as_expression": self._type_tail,
            "satisfies_expression": self._type_tail,
            "non_null_expression": self._type_tail,
            "optional_parameter": self._optional_parameter,
        }
        for cst_type in _LITERAL_TYPES:
            self._builders[cst_type] = self._literal
        for cst_type in _TYPE_ROLES:
            self._builders[cst_type] = self._type_syntax

    def text(self, node: Node) -> str:
        return self._data[node.start_byte : node.end_byte].decode("utf-8")

    def convert(self, node: Node) -> StructuralNode:
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise _NestingTooDeep
        try:
            builder = self._builders.get(node.type, self._other)
            return builder(node)
        finally:
            self._depth -= 1

    def children(self, node: Node) -> tuple[StructuralNode, ...]:
        return tuple(self.convert(child) for child in node.named_children)

    def _other(self, node: Node) -> Other:
        return Other(span=_span(node), cst_type=node.type, nodes=self.children(node))

    def _import(self, node: Node) -> StructuralNode:
        source = node.child_by_field_name("source")
        if source is None:
            # `import x = require("...")` has no module specifier field.
            return self._other(node)
        type_only = _has_token(node, "type", "typeof")
        bindings: list[ImportBinding] = []
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    bindings.append(ImportBinding("default", self.text(part), type_only))
                elif part.type == "namespace_import":
                    local = next(c for c in part.named_children if c.type == "identifier")
                    bindings.append(ImportBinding("*", self.text(local), type_only))
                elif part.type == "named_imports":
                    bindings.extend(self._import_specifiers(part, type_only))
        raw_source = self.text(source)
        statement = self.text(node)
        return Import(
            span=_span(node),
            source_path=raw_source[1:-1],
            bindings=tuple(bindings),
            type_only=type_only,
            quote=raw_source[:1] or "'",
            has_semicolon=statement.rstrip().endswith(";"),
        )

    def _import_specifiers(self, named: Node, type_only: bool) -> list[ImportBinding]:
        bindings = []
        for spec in named.named_children:
            if spec.type != "import_specifier":
                continue
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            imported = self.text(name)
            if name.type == "string":
                imported = imported[1:-1]
            local = self.text(alias) if alias is not None else imported
            bindings.append(
                ImportBinding(
                    imported,
                    local,
                    type_only or _has_token(spec, "type", "typeof"),
                )
            )
        return bindings

    def _export(self, node: Node) -> Export:
        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        source = node.child_by_field_name("source")
        is_default = _has_token(node, "default")
        names: list[str] = ["default"] if is_default else []
        if declaration is not None and not is_default:
            names.extend(self._declared_names(declaration))
        for clause in node.named_children:
            if clause.type == "export_clause":
                for spec in clause.named_children:
                    if spec.type != "export_specifier":
                        continue
                    exported = spec.child_by_field_name("alias") or spec.child_by_field_name(
                        "name"
                    )
                    names.append(self.text(exported))
            elif clause.type == "namespace_export":
                names.append(self.text(clause.named_children[-1]))
        if _has_token(node, "*") and not names:
            names.append("*")
        return Export(
            span=_span(node),
            names=tuple(names),
            is_default=is_default,
            declaration=self.convert(declaration) if declaration is not None else None,
            value=self.convert(value) if value is not None else None,
            source_path=self.text(source)[1:-1] if source is not None else None,
            type_only=_has_token(node, "type"),
        )

    def _declared_names(self, declaration: Node) -> list[str]:
        if declaration.type in _DECLARATION_TYPES:
            name = declaration.child_by_field_name("name")
            return [self.text(name)] if name is not None else []
        names = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                names.append(self.text(name))
        return names

    def _function(self, node: Node) -> FunctionDef:
        name = node.child_by_field_name("name")
        params = node.child_by_field_name("parameters")
        single = node.child_by_field_name("parameter")
        body = node.child_by_field_name("body")
        return_type = node.child_by_field_name("return_type")
        type_params = node.child_by_field_name("type_parameters")

        if params is not None:
            parameters = self.children(params)
            parameters_span = _span(params)
        elif single is not None:
            parameters = (self.convert(single),)
            parameters_span = _span(single)
        else:
            parameters, parameters_span = (), None

        body_node: StructuralNode | None = None
        if body is not None and node.type == "arrow_function" and body.type != "statement_block":
            body_node = Return(span=_span(body), value=self.convert(body), implicit=True)
        elif body is not None:
            body_node = self.convert(body)

        return FunctionDef(
            span=_span(node),
            name=self.text(name) if name is not None else None,
            name_span=_span(name) if name is not None else None,
            parameters=parameters,
            parameters_span=parameters_span,
            body=body_node,
            is_arrow=node.type == "arrow_function",
            is_async=_has_token(node, "async"),
            return_type=self.convert(return_type) if return_type is not None else None,
            type_parameters=self.convert(type_params) if type_params is not None else None,
        )

    def _binding(self, node: Node) -> VariableBinding:
        name = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        annotation = node.child_by_field_name("type")
        return VariableBinding(
            span=_span(node),
            name=self.text(name) if name.type == "identifier" else None,
            pattern=self.convert(name),
            value=self.convert(value) if value is not None else None,
            type_annotation=self.convert(annotation) if annotation is not None else None,
        )

    def _call(self, node: Node) -> Call:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        type_arguments = node.child_by_field_name("type_arguments")
        if function.type == "member_expression":
            callee = self._member(function, callee=True)
        else:
            callee = self.convert(function)
        if arguments is None:
            args: tuple[StructuralNode, ...] = ()
            arguments_span = SourceSpan(node.end_byte, node.end_byte)
        elif arguments.type == "arguments":
            args = self.children(arguments)
            arguments_span = _span(arguments)
        else:
            # Tagged template: the template string is the only argument.
            args = (self.convert(arguments),)
            arguments_span = _span(arguments)
        return Call(
            span=_span(node),
            callee=callee,
            arguments=args,
            arguments_span=arguments_span,
            type_arguments=self.convert(type_arguments) if type_arguments is not None else None,
        )

    def _member(self, node: Node, callee: bool = False) -> MemberAccess:
        target = node.child_by_field_name("object")
        member = node.child_by_field_name("property")
        return MemberAccess(
            span=_span(node),
            target=self.convert(target),
            member=self.text(member),
            member_span=_span(member),
            is_callee=callee,
            optional=node.child_by_field_name("optional_chain") is not None,
        )

    def _identifier(self, node: Node) -> Identifier:
        return Identifier(span=_span(node), name=self.text(node))

    def _element(self, node: Node) -> MarkupElement:
        if self.markup_position is None:
            row, column = node.start_point
            self.markup_position = (row + 1, column + 1)

        if node.type == "jsx_self_closing_element":
            opening, closing = node, None
        else:
            opening = node.child_by_field_name("open_tag")
            closing = node.child_by_field_name("close_tag")

        name = opening.child_by_field_name("name") if opening is not None else None
        tag = self.text(name) if name is not None else ""
        name_spans = [_span(name)] if name is not None else []
        if closing is not None:
            closing_name = closing.child_by_field_name("name")
            if closing_name is not None:
                name_spans.append(_span(closing_name))

        attributes: list[MarkupAttribute] = []
        spreads: list[StructuralNode] = []
        insert_at = name.end_byte if name is not None else node.start_byte
        if opening is not None:
            for attribute in opening.children_by_field_name("attribute"):
                insert_at = attribute.end_byte
                if attribute.type == "jsx_attribute":
                    attributes.append(self._attribute(attribute, tag))
                else:
                    spreads.append(self.convert(attribute))

        body = [
            self.convert(child)
            for child in node.named_children
            if child.type not in ("jsx_opening_element", "jsx_closing_element")
            and node.type != "jsx_self_closing_element"
        ]
        return MarkupElement(
            span=_span(node),
            tag=tag,
            name_spans=tuple(name_spans),
            attributes=tuple(attributes),
            body=(*spreads, *body),
            self_closing=node.type == "jsx_self_closing_element",
            attribute_insert_at=insert_at,
        )

    def _attribute(self, node: Node, element_tag: str) -> MarkupAttribute:
        parts = node.named_children
        name = parts[0]
        previous = node.prev_sibling
        removal_start = previous.end_byte if previous is not None else node.start_byte
        row, column = node.start_point
        return MarkupAttribute(
            span=_span(node),
            name=self.text(name),
            name_span=_span(name),
            element_tag=element_tag,
            removal_span=SourceSpan(removal_start, node.end_byte, row + 1, column + 1),
            value=self.convert(parts[1]) if len(parts) > 1 else None,
        )

    def _string(self, node: Node) -> Literal:
        raw = self.text(node)
        return Literal(span=_span(node), value=raw[1:-1], raw=raw)

    def _literal(self, node: Node) -> Literal:
        raw = self.text(node)
        return Literal(span=_span(node), value=raw, raw=raw)

    def _block(self, node: Node) -> Block:
        return Block(span=_span(node), statements=self.children(node))

    def _return(self, node: Node) -> Return:
        value = next(
            (child for child in node.named_children if child.type not in _COMMENT_TYPES),
            None,
        )
        return Return(
            span=_span(node),
            value=self.convert(value) if value is not None else None,
        )

    def _comment(self, node: Node) -> Comment:
        return Comment(span=_span(node), text=self.text(node))

    def _type_syntax(self, node: Node) -> TypeSyntax:
        return TypeSyntax(span=_span(node), role=_TYPE_ROLES[node.type], removal_span=_span(node))

    def _type_tail(self, node: Node) -> TypeSyntax:
        inner = node.named_children[0]
        row, column = node.start_point
        role = "non_null" if node.type == "non_null_expression" else "assertion"
        return TypeSyntax(
            span=_span(node),
            role=role,
            removal_span=SourceSpan(inner.end_byte, node.end_byte, row + 1, column + 1),
            inner=self.convert(inner),
        )

    def _optional_parameter(self, node: Node) -> Other:
        nodes = list(self.children(node))
        marker = next(
            (child for child in node.children if not child.is_named and child.type == "?"),
            None,
        )
        if marker is not None:
            nodes.append(
                TypeSyntax(
                    span=_span(marker),
                    role="optional_marker",
                    removal_span=_span(marker),
                )
            )
        return Other(span=_span(node), cst_type=node.type, nodes=tuple(nodes))
