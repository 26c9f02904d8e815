"""Unit tests for the tree-sitter front-end."""

from __future__ import annotations

import pytest

from framework_migrator.errors import ParseError
from framework_migrator.syntax import (
    NodeKind,
    SyntaxOptions,
    parse_module,
    syntax_for,
    walk,
)
from framework_migrator.syntax.nodes import Export, FunctionDef, Import, ImportBinding, MarkupElement


def test_syntax_for_derives_dialect_from_suffix() -> None:
    """Map module suffixes to grammar and markup settings."""
    assert syntax_for("a.ts") == SyntaxOptions(typescript=True, markup=False)
    assert syntax_for("a.tsx") == SyntaxOptions(typescript=True, markup=True)
    assert syntax_for("a.jsx") == SyntaxOptions(typescript=False, markup=True)
    assert syntax_for("a.js").dialect == "javascript"
    assert syntax_for("a.tsx").dialect == "tsx"


def test_parse_import_bindings() -> None:
    """Expose default, named and aliased import bindings."""
    program = parse_module(
        "import Image from 'next/image';\nimport { useRouter as useR } from \"next/router\"\n",
        "page.jsx",
    )

    first, second = program.body
    assert isinstance(first, Import)
    assert first.source_path == "next/image"
    assert first.bindings == (ImportBinding("default", "Image"),)
    assert first.quote == "'"
    assert first.has_semicolon
    assert isinstance(second, Import)
    assert second.bindings == (ImportBinding("useRouter", "useR"),)
    assert second.quote == '"'
    assert not second.has_semicolon


def test_parse_default_export_function_and_markup() -> None:
    """Default-exported components keep their name and markup body."""
    program = parse_module(
        "export default function About() {\n  return <p className=\"x\">About</p>;\n}\n",
        "about.jsx",
    )

    export = program.body[0]
    assert isinstance(export, Export)
    assert export.is_default
    assert export.names == ("default",)
    function = export.declaration or export.value
    assert isinstance(function, FunctionDef)
    assert function.name == "About"

    elements = [node for node in walk(program) if isinstance(node, MarkupElement)]
    assert [element.tag for element in elements] == ["p"]
    assert [attribute.name for attribute in elements[0].attributes] == ["className"]


def test_parse_error_reports_position() -> None:
    """Reject text containing syntax errors with a ParseError."""
    with pytest.raises(ParseError) as exc_info:
        parse_module("const value = ;\n", "broken.js")

    assert exc_info.value.filename == "broken.js"
    assert "line 1" in exc_info.value.message


def test_markup_rejected_when_disabled() -> None:
    """Fail when markup appears while markup syntax is disabled."""
    with pytest.raises(ParseError, match="markup syntax is not enabled"):
        parse_module(
            "const el = <div />;\n",
            "plain.js",
            SyntaxOptions(typescript=False, markup=False),
        )


def test_excessive_nesting_is_a_parse_error() -> None:
    """Deeply nested input fails cleanly instead of exhausting the stack."""
    source = "const x = " + "[" * 400 + "]" * 400 + ";\n"

    with pytest.raises(ParseError, match="nesting"):
        parse_module(source, "deep.js")


def test_typescript_constructs_become_type_syntax() -> None:
    """Annotations and declarations are surfaced as type-syntax nodes."""
    program = parse_module(
        "interface Props { name: string }\nexport const n: number = 1;\n",
        "types.ts",
    )

    kinds = {node.kind for node in walk(program)}
    assert NodeKind.TYPE_SYNTAX in kinds
    assert program.syntax.typescript
