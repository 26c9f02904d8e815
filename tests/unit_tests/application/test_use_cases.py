"""Unit tests for single-module use-cases and public wrappers."""

from __future__ import annotations

import pytest

import framework_migrator
from framework_migrator import application
from framework_migrator.analysis import ModuleFactSheet
from framework_migrator.application.options import ConversionOptions
from framework_migrator.application.use_cases import analyze_module, transform_module
from framework_migrator.errors import ParseError
from framework_migrator.rewrite import TransformResult


class DummyAnalyzer:
    """Analyzer returning an empty fact sheet and recording its markers."""

    def __init__(self) -> None:
        self.markers = None

    def analyze(self, tree, markers) -> ModuleFactSheet:
        self.markers = markers
        return ModuleFactSheet.empty()


class DummyRewriter:
    """Rewriter capturing the strategy and rule catalog it receives."""

    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    def rewrite(self, tree, facts, options, rules, *, markers, strategy, pages) -> TransformResult:
        self.calls.append({"strategy": strategy, "rules": rules, "pages": tuple(pages)})
        return TransformResult(code="rewritten", modified=True)


def test_transform_module_returns_source_on_parse_failure() -> None:
    """Unparseable modules come back verbatim with one warning."""
    source = "export default function (\n"

    result = transform_module(source_text=source, filename="broken.jsx", options=ConversionOptions())

    assert result.code == source
    assert not result.modified
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("parse failed; module emitted unchanged")


def test_transform_module_uses_injected_ports() -> None:
    """Injected adapters receive the profile catalog for the strategy."""
    analyzer = DummyAnalyzer()
    rewriter = DummyRewriter()

    result = transform_module(
        source_text="export const a = 1;\n",
        filename="a.js",
        options=ConversionOptions(),
        strategy="page",
        analyzer=analyzer,
        rewriter=rewriter,
    )

    assert result.code == "rewritten"
    assert analyzer.markers is not None
    assert rewriter.calls[0]["strategy"] == "page"
    assert rewriter.calls[0]["rules"]


def test_analyze_module_raises_parse_error() -> None:
    """Analysis propagates parse failures."""
    with pytest.raises(ParseError):
        analyze_module(source_text="const = ;", filename="bad.js")


def test_analyze_module_returns_fact_sheet() -> None:
    """Analysis returns the fact sheet of the module."""
    facts = analyze_module(
        source_text="import Link from 'next/link';\nexport const x = 1;\n",
        filename="x.js",
    )

    assert facts.has_framework_a_imports
    assert facts.exports == frozenset({"x"})


def test_public_wrappers_delegate() -> None:
    """Lazy package-level wrappers reach the implementation."""
    result = framework_migrator.transform_source("export const a = 1;\n", "a.js")
    assert result.code == "export const a = 1;\n"

    facts = application.analyze_module(source_text="export const b = 2;\n", filename="b.js")
    assert facts.exports == frozenset({"b"})
    assert framework_migrator.__version__
