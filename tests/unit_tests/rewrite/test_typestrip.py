"""Unit tests for type-annotation stripping."""

from __future__ import annotations

from framework_migrator.syntax import parse_module

TYPED_SOURCE = """\
import type { User } from './types';

interface Props {
  name: string;
}

export function greet(props: Props, user?: User): string {
  return `hi ${props.name}` as string;
}
"""


def test_strip_types_emits_javascript(transform) -> None:
    """Every type-only construct is removed when types are not preserved."""
    result = transform(TYPED_SOURCE, "greet.ts", preserve_type_annotations=False)

    assert "interface" not in result.code
    assert "import type" not in result.code
    assert ": Props" not in result.code
    assert "): string" not in result.code
    assert " as string" not in result.code
    assert "export function greet(props, user) {" in result.code
    assert result.syntax is not None and not result.syntax.typescript
    assert any(change.startswith("type annotations stripped") for change in result.changes)
    parse_module(result.code, "greet.js")


def test_types_preserved_by_default(transform) -> None:
    """TypeScript modules without framework usage are untouched by default."""
    result = transform(TYPED_SOURCE, "greet.ts")

    assert result.code == TYPED_SOURCE
    assert not result.modified


def test_strip_keeps_value_bindings_of_mixed_import(transform) -> None:
    """Type-only specifiers are removed from mixed imports."""
    source = "import { api, type Client } from './api';\n\nexport const c: Client = api;\n"
    result = transform(source, "client.ts", preserve_type_annotations=False)

    assert "import { api } from './api';" in result.code
    assert "export const c = api;" in result.code


def test_strip_types_with_framework_rewrite(transform) -> None:
    """Stripping composes with framework rewrites in the same module."""
    source = """\
import { useRouter } from 'next/router';

export function useGo(): () => void {
  const router = useRouter();
  return () => router.push('/');
}
"""
    result = transform(source, "go.ts", preserve_type_annotations=False)

    assert "export function useGo() {" in result.code
    assert "navigate('/')" in result.code
    parse_module(result.code, "go.js")


def test_stripped_framework_type_import_is_not_reported(transform) -> None:
    """A type-only framework import removed by stripping draws no warning."""
    source = """\
import type { NextPage } from 'next';

const Home: NextPage = () => <main />;

export default Home;
"""
    stripped = transform(source, "Home.tsx", preserve_type_annotations=False)
    kept = transform(source, "Home.tsx")

    assert "NextPage" not in stripped.code
    assert not any("left unchanged" in warning for warning in stripped.warnings)
    assert kept.warnings == ("import from 'next' has no react equivalent; left unchanged",)
