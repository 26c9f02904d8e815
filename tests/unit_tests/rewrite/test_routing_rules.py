"""Unit tests for routing hook and router member rewrites."""

from __future__ import annotations

NAV_SOURCE = """\
import { useRouter } from 'next/router';

export default function Nav() {
  const router = useRouter();
  return <button onClick={() => router.push('/home')}>Go</button>;
}
"""


def test_router_push_becomes_navigate(transform) -> None:
    """Rewrite router.push into a navigate call with exactly one push change."""
    result = transform(NAV_SOURCE, "Nav.jsx")

    assert result.modified
    assert "navigate('/home')" in result.code
    assert "const navigate = useNavigate();" in result.code
    assert "import { useNavigate } from 'react-router-dom';" in result.code
    assert "next/router" not in result.code
    assert "router" not in result.code.replace("react-router-dom", "")
    assert [change for change in result.changes if "push" in change] == [
        "router.push transformed to navigate"
    ]
    assert result.required_modules == ("react-router-dom",)
    assert result.warnings == ()


def test_router_members_bind_location_and_params(transform) -> None:
    """Member reads pull in the matching target hooks."""
    source = """\
import { useRouter } from 'next/router';

export default function Post() {
  const router = useRouter();
  const { id } = router.query;
  return <p>{router.pathname}{id}</p>;
}
"""
    result = transform(source, "Post.jsx")

    assert "const navigate = useNavigate(), location = useLocation(), params = useParams();" in (
        result.code
    )
    assert "const { id } = params;" in result.code
    assert "{location.pathname}" in result.code
    assert "import { useNavigate, useLocation, useParams } from 'react-router-dom';" in result.code
    assert "router.query transformed to params" in result.changes
    assert "router.pathname transformed to location.pathname" in result.changes


def test_replace_and_back_calls(transform) -> None:
    """router.replace adds the replace flag and router.back navigates by -1."""
    source = """\
import { useRouter } from 'next/router';

export function useActions() {
  const router = useRouter();
  return {
    login: () => router.replace('/login'),
    back: () => router.back(),
  };
}
"""
    result = transform(source, "actions.js")

    assert "navigate('/login', { replace: true })" in result.code
    assert "navigate(-1)" in result.code
    assert "router.replace transformed to navigate" in result.changes
    assert "router.back transformed to navigate" in result.changes


def test_router_used_as_value_warns(transform) -> None:
    """Passing the router object around is flagged for manual review."""
    source = """\
import { useRouter } from 'next/router';

export function Track() {
  const router = useRouter();
  log(router);
  return null;
}
"""
    result = transform(source, "track.jsx")

    assert any("router object 'router' used directly" in warning for warning in result.warnings)


def test_destructured_hook_result_warns(transform) -> None:
    """Destructured hook results are retargeted with a warning."""
    source = """\
import { useRouter } from 'next/router';

export function Back() {
  const { push } = useRouter();
  return <a onClick={() => push('/')}>Back</a>;
}
"""
    result = transform(source, "back.jsx")

    assert "const { push } = useNavigate();" in result.code
    assert any(warning.startswith("destructured useRouter() result") for warning in result.warnings)


def test_dynamic_import_becomes_lazy(transform) -> None:
    """dynamic() loaders become lazy() and drop their options with a warning."""
    source = """\
import dynamic from 'next/dynamic';

const Chart = dynamic(() => import('../components/Chart'), { ssr: false });

export default Chart;
"""
    result = transform(source, "chart.js")

    assert "const Chart = lazy(() => import('../components/Chart'));" in result.code
    assert "import { lazy } from 'react';" in result.code
    assert "next/dynamic" not in result.code
    assert any("options dropped" in warning for warning in result.warnings)


def test_routing_toggle_off_leaves_router_untouched(transform) -> None:
    """With routing conversion disabled the module only gains a warning."""
    result = transform(NAV_SOURCE, "Nav.jsx", convert_routing=False)

    assert result.code == NAV_SOURCE
    assert not result.modified
    assert result.warnings == (
        "import from 'next/router' has no react equivalent; left unchanged",
    )


def _named_specifiers(code: str) -> list[list[str]]:
    return [
        [spec.strip() for spec in line.split("{", 1)[1].split("}", 1)[0].split(",")]
        for line in code.splitlines()
        if line.startswith("import {")
    ]


def test_injected_imports_never_repeat_a_binding(transform) -> None:
    """A hook needed by both the import and the call rules is imported once."""
    dynamic_source = (
        "import dynamic from 'next/dynamic';\n\n"
        "export const Chart = dynamic(() => import('./Chart'));\n"
    )
    members_source = NAV_SOURCE.replace("router.push('/home')", "router.push(router.pathname)")

    cases = ((NAV_SOURCE, "Nav.jsx"), (members_source, "Nav.jsx"), (dynamic_source, "chart.js"))

    for source, filename in cases:
        result = transform(source, filename)

        for specifiers in _named_specifiers(result.code):
            assert len(specifiers) == len(set(specifiers)), result.code
    assert "import { useNavigate, useLocation } from 'react-router-dom';" in transform(
        members_source, "Nav.jsx"
    ).code


def test_annotated_router_binding_is_retargeted(transform) -> None:
    """A typed useRouter() binding is replaced and loses its annotation."""
    source = """\
import { useRouter, NextRouter } from 'next/router';

export default function Item() {
  const router: NextRouter = useRouter();
  return <button onClick={() => router.push('/x')}>{router.query.id}</button>;
}
"""
    result = transform(source, "Item.tsx")

    assert "const navigate = useNavigate(), params = useParams();" in result.code
    assert "navigate('/x')" in result.code
    assert "{params.id}" in result.code
    assert "NextRouter" not in result.code
    assert "import { useNavigate, useParams } from 'react-router-dom';" in result.code
    assert (
        "useRouter() binding 'router' retargeted to react-router-dom hooks; "
        "its type annotation was dropped"
    ) in result.changes


def test_project_local_use_router_is_left_alone(transform) -> None:
    """A useRouter hook imported from the project is not a routing hook."""
    source = """\
import { useRouter } from './lib/my-router';

export function Menu() {
  const router = useRouter();
  return <a onClick={() => router.push('/')}>Home</a>;
}
"""
    result = transform(source, "Menu.jsx")

    assert result.code == source
    assert not result.modified
    assert result.changes == ()
    assert result.required_modules == ()
