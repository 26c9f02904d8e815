"""Unit tests for the HTTP transport."""

from __future__ import annotations

import sys
import types
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

NAV_SOURCE = """\
import Link from 'next/link';

export function Nav() {
  return <Link href="/about">About</Link>;
}
"""


def _client() -> TestClient:
    pytest.importorskip("fastapi")
    pytest.importorskip("httpx")

    from fastapi.testclient import TestClient

    module = __import__("framework_migrator.converter.http_server", fromlist=["create_app"])

    return TestClient(module.create_app())


def test_health_and_readiness() -> None:
    """Probe endpoints report status."""
    client = _client()

    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/readyz").json() == {"status": "ready"}


def test_transform_endpoint() -> None:
    """Rewrite one module over HTTP."""
    response = _client().post(
        "/v1/transform",
        json={"source_text": NAV_SOURCE, "filename": "Nav.jsx"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert '<Link to="/about">' in payload["code"]
    assert payload["modified"] is True
    assert "react-router-dom" in payload["required_modules"]


def test_transform_endpoint_rejects_invalid_options() -> None:
    """Invalid framework pairs map to 400."""
    response = _client().post(
        "/v1/transform",
        json={"source_text": NAV_SOURCE, "source_framework": "vue"},
    )

    assert response.status_code == 400
    assert "Invalid conversion options" in response.json()["detail"]


def test_transform_endpoint_forbids_unknown_fields() -> None:
    """Unknown request fields fail schema validation."""
    response = _client().post(
        "/v1/transform",
        json={"source_text": NAV_SOURCE, "profile_modules": ["evil"]},
    )

    assert response.status_code == 422


def test_analyze_endpoint() -> None:
    """Return the fact sheet of a module."""
    response = _client().post(
        "/v1/analyze",
        json={"source_text": NAV_SOURCE, "filename": "Nav.jsx"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["has_framework_a_imports"] is True
    assert payload["components"] == ["Nav"]


def test_analyze_endpoint_parse_error_is_400() -> None:
    """Unparseable modules map to 400."""
    response = _client().post("/v1/analyze", json={"source_text": "const = ;"})

    assert response.status_code == 400


def test_convert_endpoint_without_content() -> None:
    """Convert a batch and omit file contents on request."""
    response = _client().post(
        "/v1/convert",
        json={
            "files": [
                {"path": "components/Nav.jsx", "content": NAV_SOURCE},
                {"path": "pages/_document.jsx", "content": "export default () => null;\n"},
            ],
            "include_content": False,
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["total_files"] == 2
    assert payload["transformed_files"] == ["src/components/Nav.jsx"]
    assert payload["errors"][0]["code"] == "FILE_SKIPPED"
    assert "content" not in payload["outputs"][0]


def test_convert_endpoint_rejects_escaping_paths() -> None:
    """Input paths must stay inside the project."""
    response = _client().post(
        "/v1/convert",
        json={"files": [{"path": "../x.js", "content": ""}]},
    )

    assert response.status_code == 400


def test_main_uses_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """The entrypoint reads host and port from the environment."""
    pytest.importorskip("fastapi")
    from framework_migrator.converter import http_server

    calls: dict[str, object] = {}

    def fake_run(app_ref: str, *, host: str, port: int, reload: bool) -> None:
        calls.update(app_ref=app_ref, host=host, port=port, reload=reload)

    monkeypatch.setattr(http_server, "uvicorn", types.SimpleNamespace(run=fake_run))
    monkeypatch.setenv("MIGRATOR_HTTP_HOST", "127.0.0.1")
    monkeypatch.setenv("MIGRATOR_HTTP_PORT", "9001")
    monkeypatch.setattr(sys, "argv", ["migrator-http"])

    http_server.main()

    assert calls == {
        "app_ref": "framework_migrator.converter.http_server:app",
        "host": "127.0.0.1",
        "port": 9001,
        "reload": False,
    }


def test_request_options_ignore_payload_fields() -> None:
    """Only the shared flags reach the option builder."""
    from framework_migrator.converter.http_server import ConvertRequest, TransformRequest

    transform = TransformRequest(
        source_text=NAV_SOURCE,
        filename="Nav.jsx",
        strategy="page",
        convert_routing=False,
    )
    convert = ConvertRequest(
        files=[{"path": "a.js", "content": ""}],
        include_content=False,
        preserve_type_annotations=False,
    )

    assert transform.to_options().features.convert_routing is False
    assert convert.to_options().features.preserve_type_annotations is False
