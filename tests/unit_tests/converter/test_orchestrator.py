"""Unit tests for the batch orchestrator."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from framework_migrator.adapters.engine import CatalogRewriter
from framework_migrator.application.options import ConversionOptions, FeatureToggles, SourceFile
from framework_migrator.application.use_cases import convert_files
from framework_migrator.converter.core import (
    DESTINATION_COLLISION,
    FILE_SKIPPED,
    FILE_TRANSFORM_FAILED,
    PARSE_FAILED,
    READ_FAILED,
    BatchOrchestrator,
    suffixed_destination,
)
from framework_migrator.errors import BatchFatalError
from framework_migrator.infrastructure.filesystem import SourceReader
from framework_migrator.profiles import NextToReactProfile

HOME_PAGE = """\
import { useRouter } from 'next/router';

export default function Home() {
  const router = useRouter();
  return <button onClick={() => router.push('/about')}>About</button>;
}
"""
ABOUT_PAGE = "export default function About() {\n  return <p>About</p>;\n}\n"
NAV_MODULE = """\
import Link from 'next/link';

export function Nav() {
  return <Link href="/about">About</Link>;
}
"""
MANIFEST = json.dumps({"name": "site", "dependencies": {"next": "14.0.0"}}, indent=2)


class DummyRewriter:
    """Rewriter that fails for modules whose name contains ``broken``."""

    def __init__(self) -> None:
        self.inner = CatalogRewriter()

    def rewrite(self, tree, facts, options, rules, **kwargs):
        if "broken" in tree.filename:
            raise RuntimeError("rule exploded")
        return self.inner.rewrite(tree, facts, options, rules, **kwargs)


class DummyReader:
    """In-memory reader tracking how many reads overlap."""

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self.paths: list[str] = []

    async def read(self, file: SourceFile) -> str:
        self.active += 1
        self.peak = max(self.peak, self.active)
        self.paths.append(file.path)
        await asyncio.sleep(0)
        self.active -= 1
        return file.content


class DummyPostProcessor:
    """Post-processor failing outside the per-file boundary."""

    def run(self, manifest_text, profile, required_modules, options):
        raise RuntimeError("disk full")


def _run(files, options: ConversionOptions | None = None, **ports):
    orchestrator = BatchOrchestrator(NextToReactProfile(), options or ConversionOptions(), **ports)
    return asyncio.run(orchestrator.run(files))


def _sources(mapping: dict[str, str | None]) -> list[SourceFile]:
    return [SourceFile(path=path, content=content) for path, content in mapping.items()]


def test_seven_file_project_accounting() -> None:
    """Assets are counted but never emitted, and modified files are listed."""
    result = convert_files(
        files=[
            {"path": "pages/index.jsx", "content": HOME_PAGE},
            {"path": "pages/about.jsx", "content": ABOUT_PAGE},
            {"path": "components/Nav.jsx", "content": NAV_MODULE},
            {"path": "public/logo.png"},
            {"path": "public/hero.png"},
            {"path": "package.json", "content": MANIFEST},
            {"path": "styles/globals.css", "content": "body { margin: 0; }\n"},
        ],
        options=ConversionOptions(),
    )

    assert result.total_files == 7
    assert result.errors == ()
    assert len(result.outputs) == 5
    assert result.transformed_files == (
        "src/pages/Home.jsx",
        "src/components/Nav.jsx",
        "package.json",
    )
    assert result.modified_count == 3
    assert result.transformation_rate == pytest.approx(3 / 7)
    assert "public/logo.png: skipped binary asset" in result.details
    assert "public/hero.png: skipped binary asset" in result.details

    by_destination = {output.destination_path: output for output in result.outputs}
    assert by_destination["src/pages/About.jsx"].content == ABOUT_PAGE
    assert by_destination["src/styles/globals.css"].kind == "static"
    manifest = json.loads(by_destination["package.json"].content)
    assert "next" not in manifest["dependencies"]
    assert manifest["dependencies"]["react-router-dom"] == "^6.22.0"


def test_failing_file_is_isolated() -> None:
    """One failing transform does not affect the rest of the batch."""
    files = _sources(
        {
            "components/broken.jsx": NAV_MODULE,
            "components/Nav.jsx": NAV_MODULE,
        }
    )

    result = _run(files, rewriter=DummyRewriter())

    assert [error.code for error in result.errors] == [FILE_TRANSFORM_FAILED]
    assert result.errors[0].file == "components/broken.jsx"
    broken, nav = result.outputs
    assert broken.content == NAV_MODULE
    assert not broken.modified
    assert nav.modified
    assert result.transformed_files == ("src/components/Nav.jsx",)


def test_parse_failure_is_recorded_and_passed_through() -> None:
    """Unparseable modules are emitted unchanged with PARSE_FAILED."""
    source = "export default function (\n"

    result = _run(_sources({"pages/bad.jsx": source}))

    assert result.errors[0].code == PARSE_FAILED
    assert result.outputs[0].content == source
    assert result.outputs[0].destination_path == "src/pages/Bad.jsx"
    assert result.modified_count == 0


def test_read_failure_is_per_file(tmp_path: Path) -> None:
    """A missing file on disk yields READ_FAILED without output."""
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "ok.js").write_text("export const ok = 1;\n", encoding="utf-8")
    files = [SourceFile(path="lib/ok.js"), SourceFile(path="lib/gone.js")]

    result = _run(files, reader=SourceReader(tmp_path))

    assert [error.code for error in result.errors] == [READ_FAILED]
    assert [output.source_path for output in result.outputs] == ["lib/ok.js"]


def test_document_and_api_routes_are_skipped() -> None:
    """Server-only files are skipped with a warning and no output."""
    result = _run(
        _sources(
            {
                "pages/_document.jsx": "export default function Document() { return null; }\n",
                "pages/api/hello.js": "export default function handler(req, res) {}\n",
            }
        )
    )

    assert [error.code for error in result.errors] == [FILE_SKIPPED, FILE_SKIPPED]
    assert all(error.severity == "warning" for error in result.errors)
    assert result.outputs == ()
    assert result.total_files == 2


def test_destination_collisions_get_suffixes() -> None:
    """The later file of a colliding pair is written under a suffixed name."""
    result = _run(
        _sources(
            {
                "pages/index.jsx": ABOUT_PAGE,
                "src/pages/index.jsx": ABOUT_PAGE,
            }
        )
    )

    assert [output.destination_path for output in result.outputs] == [
        "src/pages/Home.jsx",
        "src/pages/Home2.jsx",
    ]
    assert [error.code for error in result.errors] == [DESTINATION_COLLISION]
    assert result.errors[0].file == "src/pages/index.jsx"


def test_app_shell_receives_page_routes() -> None:
    """The app shell route table lists every page of the batch."""
    app = (
        "export default function MyApp({ Component, pageProps }) {\n"
        "  return <Component {...pageProps} />;\n"
        "}\n"
    )
    result = _run(
        _sources(
            {
                "pages/_app.jsx": app,
                "pages/index.jsx": ABOUT_PAGE,
                "pages/blog/[slug].jsx": ABOUT_PAGE,
            }
        )
    )

    shell = result.outputs[0]
    assert shell.destination_path == "src/App.jsx"
    assert '<Route path="/blog/:slug" element={<BlogSlug />} />' in shell.content
    assert "import Home from './pages/Home';" in shell.content


def test_reads_overlap_within_a_batch_only() -> None:
    """At most five reads are in flight at once."""
    reader = DummyReader()
    files = _sources({f"lib/m{index}.js": "export const v = 1;\n" for index in range(12)})

    result = _run(files, reader=reader)

    assert reader.peak == 5
    assert reader.paths == [file.path for file in files]
    assert result.total_files == 12


def test_strip_types_changes_destination_suffix() -> None:
    """Stripped modules are written with JavaScript suffixes."""
    options = ConversionOptions(features=FeatureToggles(preserve_type_annotations=False))

    source = "export const sum = (a: number, b: number) => a + b;\n"

    result = _run(_sources({"lib/sum.ts": source}), options)

    output = result.outputs[0]
    assert output.destination_path == "src/lib/sum.js"
    assert output.content == "export const sum = (a, b) => a + b;\n"


def test_invalid_manifest_is_reported() -> None:
    """A broken manifest is emitted unchanged with an error."""
    result = _run(_sources({"package.json": "{broken"}))

    assert [error.code for error in result.errors] == [FILE_TRANSFORM_FAILED]
    assert result.outputs[0].content == "{broken"


def test_failure_outside_file_boundary_is_fatal() -> None:
    """Failures escaping per-file isolation abort the run."""
    with pytest.raises(BatchFatalError, match="disk full"):
        _run(_sources({"package.json": MANIFEST}), postprocessor=DummyPostProcessor())


def test_suffixed_destination() -> None:
    """Insert the counter before the suffix."""
    assert suffixed_destination("src/pages/Home.tsx", 2) == "src/pages/Home2.tsx"
    assert suffixed_destination("src/LICENSE", 3) == "src/LICENSE3"


def test_batch_size_must_be_positive() -> None:
    """Reject non-positive batch sizes."""
    with pytest.raises(ValueError):
        BatchOrchestrator(NextToReactProfile(), ConversionOptions(), batch_size=0)
