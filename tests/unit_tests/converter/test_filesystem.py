"""Unit tests for project discovery, reads and output writes."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from framework_migrator.application.options import SourceFile
from framework_migrator.application.results import ConvertedFile
from framework_migrator.errors import MigrationError
from framework_migrator.infrastructure.filesystem import (
    SourceReader,
    collect_source_files,
    write_outputs,
)


def _output(destination: str, content: str = "x") -> ConvertedFile:
    return ConvertedFile(
        source_path="a.js",
        destination_path=destination,
        content=content,
        sha256="0" * 64,
        kind="module",
    )


def test_collect_skips_dependency_and_build_dirs(tmp_path: Path) -> None:
    """Collect sorted relative paths outside node_modules and build output."""
    for relative in ("pages/index.jsx", "node_modules/next/index.js", ".next/cache.js", "a.js"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")

    files = collect_source_files(tmp_path)

    assert [file.path for file in files] == ["a.js", "pages/index.jsx"]
    assert all(file.content is None for file in files)


def test_collect_missing_directory(tmp_path: Path) -> None:
    """A missing project root raises MigrationError."""
    with pytest.raises(MigrationError, match="Source directory not found"):
        collect_source_files(tmp_path / "missing")


def test_reader_prefers_supplied_content(tmp_path: Path) -> None:
    """In-memory content wins over the file system and bytes are decoded."""
    (tmp_path / "a.js").write_text("disk", encoding="utf-8")
    reader = SourceReader(tmp_path)

    assert asyncio.run(reader.read(SourceFile("a.js", "memory"))) == "memory"
    assert asyncio.run(reader.read(SourceFile("a.js", b"bytes"))) == "bytes"
    assert asyncio.run(reader.read(SourceFile("a.js"))) == "disk"


def test_reader_without_root_requires_content() -> None:
    """Lazy files cannot be read without a root."""
    with pytest.raises(MigrationError, match="No content supplied"):
        asyncio.run(SourceReader().read(SourceFile("a.js")))


def test_write_outputs(tmp_path: Path) -> None:
    """Write each output below the output directory."""
    written = write_outputs(tmp_path, [_output("src/pages/Home.jsx", "home")])

    assert written == [(tmp_path / "src/pages/Home.jsx").resolve()]
    assert (tmp_path / "src/pages/Home.jsx").read_text(encoding="utf-8") == "home"


def test_write_outputs_rejects_traversal(tmp_path: Path) -> None:
    """Destinations escaping the output directory are refused."""
    with pytest.raises(MigrationError, match="escapes the output directory"):
        write_outputs(tmp_path / "out", [_output("../evil.js")])
    assert not (tmp_path / "evil.js").exists()
