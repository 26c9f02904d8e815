"""File-system adapters: project discovery, async reads and output writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from framework_migrator.application.options import SourceFile
from framework_migrator.application.results import ConvertedFile
from framework_migrator.errors import MigrationError

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset(
    {".git", ".next", ".turbo", ".vercel", "node_modules", "dist", "build", "out", "coverage"}
)


def collect_source_files(root: Path) -> list[SourceFile]:
    """List every file under ``root`` as a lazily-read ``SourceFile``.

    Dependency, VCS and build-output directories are skipped. Paths are
    POSIX and relative to ``root``, in sorted order.
    """
    if not root.is_dir():
        raise MigrationError(f"Source directory not found: {root}")
    files = []
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root)
        if any(part in SKIP_DIRS for part in relative.parts[:-1]) or not path.is_file():
            continue
        files.append(SourceFile(path=relative.as_posix()))
    logger.debug("Collected %d file(s) under %s", len(files), root)
    return files


class SourceReader:
    """Read file content from memory, or from ``root`` when not supplied."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root

    async def read(self, file: SourceFile) -> str:
        content = file.content
        if content is None:
            if self.root is None:
                raise MigrationError(f"No content supplied for {file.path}")
            content = await asyncio.to_thread((self.root / file.path).read_bytes)
        if isinstance(content, bytes):
            return content.decode("utf-8")
        return content


def write_outputs(output_dir: Path, outputs: Iterable[ConvertedFile]) -> list[Path]:
    """Write converted files below ``output_dir``.

    Raises
    ------
    MigrationError
        If a destination resolves outside ``output_dir``.
    """
    base = output_dir.resolve()
    written = []
    for output in outputs:
        target = (base / output.destination_path).resolve()
        if not target.is_relative_to(base):
            raise MigrationError(
                f"Destination escapes the output directory: {output.destination_path}"
            )
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(output.content, encoding="utf-8")
        written.append(target)
    return written
