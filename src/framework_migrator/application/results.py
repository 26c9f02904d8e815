"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass

from framework_migrator.rewrite.base import TransformResult
from framework_migrator.types import ErrorSeverity


@dataclass(frozen=True)
class BatchError:
    """One recorded failure or notice from a batch run."""

    code: str
    severity: ErrorSeverity
    message: str
    file: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "file": self.file,
        }


@dataclass(frozen=True)
class ConvertedFile:
    """Output produced for one non-asset input file."""

    source_path: str
    destination_path: str
    content: str
    sha256: str
    kind: str
    modified: bool = False
    changes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def to_dict(self, include_content: bool = True) -> dict[str, object]:
        payload: dict[str, object] = {
            "source_path": self.source_path,
            "destination_path": self.destination_path,
            "sha256": self.sha256,
            "kind": self.kind,
            "modified": self.modified,
            "changes": list(self.changes),
            "warnings": list(self.warnings),
        }
        if include_content:
            payload["content"] = self.content
        return payload


@dataclass(frozen=True)
class BatchResult:
    """Aggregated outcome of one batch run.

    Attributes
    ----------
    transformed_files : tuple[str, ...]
        Destination paths of files whose content was modified.
    modified_count : int
        Always ``len(transformed_files)``.
    total_files : int
        Every input file, assets included.
    details : tuple[str, ...]
        One human-readable line per processed file.
    errors : tuple[BatchError, ...]
        Collected per-file failures and notices.
    outputs : tuple[ConvertedFile, ...]
        Emitted files in input order, modulo batch granularity.
    """

    transformed_files: tuple[str, ...] = ()
    modified_count: int = 0
    total_files: int = 0
    details: tuple[str, ...] = ()
    errors: tuple[BatchError, ...] = ()
    outputs: tuple[ConvertedFile, ...] = ()

    @property
    def transformation_rate(self) -> float:
        if self.total_files == 0:
            return 0.0
        return self.modified_count / self.total_files

    def to_dict(self, include_content: bool = True) -> dict[str, object]:
        return {
            "transformed_files": list(self.transformed_files),
            "modified_count": self.modified_count,
            "total_files": self.total_files,
            "transformation_rate": self.transformation_rate,
            "details": list(self.details),
            "errors": [error.to_dict() for error in self.errors],
            "outputs": [output.to_dict(include_content) for output in self.outputs],
        }


__all__ = ["BatchError", "BatchResult", "ConvertedFile", "TransformResult"]
