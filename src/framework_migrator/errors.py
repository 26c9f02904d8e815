"""Exception hierarchy shared by the migration engine, CLI and transports."""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration failures.

    Attributes
    ----------
    exit_code : int
        Process exit code used by the CLI when this error escapes a command.
    """

    exit_code: int = 1


class ParseError(MigrationError):
    """Source text could not be structurally parsed.

    Parameters
    ----------
    filename : str
        Name of the module that failed to parse.
    message : str
        Human-readable description including the failure position.
    """

    exit_code = 2

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(f"{filename}: {message}")
        self.filename = filename
        self.message = message


class RuleApplicationWarning(UserWarning):
    """A rewrite rule fired but could not fully preserve semantics."""


class EditConflictError(MigrationError):
    """Two collected edits touch overlapping source ranges."""


class EmitError(MigrationError):
    """Rewritten source could not be serialized into valid output."""


class ProfileError(MigrationError):
    """A migration profile could not be registered, loaded or resolved."""

    exit_code = 3


class ManifestError(MigrationError):
    """A dependency manifest could not be read or updated."""


class BatchFatalError(MigrationError):
    """Failure outside per-file isolation that aborts the remaining batches."""

    exit_code = 4
