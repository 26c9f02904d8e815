"""Round-trip validation of emitted source."""

from __future__ import annotations

from framework_migrator.errors import EmitError, ParseError
from framework_migrator.syntax.nodes import SyntaxOptions
from framework_migrator.syntax.parser import parse_module


def validate_emitted_source(code: str, filename: str, syntax: SyntaxOptions) -> None:
    """Re-parse emitted code under the target syntax.

    Parameters
    ----------
    code : str
        Emitted module text.
    filename : str
        Module name used in the error message.
    syntax : SyntaxOptions
        Syntax the emitted module must satisfy.

    Raises
    ------
    EmitError
        If the emitted code does not parse.
    """
    try:
        parse_module(code, filename, syntax)
    except ParseError as exc:
        raise EmitError(f"emitted source is not valid {syntax.dialect}: {exc.message}") from exc
