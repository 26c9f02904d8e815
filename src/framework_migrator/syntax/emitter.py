"""Two-phase emission: byte-range edits collected by rules, applied at once."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from framework_migrator.errors import EditConflictError, EmitError
from framework_migrator.syntax.nodes import SourceSpan


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace bytes ``[start, end)`` of the original source with ``text``.

    ``start == end`` denotes a pure insertion.
    """

    start: int
    end: int
    text: str = ""

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


def replace(span: SourceSpan, text: str) -> TextEdit:
    return TextEdit(span.start_byte, span.end_byte, text)


def delete(span: SourceSpan) -> TextEdit:
    return TextEdit(span.start_byte, span.end_byte, "")


def insert(position: int, text: str) -> TextEdit:
    return TextEdit(position, position, text)


def statement_removal(data: bytes, span: SourceSpan) -> SourceSpan:
    """Widen a statement span so deleting it also removes its own line.

    Leading indentation is included when only whitespace precedes the
    statement on its line; trailing spaces and one newline are included.
    """
    start, end = span.start_byte, span.end_byte
    line_start = data.rfind(b"\n", 0, start) + 1
    if not data[line_start:start].strip():
        start = line_start
    while end < len(data) and data[end : end + 1] in (b" ", b"\t"):
        end += 1
    if data[end : end + 2] == b"\r\n":
        end += 2
    elif data[end : end + 1] == b"\n":
        end += 1
    return SourceSpan(start, end, span.line, span.column)


def _ordered(edits: Iterable[TextEdit]) -> list[TextEdit]:
    indexed = list(enumerate(edits))
    indexed.sort(key=lambda item: (item[1].start, item[1].end, item[0]))
    return [edit for _, edit in indexed]


def find_conflicts(edits: Iterable[TextEdit]) -> list[tuple[TextEdit, TextEdit]]:
    """Return every pair of edits whose replaced ranges overlap.

    Insertions at the boundary of a replaced range do not conflict, and
    several insertions at one offset are applied in collection order.
    """
    ordered = _ordered(edits)
    conflicts = []
    for index, first in enumerate(ordered):
        for second in ordered[index + 1 :]:
            if second.start >= first.end:
                break
            if first.is_insertion and second.start == first.start:
                continue
            conflicts.append((first, second))
    return conflicts


def apply_edits(source_text: str, edits: Iterable[TextEdit]) -> str:
    """Apply non-overlapping edits to ``source_text``.

    Parameters
    ----------
    source_text : str
        Original module text; edit offsets are UTF-8 byte offsets into it.
    edits : Iterable[TextEdit]
        Edits in collection order.

    Returns
    -------
    str
        Rewritten text.

    Raises
    ------
    EditConflictError
        If two edits replace overlapping byte ranges.
    EmitError
        If an edit lies outside the source or splits a UTF-8 sequence.
    """
    data = source_text.encode("utf-8")
    ordered = _ordered(edits)
    conflicts = find_conflicts(ordered)
    if conflicts:
        first, second = conflicts[0]
        raise EditConflictError(
            f"edits [{first.start}, {first.end}) and [{second.start}, {second.end}) overlap"
        )

    pieces: list[bytes] = []
    cursor = 0
    for edit in ordered:
        if edit.start < 0 or edit.end > len(data) or edit.start > edit.end:
            raise EmitError(f"edit [{edit.start}, {edit.end}) is outside the source")
        pieces.append(data[cursor : edit.start])
        pieces.append(edit.text.encode("utf-8"))
        cursor = max(cursor, edit.end)
    pieces.append(data[cursor:])
    try:
        return b"".join(pieces).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise EmitError(f"edit split a multi-byte character: {exc}") from exc
