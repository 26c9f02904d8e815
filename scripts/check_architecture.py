#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/framework_migrator"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    transports = ["import typer", "from typer", "import fastapi", "import uvicorn"]

    # The engine layers never depend on transports or on the orchestrator.
    for layer in ("syntax", "analysis", "rewrite"):
        for path in (PACKAGE / layer).glob("*.py"):
            _assert_no_imports(
                path,
                [*transports, "framework_migrator.converter", "framework_migrator.profiles"],
            )

    for path in (PACKAGE / "application").glob("*.py"):
        _assert_no_imports(path, transports)

    _assert_no_imports(
        PACKAGE / "converter/core.py",
        [*transports, "framework_migrator.cli"],
    )

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
