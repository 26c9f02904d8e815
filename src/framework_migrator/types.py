"""Shared type aliases for migration modules."""

from __future__ import annotations

from typing import Literal

type FrameworkKind = Literal["nextjs", "react"]
type Severity = Literal["change", "warning"]
type ErrorSeverity = Literal["critical", "error", "warning"]
type Dialect = Literal["javascript", "typescript", "tsx"]
type Strategy = Literal["page", "app_shell", "module"]