"""Shared helpers for rewrite rule tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from framework_migrator.application.use_cases import build_conversion_options, transform_module
from framework_migrator.rewrite import TransformResult

type Transform = Callable[..., TransformResult]


@pytest.fixture
def transform() -> Transform:
    """Rewrite one module through the full parse, analyze and rewrite chain."""

    def _transform(
        source_text: str,
        filename: str,
        *,
        strategy: str = "module",
        pages=(),
        **options: object,
    ) -> TransformResult:
        return transform_module(
            source_text=source_text,
            filename=filename,
            options=build_conversion_options(**options),
            strategy=strategy,
            pages=pages,
        )

    return _transform
