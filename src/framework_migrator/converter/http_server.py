"""HTTP transport for module transforms, analysis and batch conversion."""

from __future__ import annotations

import argparse
import importlib
import logging
import os
from types import ModuleType
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from framework_migrator.application.options import ConversionOptions
from framework_migrator.application.use_cases import (
    analyze_module,
    build_conversion_options,
    convert_files_async,
    transform_module,
)
from framework_migrator.errors import MigrationError

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from fastapi import FastAPI

_fastapi_module: ModuleType | None = None
try:
    _fastapi_module = importlib.import_module("fastapi")
except ModuleNotFoundError:  # pragma: no cover
    pass

try:
    import uvicorn as _uvicorn_imported

    _uvicorn_module: ModuleType | None = _uvicorn_imported
except ModuleNotFoundError:  # pragma: no cover
    _uvicorn_module = None

uvicorn: ModuleType | None = _uvicorn_module


def _require_http_runtime() -> None:
    """Ensure HTTP server runtime dependencies are available."""
    if _fastapi_module is None:
        raise RuntimeError(
            "fastapi is required to run migrator-http. Install with extra: .[server]"
        )


class HealthResponse(BaseModel):
    """Health response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


class ReadyResponse(BaseModel):
    """Readiness response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


class ConversionFlags(BaseModel):
    """Option fields shared by every request."""

    model_config = ConfigDict(extra="forbid")

    source_framework: str = "nextjs"
    target_framework: str = "react"
    preserve_comments: bool = True
    convert_routing: bool = True
    convert_data_fetching: bool = True
    convert_components: bool = True
    update_dependencies: bool = True
    preserve_type_annotations: bool = True

    def to_options(self) -> ConversionOptions:
        # Profile modules execute code; transports only use built-in profiles.
        flags = self.model_dump(include=set(ConversionFlags.model_fields))
        return build_conversion_options(**flags)


class TransformRequest(ConversionFlags):
    """Single-module rewrite request."""

    source_text: str
    filename: str = Field(default="module.tsx", min_length=1)
    strategy: Literal["page", "app_shell", "module"] = "module"


class AnalyzeRequest(BaseModel):
    """Single-module inspection request."""

    model_config = ConfigDict(extra="forbid")

    source_text: str
    filename: str = Field(default="module.tsx", min_length=1)


class FileEntry(BaseModel):
    """One in-memory input file."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(min_length=1)
    content: str


class ConvertRequest(ConversionFlags):
    """Batch conversion request over in-memory files."""

    files: list[FileEntry]
    include_content: bool = True


def create_app() -> FastAPI:
    """Create the migration HTTP application."""
    _require_http_runtime()
    fastapi_module = _fastapi_module
    app = fastapi_module.FastAPI(
        title="Framework Migrator",
        version="0.1.0",
        description="Rewrite Next.js modules for React with react-router.",
    )
    status = fastapi_module.status

    def _bad_request(exc: Exception) -> Exception:
        return fastapi_module.HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )

    def _internal_error() -> Exception:
        return fastapi_module.HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="internal server error",
        )

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/readyz", response_model=ReadyResponse)
    async def readyz() -> ReadyResponse:
        return ReadyResponse(status="ready")

    @app.post("/v1/transform")
    async def transform(request: TransformRequest) -> dict[str, Any]:
        """Rewrite one module and return code, changes and warnings."""
        try:
            result = transform_module(
                source_text=request.source_text,
                filename=request.filename,
                options=request.to_options(),
                strategy=request.strategy,
            )
        except MigrationError as exc:
            raise _bad_request(exc) from exc
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected error during HTTP transform")
            raise _internal_error() from exc
        return result.to_dict()

    @app.post("/v1/analyze")
    async def analyze(request: AnalyzeRequest) -> dict[str, Any]:
        """Return the fact sheet of one module."""
        try:
            facts = analyze_module(source_text=request.source_text, filename=request.filename)
        except MigrationError as exc:
            raise _bad_request(exc) from exc
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected error during HTTP analysis")
            raise _internal_error() from exc
        return facts.to_dict()

    @app.post("/v1/convert")
    async def convert(request: ConvertRequest) -> dict[str, Any]:
        """Convert a batch of in-memory files."""
        try:
            result = await convert_files_async(
                files=[entry.model_dump() for entry in request.files],
                options=request.to_options(),
            )
        except MigrationError as exc:
            raise _bad_request(exc) from exc
        except Exception as exc:  # pragma: no cover
            logger.exception("unexpected error during HTTP batch conversion")
            raise _internal_error() from exc
        return result.to_dict(include_content=request.include_content)

    return app


if TYPE_CHECKING:
    app: FastAPI | None

if _fastapi_module is not None:
    app = create_app()
else:  # pragma: no cover
    app = None


def main() -> None:
    """Run the migration HTTP entrypoint."""
    _require_http_runtime()
    if uvicorn is None:
        raise RuntimeError("uvicorn is required to run migrator-http")
    parser = argparse.ArgumentParser(description="Framework migrator HTTP server.")
    parser.add_argument(
        "--host",
        default=os.getenv("MIGRATOR_HTTP_HOST", "0.0.0.0"),
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("MIGRATOR_HTTP_PORT", "8090")),
    )
    args = parser.parse_args()
    uvicorn.run(
        "framework_migrator.converter.http_server:app",
        host=args.host,
        port=args.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
