"""Pydantic schemas for runtime validation of migration inputs."""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from framework_migrator.types import FrameworkKind


class ConversionOptionsConfig(BaseModel):
    """Validated input for building ``ConversionOptions``."""

    model_config = ConfigDict(extra="forbid")

    source_framework: FrameworkKind = "nextjs"
    target_framework: FrameworkKind = "react"
    preserve_comments: bool = True
    convert_routing: bool = True
    convert_data_fetching: bool = True
    convert_components: bool = True
    update_dependencies: bool = True
    preserve_type_annotations: bool = True
    profile_name: str | None = None
    profile_modules: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _validate_pair(self) -> ConversionOptionsConfig:
        if self.source_framework == self.target_framework:
            raise ValueError("source_framework and target_framework must differ.")
        return self

    @field_validator("profile_name")
    @classmethod
    def _validate_profile_name(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("profile_name cannot be blank.")
        return value

    @field_validator("profile_modules")
    @classmethod
    def _validate_profile_modules(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not item.strip() for item in value):
            raise ValueError("profile_modules cannot contain empty entries.")
        return value


class SourceFileConfig(BaseModel):
    """Validated input file: project-relative POSIX path plus optional content.

    ``content`` of ``None`` means the file is read lazily by the batch
    reader.
    """

    model_config = ConfigDict(extra="forbid")

    path: str = Field(min_length=1)
    content: str | bytes | None = None

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        posix = PurePosixPath(value.replace("\\", "/"))
        if posix.is_absolute():
            raise ValueError("path must be relative to the project root.")
        if ".." in posix.parts:
            raise ValueError("path cannot escape the project root.")
        if not posix.parts:
            raise ValueError("path cannot be empty.")
        return posix.as_posix()


class ProfileResolutionConfig(BaseModel):
    """Validated input for profile registry resolution."""

    model_config = ConfigDict(extra="forbid")

    source_framework: str = Field(min_length=1)
    target_framework: str = Field(min_length=1)
    profile_name: str | None = None
