"""Generation request model.

The request is the only input the engine takes from a host.  All field-level
validation happens here, before any storage backend is touched; failures are
re-raised as ``modforge.errors.ValidationError``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modforge.errors import ValidationError
from modforge.metadata import LibraryKind
from modforge.naming import to_kebab
from modforge.platform import Platform, PlatformFlags

# Sub-module names that would shadow directories the planner already owns.
RESERVED_SUB_MODULES = frozenset({"lib"})

_SEPARATORS = re.compile(r"[\\/]")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def split_csv(value: Any) -> list[str]:
    """Split a comma-separated string (or pass through a list), dropping blanks.

    ``"a, b,,c "`` -> ``["a", "b", "c"]``.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip() for item in items if str(item).strip()]


class GenerationRequest(BaseModel):
    """Sparse request describing one library to generate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Base name of the library")
    library_kind: LibraryKind = Field(..., description="Architectural layer")
    parent_directory: Optional[str] = Field(default=None, description="Optional parent directory")
    description: Optional[str] = Field(default=None)
    tags: list[str] = Field(default_factory=list, description="Extra project tags")
    platform: Optional[Platform] = Field(default=None)
    include_client_server_split: Optional[bool] = Field(default=None)
    include_edge_surface: Optional[bool] = Field(default=None)
    include_cqrs: bool = Field(default=False)
    consolidates_providers: bool = Field(default=False)
    providers: list[str] = Field(default_factory=list)
    sub_modules: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        if not to_kebab(value):
            raise ValueError("name must contain at least one letter or digit")
        return value

    @field_validator("tags", "providers", mode="before")
    @classmethod
    def _parse_csv(cls, value: Any) -> list[str]:
        return split_csv(value)

    @field_validator("sub_modules", mode="before")
    @classmethod
    def _parse_sub_modules(cls, value: Any) -> list[str]:
        seen: list[str] = []
        for item in split_csv(value):
            kebab = to_kebab(item)
            if not kebab:
                continue
            if kebab in RESERVED_SUB_MODULES:
                raise ValueError(f"sub-module name {item!r} is reserved")
            if kebab not in seen:
                seen.append(kebab)
        return seen

    @field_validator("parent_directory")
    @classmethod
    def _relative_directory(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        stripped = value.strip()
        if stripped.startswith(("/", "\\")) or _DRIVE_PREFIX.match(stripped):
            raise ValueError("parent directory must be relative to the workspace root")
        if ".." in (segment.strip() for segment in _SEPARATORS.split(stripped)):
            raise ValueError("parent directory must not contain '..' segments")
        return value

    @model_validator(mode="after")
    def _providers_required_for_consolidation(self) -> "GenerationRequest":
        if self.consolidates_providers and not self.providers:
            raise ValueError("consolidates_providers requires at least one provider")
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, raw: dict[str, Any]) -> "GenerationRequest":
        """Validate a raw mapping (camelCase or snake_case keys).

        Raises:
            ValidationError: On any missing or invalid field.
        """
        data = {_CAMEL_KEYS.get(key, key): value for key, value in raw.items()}
        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError(_format_errors(exc)) from exc

    def platform_flags(self) -> PlatformFlags:
        return PlatformFlags(
            platform=self.platform,
            include_client_server_split=self.include_client_server_split,
            include_edge_surface=self.include_edge_surface,
        )


_CAMEL_KEYS: dict[str, str] = {
    "libraryKind": "library_kind",
    "parentDirectory": "parent_directory",
    "directory": "parent_directory",
    "includeClientServerSplit": "include_client_server_split",
    "includeClientServer": "include_client_server_split",
    "includeEdgeSurface": "include_edge_surface",
    "includeEdge": "include_edge_surface",
    "includeCQRS": "include_cqrs",
    "consolidatesProviders": "consolidates_providers",
    "subModules": "sub_modules",
}


def _format_errors(exc: pydantic.ValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ())) or "request"
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}")
    return "; ".join(parts)
