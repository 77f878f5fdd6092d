"""Engine configuration.

Typed settings shared by every host surface.  Values come from constructor
arguments, a JSON or YAML file, or ``MODFORGE_*`` environment variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from modforge.metadata import DEFAULT_PACKAGE_SCOPE

_TRUTHY = {"1", "true", "yes", "on"}


class EngineConfig(BaseModel):
    """Workspace-level settings for library generation."""

    package_scope: str = Field(
        default=DEFAULT_PACKAGE_SCOPE, description="npm scope prefixed to every package name"
    )
    libraries_root: str = Field(
        default="libs", description="Directory holding libraries when no parent directory is given"
    )
    workspace_root: Path = Field(default=Path("."), description="Root used by the filesystem backend")
    dedupe_appends: bool = Field(
        default=False, description="Skip barrel appends whose fragment is already present"
    )

    @field_validator("package_scope")
    @classmethod
    def _scope_has_at(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("@") or len(value) < 2:
            raise ValueError(f"package scope must look like '@scope', got {value!r}")
        return value

    @field_validator("libraries_root")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            raise ValueError("libraries_root must not be empty")
        return value

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Write the configuration as JSON to *path* and return it."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "EngineConfig":
        """Load a configuration file.

        ``.yaml`` and ``.yml`` files are parsed with PyYAML; anything else is
        treated as JSON.
        """
        path = Path(path)
        raw = path.read_text(encoding="utf-8")
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(raw) or {}
        else:
            data = json.loads(raw) if raw.strip() else {}
        return cls.model_validate(data)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build an ``EngineConfig`` from environment variables.

        Recognised variables (all optional):
            MODFORGE_PACKAGE_SCOPE, MODFORGE_LIBRARIES_ROOT,
            MODFORGE_WORKSPACE_ROOT, MODFORGE_DEDUPE_APPENDS.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MODFORGE_PACKAGE_SCOPE"):
            kwargs["package_scope"] = os.environ["MODFORGE_PACKAGE_SCOPE"]
        if os.environ.get("MODFORGE_LIBRARIES_ROOT"):
            kwargs["libraries_root"] = os.environ["MODFORGE_LIBRARIES_ROOT"]
        if os.environ.get("MODFORGE_WORKSPACE_ROOT"):
            kwargs["workspace_root"] = Path(os.environ["MODFORGE_WORKSPACE_ROOT"])
        if os.environ.get("MODFORGE_DEDUPE_APPENDS"):
            kwargs["dedupe_appends"] = (
                os.environ["MODFORGE_DEDUPE_APPENDS"].strip().lower() in _TRUTHY
            )
        return cls(**kwargs)
