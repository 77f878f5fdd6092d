"""Library metadata resolution.

Single source of truth for every derived path and identifier of a library:
project name, project/source/dist roots, package identifier, tags, and the
relative offset from the project root back to the workspace root.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from modforge.errors import PlanningError
from modforge.naming import NamingVariants, to_title

DEFAULT_PACKAGE_SCOPE = "@custom-repo"
DEFAULT_LIBRARIES_ROOT = "libs"

STEP_UP = "../"
CURRENT_DIR = "./"


class LibraryKind(str, Enum):
    """Architectural layer a library belongs to."""

    CONTRACT = "contract"
    DATA_ACCESS = "data-access"
    FEATURE = "feature"
    INFRA = "infra"
    PROVIDER = "provider"


class LibraryMetadata(BaseModel):
    """Resolved paths and identifiers for one library."""

    model_config = ConfigDict(frozen=True)

    library_kind: LibraryKind
    project_name: str
    project_root: str
    source_root: str
    dist_root: str
    package_identifier: str
    root_offset: str
    tags: tuple[str, ...] = Field(default_factory=tuple)
    domain_name: str
    description: str


def normalize_directory(directory: str) -> str:
    """Collapse a user-supplied directory into clean ``/``-joined segments.

    ``"./shared//contracts/"`` -> ``"shared/contracts"``.

    Raises:
        PlanningError: If any segment is ``".."``.
    """
    segments = [s for s in directory.replace("\\", "/").split("/") if s and s != "."]
    if ".." in segments:
        raise PlanningError(f"Directory {directory!r} escapes the workspace root", path=directory)
    return "/".join(segments)


def compute_root_offset(project_root: str) -> str:
    """Return the relative path from *project_root* back to the workspace root.

    One ``"../"`` per path segment, except that a single-segment root yields
    ``"./"``::

        compute_root_offset("libs/infra/cache")       -> "../../../"
        compute_root_offset("shared/contract-order")  -> "../../"
        compute_root_offset("cache")                  -> "./"
    """
    depth = len([s for s in project_root.split("/") if s])
    if depth <= 1:
        return CURRENT_DIR
    return STEP_UP * depth


def build_tags(kind: LibraryKind, kebab: str, extra: list[str] | tuple[str, ...] = ()) -> tuple[str, ...]:
    """Standard ``type:``/``scope:`` tags followed by caller-supplied ones."""
    tags = [f"type:{kind.value}", f"scope:{kebab}"]
    for tag in extra:
        if tag not in tags:
            tags.append(tag)
    return tuple(tags)


def resolve_metadata(
    variants: NamingVariants,
    library_kind: LibraryKind | str,
    parent_directory: str | None = None,
    *,
    description: str | None = None,
    tags: list[str] | tuple[str, ...] = (),
    package_scope: str = DEFAULT_PACKAGE_SCOPE,
    libraries_root: str = DEFAULT_LIBRARIES_ROOT,
) -> LibraryMetadata:
    """Compute all metadata for a library.

    Args:
        variants: Naming variants of the requested library.
        library_kind: One of the recognized ``LibraryKind`` values.
        parent_directory: Optional directory the library is placed under.
            When given, the project root is ``{parent}/{kind}-{kebab}``;
            otherwise it is ``{libraries_root}/{kind}/{kebab}``.
        description: Optional description; defaults to the Title Case name.
        tags: Extra tags appended after the standard ones.
        package_scope: Scope prefix of the package identifier.
        libraries_root: First segment of the default layout.

    Raises:
        PlanningError: If *library_kind* is not a recognized kind.
    """
    try:
        kind = LibraryKind(library_kind)
    except ValueError as exc:
        raise PlanningError(f"Unrecognized library kind: {library_kind!r}") from exc

    kebab = variants.kebab
    project_name = f"{kind.value}-{kebab}"

    parent = normalize_directory(parent_directory) if parent_directory else ""
    if parent:
        project_root = f"{parent}/{project_name}"
    else:
        root = normalize_directory(libraries_root) or DEFAULT_LIBRARIES_ROOT
        project_root = f"{root}/{kind.value}/{kebab}"

    domain_name = to_title(kebab)

    return LibraryMetadata(
        library_kind=kind,
        project_name=project_name,
        project_root=project_root,
        source_root=f"{project_root}/src",
        dist_root=f"dist/{project_root}",
        package_identifier=f"{package_scope}/{project_name}",
        root_offset=compute_root_offset(project_root),
        tags=build_tags(kind, kebab, tags),
        domain_name=domain_name,
        description=(description or "").strip() or domain_name,
    )
