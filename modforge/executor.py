"""Template dispatch execution.

Walks a ``DispatchPlan`` strictly in plan order: each parent directory is
created once before the first write beneath it, each entry's template is
rendered against the shared context, and the result is handed to the
storage backend.  Append entries read the current content of their target
and write it back with the rendered fragment added.

A storage failure aborts the remaining plan.  Files written by earlier
entries are left in place; the ``StorageError`` carries the list of them.
"""

from __future__ import annotations

import posixpath
from typing import Any

import jinja2
from pydantic import BaseModel, Field

from modforge.concerns import ConcernClassification, provider_package
from modforge.errors import PlanningError, StorageError
from modforge.logging import get_logger
from modforge.metadata import LibraryMetadata
from modforge.naming import NamingVariants, derive_naming_variants
from modforge.plan import DispatchPlan, EntryMode
from modforge.platform import PlatformConfiguration
from modforge.request import GenerationRequest
from modforge.storage import StorageAdapter
from modforge.templates import TemplateRenderer

logger = get_logger("executor")


class GenerationResult(BaseModel):
    """Terminal artifact of one generation."""

    project_name: str
    project_root: str
    package_identifier: str
    source_root: str
    files_written: list[str] = Field(default_factory=list)


def build_context(
    variants: NamingVariants,
    metadata: LibraryMetadata,
    classification: ConcernClassification,
    platform: PlatformConfiguration,
    request: GenerationRequest,
    package_scope: str,
) -> dict[str, Any]:
    """Build the template context shared by every plan entry."""
    return {
        "name": variants.base,
        "class_name": variants.pascal,
        "property_name": variants.camel,
        "file_name": variants.kebab,
        "constant_name": variants.upper_snake,
        "library_kind": metadata.library_kind.value,
        "project_name": metadata.project_name,
        "project_root": metadata.project_root,
        "source_root": metadata.source_root,
        "package_name": metadata.package_identifier,
        "offset_from_root": metadata.root_offset,
        "description": metadata.description,
        "domain_name": metadata.domain_name,
        "tags": list(metadata.tags),
        "scope": package_scope,
        "concern": classification.concern.value,
        "is_primitive": classification.is_primitive,
        "provider_package": provider_package(classification.concern, package_scope),
        "platform": platform.platform.value,
        "include_client_server_split": platform.include_client_server_split,
        "include_edge_surface": platform.include_edge_surface,
        "include_cqrs": request.include_cqrs,
        "providers": [derive_naming_variants(p).model_dump() for p in request.providers],
        "sub_modules": list(request.sub_modules),
    }


async def execute_plan(
    plan: DispatchPlan,
    storage: StorageAdapter,
    metadata: LibraryMetadata,
    context: dict[str, Any],
    renderer: TemplateRenderer | None = None,
    *,
    dedupe_appends: bool = False,
) -> GenerationResult:
    """Execute *plan* against *storage*.

    Args:
        plan: The ordered plan to execute.
        storage: Backend receiving every directory and file operation.
        metadata: Metadata of the library being generated.
        context: Template context shared by all entries.
        renderer: Template renderer; a default one is created if omitted.
        dedupe_appends: Skip an append whose fragment is already present in
            the target file.

    Returns:
        The ``GenerationResult`` listing every path written, in plan order.

    Raises:
        StorageError: On the first failing storage operation, with
            ``files_written`` holding the paths written before it.
    """
    renderer = renderer or TemplateRenderer()
    written: list[str] = []
    seen: set[str] = set()
    created_dirs: set[str] = set()

    try:
        for entry in plan.entries:
            path = entry.output_path
            try:
                content = renderer.render(entry.template, {**context, **entry.context})
            except jinja2.TemplateError as exc:
                raise PlanningError(f"Failed to render {entry.template}: {exc}", path=path) from exc

            parent = posixpath.dirname(path)
            if parent and parent not in created_dirs:
                await storage.make_directory(parent)
                created_dirs.add(parent)
                logger.debug("mkdir %s", parent)

            if entry.mode is EntryMode.APPEND:
                existing = await storage.read_file(path)
                if dedupe_appends and content.strip() and content.strip() in existing:
                    logger.debug("skip append to %s (already present)", path)
                    continue
                await storage.write_file(path, existing + content)
                logger.debug("append %s (%s)", path, entry.template)
            else:
                await storage.write_file(path, content)
                logger.debug("write %s (%s)", path, entry.template)

            if path not in seen:
                seen.add(path)
                written.append(path)
    except StorageError as exc:
        exc.files_written = list(written)
        raise

    return GenerationResult(
        project_name=metadata.project_name,
        project_root=metadata.project_root,
        package_identifier=metadata.package_identifier,
        source_root=metadata.source_root,
        files_written=written,
    )
