"""Scaffolding engine.

Single entry point shared by every host surface.  ``prepare`` resolves a
request into naming variants, a concern classification, library metadata,
a platform configuration and a dispatch plan without touching storage;
``generate`` then executes the plan against a storage backend.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict

from modforge.concerns import ConcernClassification, classify_concern
from modforge.config import EngineConfig
from modforge.errors import ScaffoldError
from modforge.executor import GenerationResult, build_context, execute_plan
from modforge.logging import get_logger
from modforge.metadata import LibraryMetadata, resolve_metadata
from modforge.naming import NamingVariants, derive_naming_variants
from modforge.plan import DispatchPlan, build_plan
from modforge.platform import PlatformConfiguration, resolve_platform
from modforge.request import GenerationRequest
from modforge.storage import ResponseCollector, StorageAdapter
from modforge.templates import TemplateRenderer

logger = get_logger("engine")

RequestLike = Union[GenerationRequest, dict[str, Any]]


class PreparedGeneration(BaseModel):
    """Everything resolved for a request before any storage operation."""

    model_config = ConfigDict(frozen=True)

    request: GenerationRequest
    variants: NamingVariants
    classification: ConcernClassification
    metadata: LibraryMetadata
    platform: PlatformConfiguration
    plan: DispatchPlan


class ScaffoldEngine:
    """Turns generation requests into files on a storage backend."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.renderer = renderer or TemplateRenderer()

    def prepare(self, request: RequestLike) -> PreparedGeneration:
        """Resolve *request* into a plan.

        Raises:
            ValidationError: If the request is malformed.
            PlanningError: If the plan cannot be built.
        """
        if not isinstance(request, GenerationRequest):
            request = GenerationRequest.parse(request)

        variants = derive_naming_variants(request.name)
        classification = classify_concern(variants.kebab)
        metadata = resolve_metadata(
            variants,
            request.library_kind,
            request.parent_directory,
            description=request.description,
            tags=request.tags,
            package_scope=self.config.package_scope,
            libraries_root=self.config.libraries_root,
        )
        platform = resolve_platform(
            request.platform_flags(), classification, metadata.library_kind
        )
        plan = build_plan(metadata, classification, platform, request, variants)

        return PreparedGeneration(
            request=request,
            variants=variants,
            classification=classification,
            metadata=metadata,
            platform=platform,
            plan=plan,
        )

    def context_for(self, prepared: PreparedGeneration) -> dict[str, Any]:
        return build_context(
            prepared.variants,
            prepared.metadata,
            prepared.classification,
            prepared.platform,
            prepared.request,
            self.config.package_scope,
        )

    async def generate(self, request: RequestLike, storage: StorageAdapter) -> GenerationResult:
        """Generate one library into *storage*.

        Raises:
            ValidationError: Before any storage operation.
            PlanningError: Before any storage operation.
            StorageError: On the first failed storage operation; earlier
                writes are not rolled back.
        """
        prepared = self.prepare(request)
        logger.info(
            "Generating %s (concern=%s, %d files) into %s",
            prepared.metadata.project_name,
            prepared.classification.concern.value,
            len(prepared.plan.entries),
            storage.get_root_path(),
        )
        result = await execute_plan(
            prepared.plan,
            storage,
            prepared.metadata,
            self.context_for(prepared),
            self.renderer,
            dedupe_appends=self.config.dedupe_appends,
        )
        logger.info("Wrote %d files for %s", len(result.files_written), result.project_name)
        return result


async def run_structured(
    raw: RequestLike,
    storage: StorageAdapter | None = None,
    config: EngineConfig | None = None,
) -> dict[str, Any]:
    """Run one full generation (plan, registration, formatting) and report
    the outcome as a plain mapping.

    Without *storage*, files are collected in memory and returned under
    ``"response"``.  Scaffold errors are reported, never raised.
    """
    from modforge.host import generate_library

    target = storage if storage is not None else ResponseCollector()
    try:
        result, _ = await generate_library(raw, target, config)
    except ScaffoldError as exc:
        return {"ok": False, "error": exc.to_dict()}

    payload: dict[str, Any] = {"ok": True, "result": result.model_dump()}
    if isinstance(target, ResponseCollector):
        payload["response"] = target.to_response()
    return payload
