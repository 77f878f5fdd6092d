"""Template dispatch planning.

Turns the resolved metadata, concern classification, platform configuration
and request flags into an ordered ``DispatchPlan``: a list of
``(output path, template)`` entries.  The plan is the union of

* an always-generated set (documentation, errors, barrel, service spec),
* a concern-specific set selected by ``classification.concern``,
* a kind-specific set selected by ``metadata.library_kind`` (contract
  entities and ports, data-access repositories, feature server/RPC
  handlers, provider adapters; infra libraries add nothing),
* flag-gated sets (client/server split, edge, CQRS, provider consolidation),
* per-sub-module entries that create a directory barrel and then append an
  export to the library barrel.

Every path is a pure string built from metadata fields.  ``build_plan``
rejects any plan in which two create entries share a path, or an append
targets a path that no earlier entry created.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from modforge.concerns import Concern, ConcernClassification
from modforge.errors import PlanningError
from modforge.metadata import LibraryKind, LibraryMetadata
from modforge.naming import NamingVariants, derive_naming_variants
from modforge.platform import PlatformConfiguration
from modforge.request import GenerationRequest


class EntryMode(str, Enum):
    """How an entry's rendered content reaches storage."""

    CREATE = "create"
    APPEND = "append"


class PlanEntry(BaseModel):
    """One output file (or one append to an existing file)."""

    model_config = ConfigDict(frozen=True)

    output_path: str
    template: str
    mode: EntryMode = EntryMode.CREATE
    context: dict[str, Any] = Field(default_factory=dict)


class DispatchPlan(BaseModel):
    """Ordered, reproducible list of plan entries."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[PlanEntry, ...] = ()

    def output_paths(self) -> list[str]:
        """Paths of create entries, in plan order."""
        return [e.output_path for e in self.entries if e.mode is EntryMode.CREATE]

    def colliding_paths(self) -> list[str]:
        """Paths created by more than one entry."""
        counts = Counter(self.output_paths())
        return sorted(path for path, count in counts.items() if count > 1)

    def append_targets(self) -> list[str]:
        return [e.output_path for e in self.entries if e.mode is EntryMode.APPEND]

    def validate_ordering(self) -> None:
        """Check that every append follows the create entry of its path.

        Raises:
            PlanningError: If an append has no earlier create for its path.
        """
        created: set[str] = set()
        for entry in self.entries:
            if entry.mode is EntryMode.CREATE:
                created.add(entry.output_path)
            elif entry.output_path not in created:
                raise PlanningError(
                    f"Append to {entry.output_path} precedes its creation",
                    path=entry.output_path,
                )


# ---------------------------------------------------------------------------
# Per-concern template selection
# ---------------------------------------------------------------------------

ERRORS_TEMPLATES: dict[Concern, str] = {
    Concern.CACHE: "primitives/errors.ts.j2",
    Concern.QUEUE: "primitives/errors.ts.j2",
    Concern.PUBSUB: "primitives/errors.ts.j2",
    Concern.DATABASE: "primitives/errors.ts.j2",
    Concern.RPC: "rpc/errors.ts.j2",
    Concern.AUTH: "auth/errors.ts.j2",
    Concern.STORAGE: "storage/errors.ts.j2",
    Concern.OBSERVABILITY: "observability/errors.ts.j2",
    Concern.GENERIC: "generic/errors.ts.j2",
}

INDEX_TEMPLATES: dict[Concern, str] = {
    Concern.CACHE: "primitives/index.ts.j2",
    Concern.QUEUE: "primitives/index.ts.j2",
    Concern.PUBSUB: "primitives/index.ts.j2",
    Concern.DATABASE: "primitives/index.ts.j2",
    Concern.RPC: "rpc/index.ts.j2",
    Concern.AUTH: "auth/index.ts.j2",
    Concern.STORAGE: "storage/index.ts.j2",
    Concern.OBSERVABILITY: "observability/index.ts.j2",
    Concern.GENERIC: "generic/index.ts.j2",
}


class _Paths:
    """Path helpers bound to one library's metadata."""

    def __init__(self, metadata: LibraryMetadata, variants: NamingVariants) -> None:
        self.project_root = metadata.project_root
        self.source_root = metadata.source_root
        self.lib = f"{metadata.source_root}/lib"
        self.kebab = variants.kebab

    def src(self, name: str) -> str:
        return f"{self.source_root}/{name}"

    def in_lib(self, name: str) -> str:
        return f"{self.lib}/{name}"


def _generic_entries(p: _Paths) -> list[PlanEntry]:
    return [
        PlanEntry(output_path=p.src("types.ts"), template="generic/types.ts.j2"),
        PlanEntry(output_path=p.in_lib("service.ts"), template="generic/service.ts.j2"),
        PlanEntry(output_path=p.in_lib("config.ts"), template="generic/config.ts.j2"),
        PlanEntry(output_path=p.in_lib("memory.ts"), template="generic/memory.ts.j2"),
        PlanEntry(output_path=p.in_lib("layers.ts"), template="generic/layers.ts.j2"),
    ]


def _backed_primitive(prefix: str) -> Callable[[_Paths], list[PlanEntry]]:
    """Service interface + backing-store layer, shared by cache/queue/pubsub."""

    def entries(p: _Paths) -> list[PlanEntry]:
        return [
            PlanEntry(output_path=p.in_lib("service.ts"), template=f"primitives/{prefix}-service.ts.j2"),
            PlanEntry(output_path=p.in_lib("layers.ts"), template=f"primitives/{prefix}-layers.ts.j2"),
        ]

    return entries


def _database_entries(p: _Paths) -> list[PlanEntry]:
    # Config and providers live in the provider library this one delegates to.
    return [
        PlanEntry(output_path=p.in_lib("service.ts"), template="primitives/database-service.ts.j2"),
    ]


def _rpc_entries(p: _Paths) -> list[PlanEntry]:
    entries = [
        PlanEntry(output_path=p.in_lib(f"{name}.ts"), template=f"rpc/{name}.ts.j2")
        for name in ("core", "transport", "client", "router")
    ]
    entries.extend(
        PlanEntry(
            output_path=p.in_lib(f"middleware/{name}.ts"),
            template=f"rpc/middleware/{name}.ts.j2",
        )
        for name in ("auth", "service-auth", "request-meta", "route-selector", "index")
    )
    entries.append(PlanEntry(output_path=p.in_lib("hooks.ts"), template="rpc/hooks.ts.j2"))
    return entries


def _service_and_types(prefix: str) -> Callable[[_Paths], list[PlanEntry]]:
    def entries(p: _Paths) -> list[PlanEntry]:
        return [
            PlanEntry(output_path=p.in_lib("service.ts"), template=f"{prefix}/service.ts.j2"),
            PlanEntry(output_path=p.in_lib("types.ts"), template=f"{prefix}/types.ts.j2"),
        ]

    return entries


def _observability_entries(p: _Paths) -> list[PlanEntry]:
    names = ("provider", "sdk", "supervisor", "config", "presets", "constants", "logging", "metrics")
    return [
        PlanEntry(output_path=p.in_lib(f"{name}.ts"), template=f"observability/{name}.ts.j2")
        for name in names
    ]


CONCERN_PLANNERS: dict[Concern, Callable[[_Paths], list[PlanEntry]]] = {
    Concern.CACHE: _backed_primitive("cache"),
    Concern.QUEUE: _backed_primitive("queue"),
    Concern.PUBSUB: _backed_primitive("pubsub"),
    Concern.DATABASE: _database_entries,
    Concern.RPC: _rpc_entries,
    Concern.AUTH: _service_and_types("auth"),
    Concern.STORAGE: _service_and_types("storage"),
    Concern.OBSERVABILITY: _observability_entries,
    Concern.GENERIC: _generic_entries,
}

def _contract_entries(p: _Paths) -> list[PlanEntry]:
    return [
        PlanEntry(output_path=p.in_lib(f"{name}.ts"), template=f"contract/{name}.ts.j2")
        for name in ("entities", "events", "ports", "rpc-definitions")
    ]


def _data_access_entries(p: _Paths) -> list[PlanEntry]:
    return [
        PlanEntry(output_path=p.in_lib(f"{name}.ts"), template=f"data-access/{name}.ts.j2")
        for name in ("repository", "aggregate", "validation")
    ]


def _feature_entries(p: _Paths) -> list[PlanEntry]:
    return [
        PlanEntry(output_path=p.in_lib("server/service.ts"), template="feature/server-service.ts.j2"),
        PlanEntry(output_path=p.in_lib("server/layers.ts"), template="feature/server-layers.ts.j2"),
        PlanEntry(output_path=p.in_lib("rpc/handlers.ts"), template="feature/rpc-handlers.ts.j2"),
    ]


def _provider_entries(p: _Paths) -> list[PlanEntry]:
    # "adapter/" rather than "provider/": observability already owns lib/provider.ts.
    return [
        PlanEntry(output_path=p.in_lib("adapter/service.ts"), template="provider/adapter-service.ts.j2"),
        PlanEntry(output_path=p.in_lib("adapter/layers.ts"), template="provider/adapter-layers.ts.j2"),
    ]


def _no_entries(p: _Paths) -> list[PlanEntry]:
    return []


KIND_PLANNERS: dict[LibraryKind, Callable[[_Paths], list[PlanEntry]]] = {
    LibraryKind.CONTRACT: _contract_entries,
    LibraryKind.DATA_ACCESS: _data_access_entries,
    LibraryKind.FEATURE: _feature_entries,
    LibraryKind.INFRA: _no_entries,
    LibraryKind.PROVIDER: _provider_entries,
}

for _table_name, _table, _keys in (
    ("planner for concern", CONCERN_PLANNERS, Concern),
    ("errors template for concern", ERRORS_TEMPLATES, Concern),
    ("index template for concern", INDEX_TEMPLATES, Concern),
    ("planner for library kind", KIND_PLANNERS, LibraryKind),
):
    _missing = set(_keys) - set(_table)
    if _missing:
        raise PlanningError(f"No {_table_name}(s): {', '.join(sorted(k.value for k in _missing))}")


# ---------------------------------------------------------------------------
# Plan construction
# ---------------------------------------------------------------------------


def build_plan(
    metadata: LibraryMetadata,
    classification: ConcernClassification,
    platform: PlatformConfiguration,
    request: GenerationRequest,
    variants: NamingVariants | None = None,
) -> DispatchPlan:
    """Build the ordered dispatch plan for one request.

    Raises:
        PlanningError: If two create entries collide on a path or an append
            precedes the creation of its target.
    """
    if variants is None:
        variants = derive_naming_variants(request.name)
    p = _Paths(metadata, variants)
    concern = classification.concern
    barrel = p.src("index.ts")

    entries: list[PlanEntry] = [
        PlanEntry(output_path=f"{p.project_root}/README.md", template="common/readme.md.j2"),
        PlanEntry(output_path=p.in_lib("errors.ts"), template=ERRORS_TEMPLATES[concern]),
    ]

    if request.consolidates_providers:
        entries.append(PlanEntry(output_path=barrel, template="consolidation/index.ts.j2"))
    else:
        entries.append(PlanEntry(output_path=barrel, template=INDEX_TEMPLATES[concern]))

    entries.append(PlanEntry(output_path=p.in_lib("service.spec.ts"), template="common/service-spec.ts.j2"))

    entries.extend(CONCERN_PLANNERS[concern](p))
    entries.extend(KIND_PLANNERS[metadata.library_kind](p))

    if platform.include_client_server_split:
        entries.append(
            PlanEntry(output_path=p.in_lib("layers/client-layers.ts"), template="platform/client-layers.ts.j2")
        )
        entries.append(
            PlanEntry(
                output_path=p.in_lib(f"client/hooks/use-{p.kebab}.ts"),
                template="platform/use-hook.ts.j2",
            )
        )

    if platform.include_edge_surface:
        entries.append(
            PlanEntry(output_path=p.in_lib("layers/edge-layers.ts"), template="platform/edge-layers.ts.j2")
        )

    if request.include_cqrs:
        for name in ("commands", "queries", "projections"):
            entries.append(
                PlanEntry(output_path=p.in_lib(f"server/cqrs/{name}.ts"), template=f"cqrs/{name}.ts.j2")
            )

    if request.consolidates_providers:
        entries.append(
            PlanEntry(output_path=p.in_lib("orchestrator.ts"), template="consolidation/orchestrator.ts.j2")
        )

    for sub_module in request.sub_modules:
        sub = derive_naming_variants(sub_module)
        sub_context = {"sub_module": sub.model_dump()}
        entries.append(
            PlanEntry(
                output_path=p.src(f"{sub.kebab}/index.ts"),
                template="submodule/index.ts.j2",
                context=sub_context,
            )
        )
        entries.append(
            PlanEntry(
                output_path=barrel,
                template="submodule/barrel-export.ts.j2",
                mode=EntryMode.APPEND,
                context=sub_context,
            )
        )

    plan = DispatchPlan(entries=tuple(entries))

    collisions = plan.colliding_paths()
    if collisions:
        raise PlanningError(f"Plan entries collide on: {', '.join(collisions)}", path=collisions[0])
    plan.validate_ordering()
    return plan
