"""modforge -- deterministic Effect library scaffolding for Nx workspaces.

A sparse request (name, library kind, a few flags) is resolved into naming
variants, a concern classification, library metadata and a platform
configuration, then into an ordered plan of template renders that is
executed against a pluggable storage backend.

Quick usage::

    from modforge import ScaffoldEngine, MemoryTree

    tree = MemoryTree()
    result = await ScaffoldEngine().generate(
        {"name": "cache", "library_kind": "infra"}, tree
    )
    print(result.files_written)
"""

from modforge.config import EngineConfig
from modforge.engine import ScaffoldEngine, run_structured
from modforge.errors import PlanningError, ScaffoldError, StorageError, ValidationError
from modforge.executor import GenerationResult
from modforge.host import generate_library
from modforge.request import GenerationRequest
from modforge.storage import FileSystemStorage, MemoryTree, ResponseCollector, StorageAdapter

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "FileSystemStorage",
    "GenerationRequest",
    "GenerationResult",
    "MemoryTree",
    "PlanningError",
    "ResponseCollector",
    "ScaffoldEngine",
    "ScaffoldError",
    "StorageAdapter",
    "StorageError",
    "ValidationError",
    "generate_library",
    "run_structured",
]
