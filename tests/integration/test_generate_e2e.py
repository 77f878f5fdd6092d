"""End-to-end generation against a real filesystem.

Runs the engine and the plugin surface into a temporary workspace and checks
the resulting tree against the in-memory backend.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from modforge.engine import ScaffoldEngine
from modforge.errors import StorageError, ValidationError
from modforge.host import generate_library
from modforge.storage import FileSystemStorage, MemoryTree

pytestmark = pytest.mark.integration


def _snapshot(base: Path) -> dict[str, str]:
    return {
        p.relative_to(base).as_posix(): p.read_text(encoding="utf-8")
        for p in base.rglob("*")
        if p.is_file()
    }


class TestFilesystemGeneration:
    async def test_disk_matches_memory(self, tmp_workspace: Path, feature_request):
        engine = ScaffoldEngine()
        memory = MemoryTree()
        await engine.generate(feature_request, memory)
        result = await engine.generate(feature_request, FileSystemStorage(tmp_workspace))

        assert _snapshot(tmp_workspace) == memory.files
        assert sorted(result.files_written) == sorted(memory.files)

    async def test_rpc_layout(self, tmp_workspace: Path):
        result, _ = await generate_library(
            {"name": "rpc", "libraryKind": "infra", "includeEdgeSurface": True},
            FileSystemStorage(tmp_workspace),
        )
        lib = tmp_workspace / "libs/infra/rpc/src/lib"
        for name in ("core", "transport", "client", "errors", "router", "hooks"):
            assert (lib / f"{name}.ts").is_file()
        assert (lib / "middleware" / "index.ts").is_file()
        assert (lib / "layers" / "edge-layers.ts").is_file()
        assert (tmp_workspace / "libs/infra/rpc/project.json").is_file()
        assert len(result.files_written) == len(_snapshot(tmp_workspace))

    async def test_staged_commit(self, tmp_workspace: Path, widget_request):
        _, tree = await generate_library(widget_request)
        committed = await tree.commit(FileSystemStorage(tmp_workspace))
        assert sorted(committed) == sorted(_snapshot(tmp_workspace))

    async def test_partial_failure_is_not_rolled_back(self, tmp_workspace: Path, cache_request):
        # A file where the lib directory should go fails the first write below it.
        lib = tmp_workspace / "libs/infra/cache/src"
        lib.mkdir(parents=True)
        (lib / "lib").write_text("blocker", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            await ScaffoldEngine().generate(cache_request, FileSystemStorage(tmp_workspace))

        err = exc_info.value
        assert err.files_written == ["libs/infra/cache/README.md"]
        assert (tmp_workspace / "libs/infra/cache/README.md").is_file()
        assert err.path == "libs/infra/cache/src/lib"

    async def test_escaping_parent_directory_writes_nothing(self, tmp_workspace: Path):
        raw = {"name": "order", "libraryKind": "contract", "parentDirectory": "../escape"}
        with pytest.raises(ValidationError, match="parent_directory"):
            await generate_library(raw, FileSystemStorage(tmp_workspace))
        assert list(tmp_workspace.parent.iterdir()) == [tmp_workspace]
        assert _snapshot(tmp_workspace) == {}
