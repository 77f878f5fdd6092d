"""Shared pytest fixtures for the modforge test suite.

Provides reusable fixtures for:
- Engine configuration and renderers
- Staged in-memory trees and a temporary workspace on disk
- Raw requests for the common concern archetypes
- A storage backend that fails on demand
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from modforge.config import EngineConfig
from modforge.engine import ScaffoldEngine
from modforge.errors import StorageError
from modforge.storage import FileSystemStorage, MemoryTree
from modforge.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Engine pieces
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    """One renderer shared by the whole session (templates are read-only)."""
    return TemplateRenderer()


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def engine(config: EngineConfig, renderer: TemplateRenderer) -> ScaffoldEngine:
    return ScaffoldEngine(config, renderer)


# ---------------------------------------------------------------------------
# Storage backends
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_tree() -> MemoryTree:
    return MemoryTree()


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Temporary workspace root (auto-cleanup)."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    yield workspace


@pytest.fixture
def fs_storage(tmp_workspace: Path) -> FileSystemStorage:
    return FileSystemStorage(tmp_workspace)


class FailingTree(MemoryTree):
    """MemoryTree whose ``write_file`` fails once *fail_after* writes succeeded."""

    def __init__(self, fail_after: int) -> None:
        super().__init__(root="/failing")
        self.fail_after = fail_after
        self.writes = 0
        self.calls: list[str] = []

    async def write_file(self, path: str, content: str) -> None:
        self.calls.append(path)
        if self.writes >= self.fail_after:
            raise StorageError(
                f"disk full while writing {path}", path=path, cause=OSError(28, "No space left on device")
            )
        self.writes += 1
        await super().write_file(path, content)


@pytest.fixture
def failing_tree_factory():
    """Build a ``FailingTree`` that fails after N successful writes."""
    return FailingTree


class RecordingTree(MemoryTree):
    """MemoryTree that logs every call, in order, as ``(action, path)``."""

    def __init__(self) -> None:
        super().__init__(root="/recording")
        self.log: list[tuple[str, str]] = []

    async def write_file(self, path: str, content: str) -> None:
        self.log.append(("write", path))
        await super().write_file(path, content)

    async def read_file(self, path: str) -> str:
        self.log.append(("read", path))
        return await super().read_file(path)

    async def make_directory(self, path: str) -> None:
        self.log.append(("mkdir", path))
        await super().make_directory(path)


@pytest.fixture
def recording_tree() -> RecordingTree:
    return RecordingTree()


# ---------------------------------------------------------------------------
# Sample requests
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_request() -> dict[str, Any]:
    return {"name": "cache", "libraryKind": "infra"}


@pytest.fixture
def widget_request() -> dict[str, Any]:
    return {"name": "widget", "libraryKind": "infra"}


@pytest.fixture
def order_contract_request() -> dict[str, Any]:
    return {"name": "Order", "libraryKind": "contract", "parentDirectory": "shared"}


@pytest.fixture
def feature_request() -> dict[str, Any]:
    """A feature library exercising every optional flag."""
    return {
        "name": "payment",
        "libraryKind": "feature",
        "description": "Payment processing",
        "tags": "domain:billing, team:payments",
        "includeEdgeSurface": True,
        "includeCQRS": True,
        "subModules": "refunds,invoices",
    }


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_modforge_logger():
    """Undo ``configure_logging`` so caplog sees records in every test."""
    yield
    logger = logging.getLogger("modforge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
