"""Storage backends the executor writes through.

The executor only depends on the ``StorageAdapter`` interface.  Three
backends are provided:

* ``MemoryTree`` -- an in-memory staged tree used for dry runs and by the
  build-tool plugin surface.  It can later be committed to another backend.
* ``FileSystemStorage`` -- writes real files below a workspace root.
* ``ResponseCollector`` -- an in-memory tree that also records every
  operation so an automation caller gets a structured response instead of
  disk writes.

Paths handed to a backend are workspace-relative and ``/``-separated.  Every
backend reports failures as ``StorageError``.
"""

from __future__ import annotations

import asyncio
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from modforge.errors import StorageError


class StorageAdapter(ABC):
    """Capability interface consumed by the executor."""

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        """Create or overwrite *path* with *content*."""

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """Return the text content of *path*."""

    @abstractmethod
    async def make_directory(self, path: str) -> None:
        """Create *path* (and any missing parents)."""

    @abstractmethod
    def get_root_path(self) -> str:
        """Return the root every relative path is resolved against."""


def _normalize(path: str) -> str:
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return normalized.lstrip("/") if normalized != "." else ""


# ---------------------------------------------------------------------------
# In-memory tree
# ---------------------------------------------------------------------------


class MemoryTree(StorageAdapter):
    """Staged in-memory file tree."""

    def __init__(self, root: str = "/virtual", files: dict[str, str] | None = None) -> None:
        self.root = root
        self.files: dict[str, str] = {}
        self.directories: set[str] = set()
        for path, content in (files or {}).items():
            self._put(_normalize(path), content)

    def _put(self, path: str, content: str) -> None:
        self.files[path] = content
        parent = posixpath.dirname(path)
        while parent:
            self.directories.add(parent)
            parent = posixpath.dirname(parent)

    async def write_file(self, path: str, content: str) -> None:
        key = _normalize(path)
        if key in self.directories:
            raise StorageError(f"Cannot write file over directory: {path}", path=path)
        self._put(key, content)

    async def read_file(self, path: str) -> str:
        key = _normalize(path)
        try:
            return self.files[key]
        except KeyError as exc:
            raise StorageError(f"File not found: {path}", path=path, cause=exc) from exc

    async def make_directory(self, path: str) -> None:
        key = _normalize(path)
        if key in self.files:
            raise StorageError(f"Cannot create directory over file: {path}", path=path)
        while key:
            self.directories.add(key)
            key = posixpath.dirname(key)

    def get_root_path(self) -> str:
        return self.root

    def exists(self, path: str) -> bool:
        key = _normalize(path)
        return key in self.files or key in self.directories

    async def commit(self, target: StorageAdapter) -> list[str]:
        """Flush every staged file into *target*, in sorted path order.

        Returns:
            The list of committed paths.
        """
        committed: list[str] = []
        created: set[str] = set()
        for path in sorted(self.files):
            parent = posixpath.dirname(path)
            if parent and parent not in created:
                await target.make_directory(parent)
                created.add(parent)
            await target.write_file(path, self.files[path])
            committed.append(path)
        return committed


# ---------------------------------------------------------------------------
# Real filesystem
# ---------------------------------------------------------------------------


class FileSystemStorage(StorageAdapter):
    """Writes files below *root* on the local disk."""

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / _normalize(path)

    async def write_file(self, path: str, content: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(_write_file, target, content)
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}", path=path, cause=exc) from exc

    async def read_file(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_text, "utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}", path=path, cause=exc) from exc

    async def make_directory(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                f"Failed to create directory {path}: {exc}", path=path, cause=exc
            ) from exc

    def get_root_path(self) -> str:
        return str(self.root.resolve())


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Response collector
# ---------------------------------------------------------------------------


class ResponseCollector(MemoryTree):
    """In-memory tree that records every operation for a structured response."""

    def __init__(self, root: str = "/response") -> None:
        super().__init__(root=root)
        self.operations: list[dict[str, Any]] = []

    async def write_file(self, path: str, content: str) -> None:
        await super().write_file(path, content)
        self.operations.append(
            {"action": "write", "path": _normalize(path), "bytes": len(content.encode("utf-8"))}
        )

    async def make_directory(self, path: str) -> None:
        await super().make_directory(path)
        self.operations.append({"action": "mkdir", "path": _normalize(path)})

    def to_response(self, include_content: bool = True) -> dict[str, Any]:
        """Return the collected files and operations as plain data."""
        files = [
            {"path": path, **({"content": content} if include_content else {})}
            for path, content in sorted(self.files.items())
        ]
        return {"root": self.root, "files": files, "operations": list(self.operations)}
