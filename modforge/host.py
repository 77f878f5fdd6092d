"""Build-tool plugin surface.

Runs the engine against a staged ``MemoryTree`` the way a workspace plugin
would: generate the library files, register the project with the workspace
(``project.json`` and ``package.json``), then format every written file.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from modforge.config import EngineConfig
from modforge.engine import PreparedGeneration, RequestLike, ScaffoldEngine
from modforge.executor import GenerationResult
from modforge.logging import get_logger
from modforge.storage import MemoryTree, StorageAdapter

logger = get_logger("host")

Formatter = Callable[[str, str], str]


def format_text(path: str, content: str) -> str:
    """Strip trailing whitespace from each line and end with one newline."""
    lines = [line.rstrip() for line in content.splitlines()]
    return "\n".join(lines).rstrip("\n") + "\n"


def project_configuration(prepared: PreparedGeneration) -> dict[str, Any]:
    """Workspace project entry for the generated library."""
    metadata = prepared.metadata
    root = metadata.project_root
    return {
        "name": metadata.project_name,
        "$schema": f"{metadata.root_offset}node_modules/nx/schemas/project-schema.json",
        "root": root,
        "projectType": "library",
        "sourceRoot": metadata.source_root,
        "targets": {
            "build": {
                "executor": "@nx/js:tsc",
                "outputs": ["{options.outputPath}"],
                "options": {
                    "outputPath": metadata.dist_root,
                    "main": f"{metadata.source_root}/index.ts",
                    "tsConfig": f"{root}/tsconfig.lib.json",
                },
            },
            "lint": {"executor": "@nx/eslint:lint"},
            "typecheck": {
                "executor": "nx:run-commands",
                "options": {"command": f"tsc --noEmit -p {root}/tsconfig.lib.json"},
            },
            "test": {
                "executor": "@nx/vite:test",
                "outputs": [f"{{workspaceRoot}}/coverage/{root}"],
            },
        },
        "tags": list(metadata.tags),
    }


def package_manifest(prepared: PreparedGeneration) -> dict[str, Any]:
    """``package.json`` content: one export for the barrel plus one per sub-module."""
    exports: dict[str, str] = {".": "./src/index.ts"}
    for sub in prepared.request.sub_modules:
        exports[f"./{sub}"] = f"./src/{sub}/index.ts"
    return {
        "name": prepared.metadata.package_identifier,
        "version": "0.0.1",
        "type": "module",
        "description": prepared.metadata.description,
        "exports": exports,
        "peerDependencies": {"effect": "*"},
        "publishConfig": {"access": "public"},
    }


async def register_project(prepared: PreparedGeneration, tree: StorageAdapter) -> list[str]:
    """Write ``project.json`` and ``package.json`` into *tree*."""
    root = prepared.metadata.project_root
    await tree.make_directory(root)
    written = []
    for file_name, payload in (
        ("project.json", project_configuration(prepared)),
        ("package.json", package_manifest(prepared)),
    ):
        path = f"{root}/{file_name}"
        await tree.write_file(path, json.dumps(payload, indent=2) + "\n")
        written.append(path)
    return written


async def generate_library(
    request: RequestLike,
    tree: StorageAdapter | None = None,
    config: EngineConfig | None = None,
    formatter: Formatter | None = format_text,
) -> tuple[GenerationResult, StorageAdapter]:
    """Generate, register and format one library.

    Args:
        request: Raw mapping or validated request.
        tree: Target backend; a fresh ``MemoryTree`` is staged when omitted.
        config: Engine configuration.
        formatter: Called as ``formatter(path, content)`` for each written
            file.  ``None`` disables formatting.

    Returns:
        The generation result (including the registration files) and the
        tree holding the output.
    """
    tree = tree if tree is not None else MemoryTree()
    engine = ScaffoldEngine(config)
    prepared = engine.prepare(request)

    result = await engine.generate(prepared.request, tree)
    files = list(result.files_written)
    for path in await register_project(prepared, tree):
        if path not in files:
            files.append(path)

    if formatter is not None:
        for path in files:
            original = await tree.read_file(path)
            formatted = formatter(path, original)
            if formatted != original:
                await tree.write_file(path, formatted)
        logger.debug("Formatted %d files", len(files))

    return result.model_copy(update={"files_written": files}), tree
