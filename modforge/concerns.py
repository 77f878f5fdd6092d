"""Concern classification.

Maps a normalized (kebab-case) library name onto one of a closed set of
archetypes.  Matching is exact against a fixed keyword registry; anything not
in the registry is ``generic``.  The classification only selects which
specialized file set the planner emits -- it never affects names or paths.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Concern(str, Enum):
    """Functional archetype of a generated library."""

    CACHE = "cache"
    QUEUE = "queue"
    PUBSUB = "pubsub"
    DATABASE = "database"
    RPC = "rpc"
    AUTH = "auth"
    STORAGE = "storage"
    OBSERVABILITY = "observability"
    GENERIC = "generic"


class ConcernClassification(BaseModel):
    """Result of classifying one library name."""

    model_config = ConfigDict(frozen=True)

    concern: Concern
    is_primitive: bool


# Keyword -> concern.  Disjoint by construction: one keyword, one concern.
CONCERN_REGISTRY: dict[str, Concern] = {
    "cache": Concern.CACHE,
    "queue": Concern.QUEUE,
    "pubsub": Concern.PUBSUB,
    "database": Concern.DATABASE,
    "rpc": Concern.RPC,
    "auth": Concern.AUTH,
    "storage": Concern.STORAGE,
    "observability": Concern.OBSERVABILITY,
    "logging": Concern.OBSERVABILITY,
    "metrics": Concern.OBSERVABILITY,
}

# Concerns that delegate to a separate provider library.
PROVIDER_FOR_CONCERN: dict[Concern, str] = {
    Concern.DATABASE: "kysely",
}


def classify_concern(kebab: str) -> ConcernClassification:
    """Classify a kebab-case name.

    ``"cache"`` -> ``cache``/primitive; ``"cache-v2"`` or ``"widget"`` ->
    ``generic``/non-primitive.
    """
    concern = CONCERN_REGISTRY.get(kebab.strip().lower())
    if concern is None:
        return ConcernClassification(concern=Concern.GENERIC, is_primitive=False)
    return ConcernClassification(concern=concern, is_primitive=True)


def provider_package(concern: Concern, scope: str) -> str | None:
    """Return the provider package a concern delegates to, if any.

    ``provider_package(Concern.DATABASE, "@acme")`` -> ``"@acme/provider-kysely"``.
    """
    provider = PROVIDER_FOR_CONCERN.get(concern)
    if provider is None:
        return None
    return f"{scope}/provider-{provider}"
