"""Platform configuration resolution.

Decides which optional output surfaces a library emits.  Precedence, in
order:

1. An explicitly supplied flag always wins.
2. Otherwise the client/server split falls back to the per-concern default:
   on for ``generic`` libraries, off for every primitive concern.
3. The edge surface has no concern default and stays off unless requested.
4. The platform itself defaults to ``node``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from modforge.concerns import Concern, ConcernClassification
from modforge.errors import PlanningError
from modforge.metadata import LibraryKind


class Platform(str, Enum):
    """Runtime platform a library targets."""

    NODE = "node"
    BROWSER = "browser"
    EDGE = "edge"
    UNIVERSAL = "universal"


DEFAULT_PLATFORM = Platform.NODE

# Client/server split default when the caller leaves the flag unset.
SPLIT_DEFAULTS: dict[Concern, bool] = {
    Concern.CACHE: False,
    Concern.QUEUE: False,
    Concern.PUBSUB: False,
    Concern.DATABASE: False,
    Concern.RPC: False,
    Concern.AUTH: False,
    Concern.STORAGE: False,
    Concern.OBSERVABILITY: False,
    Concern.GENERIC: True,
}

_missing = set(Concern) - set(SPLIT_DEFAULTS)
if _missing:
    raise PlanningError(
        f"No client/server default for concern(s): {', '.join(sorted(c.value for c in _missing))}"
    )


class PlatformFlags(BaseModel):
    """Platform-related request flags; ``None`` means "not supplied"."""

    model_config = ConfigDict(frozen=True)

    platform: Optional[Platform] = None
    include_client_server_split: Optional[bool] = None
    include_edge_surface: Optional[bool] = None


class PlatformConfiguration(BaseModel):
    """Resolved platform axis."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    include_client_server_split: bool
    include_edge_surface: bool


def resolve_platform(
    flags: PlatformFlags,
    classification: ConcernClassification,
    library_kind: LibraryKind,
) -> PlatformConfiguration:
    """Merge explicit *flags* with the defaults for *classification*.

    *library_kind* is accepted so every host passes the same inputs; the
    current rules do not vary by kind.
    """
    if flags.include_client_server_split is not None:
        split = flags.include_client_server_split
    else:
        split = SPLIT_DEFAULTS[classification.concern]

    return PlatformConfiguration(
        platform=flags.platform or DEFAULT_PLATFORM,
        include_client_server_split=split,
        include_edge_surface=bool(flags.include_edge_surface),
    )
