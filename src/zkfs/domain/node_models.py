from __future__ import annotations

"""
Node Domain Data Models.

Transient local mirrors of remote node metadata and the value objects that
describe how nodes are created, traversed and tracked.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple

from zkfs.domain.errors import UsageError
from zkfs.domain.paths import NodePath

# -----------------------------------------------------------------------------
# PERSISTENCE AND CREATION MODES
# -----------------------------------------------------------------------------

class Persistence(str, Enum):
    PERSISTENT = "persistent"
    EPHEMERAL = "ephemeral"


# Values accepted by the repeatable --mode option
MODE_CHOICES: Tuple[str, ...] = ("persistent", "ephemeral", "sequential")


@dataclass(frozen=True)
class CreateMode:
    """
    How a node is created.

    Attributes:
        persistence: Whether the node outlives the creating session.
        sequential: Whether the service appends a monotonic suffix to the name.
    """
    persistence: Persistence = Persistence.PERSISTENT
    sequential: bool = False

    @property
    def ephemeral(self) -> bool:
        return self.persistence is Persistence.EPHEMERAL

    def __str__(self) -> str:
        label = self.persistence.value
        return f"{label}-sequential" if self.sequential else label


def resolve_create_mode(modes: Optional[Iterable[str]]) -> CreateMode:
    """
    Combine the values of the repeatable --mode option.

    Raises:
        UsageError: If both persistent and ephemeral are requested.
    """
    selected = set(modes or ())
    unknown = selected - set(MODE_CHOICES)
    if unknown:
        raise UsageError(f"unknown create mode(s): {', '.join(sorted(unknown))}")
    if "persistent" in selected and "ephemeral" in selected:
        raise UsageError("can't use persistent and ephemeral at the same time")

    persistence = Persistence.EPHEMERAL if "ephemeral" in selected else Persistence.PERSISTENT
    return CreateMode(persistence=persistence, sequential="sequential" in selected)

# -----------------------------------------------------------------------------
# NODE METADATA
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeStat:
    """
    Metadata of a remote node at the time it was fetched.

    Attributes:
        version: Data version, bumped on every successful payload mutation.
        data_length: Payload size in bytes.
        num_children: Number of direct children.
        ephemeral_owner: Owning session id, 0 for persistent nodes.
        ctime: Creation time in milliseconds since the epoch.
        mtime: Last modification time in milliseconds since the epoch.
    """
    version: int = 0
    data_length: int = 0
    num_children: int = 0
    ephemeral_owner: int = 0
    ctime: int = 0
    mtime: int = 0

    @property
    def is_ephemeral(self) -> bool:
        return self.ephemeral_owner != 0

    @property
    def persistence(self) -> Persistence:
        return Persistence.EPHEMERAL if self.is_ephemeral else Persistence.PERSISTENT

# -----------------------------------------------------------------------------
# TRAVERSAL VIEW
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TreeEntry:
    """
    One visited node of a tree traversal.

    Attributes:
        depth: Segment count below the traversal root (root is 0).
        path: Absolute path of the visited node.
        last_flags: For each level 1..depth, whether the node on this
                    branch at that level is the last surviving sibling.
        stat: Metadata fetched while visiting the node.
    """
    depth: int
    path: NodePath
    last_flags: Tuple[bool, ...] = ()
    stat: Optional[NodeStat] = None

    @property
    def is_last(self) -> bool:
        return bool(self.last_flags) and self.last_flags[-1]

# -----------------------------------------------------------------------------
# EPHEMERAL TRACKING
# -----------------------------------------------------------------------------

class RegistrationState(str, Enum):
    CREATED = "created"
    DELETED = "deleted"
    ABANDONED = "abandoned"


@dataclass
class EphemeralRegistration:
    """An ephemeral node created by this process."""
    path: NodePath
    created_at: float = field(default_factory=time.time)
    state: RegistrationState = RegistrationState.CREATED
    error: str = ""
