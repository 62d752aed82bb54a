from __future__ import annotations

"""
ZooKeeper Node Client Adapter.

Thin wrapper around ``kazoo.client.KazooClient``. It speaks NodePath and
NodeStat instead of strings and ZnodeStat, and translates kazoo exceptions
into the zkfs error taxonomy. It owns no business logic and never retries.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

from kazoo.client import KazooClient
from kazoo.exceptions import (
    BadArgumentsError,
    BadVersionError,
    KazooException,
    NodeExistsError,
    NoNodeError,
    NotEmptyError,
)
from kazoo.handlers.threading import KazooTimeoutError
from kazoo.security import CREATOR_ALL_ACL, OPEN_ACL_UNSAFE, READ_ACL_UNSAFE

from zkfs.domain.constants import ANY_VERSION, DEFAULT_ACL_POLICY, DEFAULT_TIMEOUT_SECONDS
from zkfs.domain.errors import (
    ConnectError,
    InvalidPath,
    NodeExists,
    NodeIOError,
    NodeNotEmpty,
    NodeNotFound,
    UsageError,
    VersionConflict,
)
from zkfs.domain.node_models import CreateMode, NodeStat
from zkfs.domain.paths import NodePath, normalize

logger = logging.getLogger(__name__)

_ACL_POLICIES = {
    "open": OPEN_ACL_UNSAFE,
    "read-only": READ_ACL_UNSAFE,
    "creator": CREATOR_ALL_ACL,
}

# -----------------------------------------------------------------------------
# CONVERSIONS
# -----------------------------------------------------------------------------

def resolve_acl(policy: Optional[str]) -> List[Any]:
    """
    Map a configured ACL policy name to a kazoo ACL list.

    Raises:
        UsageError: If the policy name is unknown.
    """
    key = policy or DEFAULT_ACL_POLICY
    if key not in _ACL_POLICIES:
        raise UsageError(f"unknown ACL policy '{key}'")
    return list(_ACL_POLICIES[key])


def to_node_stat(stat: Any) -> NodeStat:
    """Convert a kazoo ZnodeStat into a NodeStat."""
    return NodeStat(
        version=stat.version,
        data_length=stat.dataLength,
        num_children=stat.numChildren,
        ephemeral_owner=stat.ephemeralOwner,
        ctime=stat.ctime,
        mtime=stat.mtime,
    )


@contextmanager
def _translate(path: object) -> Iterator[None]:
    """Re-raise kazoo failures as zkfs errors, chaining the original."""
    try:
        yield
    except NoNodeError as e:
        raise NodeNotFound("no such node", path) from e
    except NodeExistsError as e:
        raise NodeExists("node already exists", path) from e
    except BadVersionError as e:
        raise VersionConflict("version does not match", path) from e
    except NotEmptyError as e:
        raise NodeNotEmpty("node has children (use --recursive)", path) from e
    except BadArgumentsError as e:
        raise InvalidPath("rejected by the server", path) from e
    except KazooTimeoutError as e:
        raise NodeIOError(f"operation timed out: {e}", path) from e
    except KazooException as e:
        raise NodeIOError(f"{type(e).__name__}: {e}", path) from e

# -----------------------------------------------------------------------------
# ADAPTER
# -----------------------------------------------------------------------------

class NodeClient:
    """
    Session-bound capability set over the coordination service.

    Usable as a context manager: entering connects, leaving stops and closes
    the session.

    Args:
        hosts: Connection string, ``host:port[,host:port...][/chroot]``.
        timeout: Connection and session timeout in seconds.
        client_factory: Callable building the kazoo client (tests inject mocks).
    """

    def __init__(
            self,
            hosts: str,
            timeout: float = DEFAULT_TIMEOUT_SECONDS,
            client_factory: Callable[..., Any] = KazooClient,
    ) -> None:
        self.hosts = hosts
        self.timeout = timeout
        self._factory = client_factory
        self._zk: Optional[Any] = None

    def __enter__(self) -> NodeClient:
        return self.connect()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # --- Session ---

    def connect(self) -> NodeClient:
        logger.info(f"Connecting to {self.hosts}")
        try:
            zk = self._factory(hosts=self.hosts, timeout=self.timeout)
        except ValueError as e:
            raise ConnectError(f"invalid address: {e}", self.hosts) from e

        try:
            zk.start(timeout=self.timeout)
        except KazooTimeoutError as e:
            zk.close()
            raise ConnectError(f"could not connect within {self.timeout:g}s", self.hosts) from e
        except KazooException as e:
            zk.close()
            raise ConnectError(f"{type(e).__name__}: {e}", self.hosts) from e

        self._zk = zk
        logger.info("Connected")
        return self

    def close(self) -> None:
        if self._zk is None:
            return
        zk, self._zk = self._zk, None
        try:
            zk.stop()
            zk.close()
        except KazooException as e:
            logger.warning(f"Error while closing session: {e}")
        logger.debug("Session closed")

    @property
    def connected(self) -> bool:
        return self._zk is not None

    # --- Reads ---

    def list_children(self, path: NodePath) -> List[str]:
        """Child segment names in the order returned by the service."""
        with _translate(path):
            return list(self._session().get_children(str(path)))

    def get_data(self, path: NodePath) -> Tuple[bytes, NodeStat]:
        with _translate(path):
            data, stat = self._session().get(str(path))
        return data or b"", to_node_stat(stat)

    def stat(self, path: NodePath) -> Optional[NodeStat]:
        """Node metadata, or None when the node does not exist."""
        with _translate(path):
            stat = self._session().exists(str(path))
        return to_node_stat(stat) if stat is not None else None

    def exists(self, path: NodePath) -> bool:
        return self.stat(path) is not None

    # --- Writes ---

    def set_data(self, path: NodePath, data: bytes, expected_version: int = ANY_VERSION) -> int:
        """Replace the payload and return the new data version."""
        with _translate(path):
            stat = self._session().set(str(path), data, version=expected_version)
        logger.debug(f"Wrote {len(data)} bytes to {path} (version {stat.version})")
        return stat.version

    def create(
            self,
            path: NodePath,
            data: bytes,
            mode: CreateMode,
            acl: Optional[List[Any]] = None,
            make_parents: bool = False,
    ) -> NodePath:
        """
        Create a node and return its actual path.

        The returned path differs from the requested one for sequential
        nodes, which receive a server-assigned suffix.
        """
        with _translate(path):
            created = self._session().create(
                str(path),
                value=data,
                acl=acl,
                ephemeral=mode.ephemeral,
                sequence=mode.sequential,
                makepath=make_parents,
            )
        logger.debug(f"Created {mode} node {created}")
        return normalize(created)

    def delete(self, path: NodePath, expected_version: int = ANY_VERSION) -> None:
        with _translate(path):
            self._session().delete(str(path), version=expected_version)
        logger.debug(f"Deleted {path}")

    # --- Internal ---

    def _session(self) -> Any:
        if self._zk is None:
            raise NodeIOError("not connected", self.hosts)
        return self._zk
