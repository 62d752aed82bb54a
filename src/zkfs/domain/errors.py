from __future__ import annotations

"""
Error Taxonomy.

Every failure surfaced to the user belongs to exactly one class below. Each
class carries a short ``kind`` identifier used in diagnostics and a distinct
process exit code.
"""

from typing import Optional

# -----------------------------------------------------------------------------
# BASE ERROR
# -----------------------------------------------------------------------------

class ZkfsError(Exception):
    """
    Root of all errors raised by zkfs.

    Attributes:
        kind: Short identifier printed in diagnostics.
        exit_code: Process exit code associated with the error class.
        path: Namespace path the error refers to, if any.
    """
    kind: str = "error"
    exit_code: int = 1

    def __init__(self, message: str = "", path: Optional[object] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None

    def __str__(self) -> str:
        if self.path and self.message:
            return f"{self.path}: {self.message}"
        return self.message or (self.path or self.kind)


# -----------------------------------------------------------------------------
# LOCAL ERRORS (never reach the network)
# -----------------------------------------------------------------------------

class UsageError(ZkfsError):
    """Invalid combination of command line options."""
    kind = "usage"
    exit_code = 2


class InvalidPath(ZkfsError):
    """Malformed namespace path."""
    kind = "invalid-path"
    exit_code = 3


class PayloadTooLarge(ZkfsError):
    """Payload exceeds the configured node size limit."""
    kind = "payload-too-large"
    exit_code = 7


# -----------------------------------------------------------------------------
# REMOTE ERRORS (raised by the node client adapter)
# -----------------------------------------------------------------------------

class NodeNotFound(ZkfsError):
    kind = "node-not-found"
    exit_code = 4


class NodeExists(ZkfsError):
    kind = "node-exists"
    exit_code = 5


class VersionConflict(ZkfsError):
    """Optimistic-concurrency check failed on write or delete."""
    kind = "version-conflict"
    exit_code = 6


class ConnectError(ZkfsError):
    kind = "connect-error"
    exit_code = 8


class NodeIOError(ZkfsError):
    """Transport or session failure during an operation."""
    kind = "io-error"
    exit_code = 9


class NodeNotEmpty(ZkfsError):
    """Non-recursive delete of a node that still has children."""
    kind = "node-not-empty"
    exit_code = 11


# -----------------------------------------------------------------------------
# COMPOSITE ERRORS
# -----------------------------------------------------------------------------

class TraversalFailed(ZkfsError):
    """
    Wraps any adapter failure encountered while walking a subtree.

    Attributes:
        cause: The underlying error that aborted the walk.
    """
    kind = "traversal-failed"
    exit_code = 10

    def __init__(self, path: object, cause: BaseException) -> None:
        super().__init__(f"{getattr(cause, 'kind', type(cause).__name__)}: {cause}", path)
        self.cause = cause


class Interrupted(ZkfsError):
    """Raised in the main thread when a termination signal is received."""
    kind = "interrupted"
    exit_code = 130

    def __init__(self, signum: int) -> None:
        super().__init__(f"received signal {signum}")
        self.signum = signum
