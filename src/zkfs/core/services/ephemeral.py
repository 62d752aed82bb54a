from __future__ import annotations

"""
Ephemeral Lifecycle Manager.

Tracks the ephemeral nodes created by this process and deletes them before
the process exits. ZooKeeper also expires ephemeral nodes when the owning
session ends; this manager removes them proactively so that they vanish
immediately rather than after the session timeout.

Every registration ends either deleted or explicitly abandoned: a failed
delete is logged and not retried, and never prevents the remaining
registrations from being cleaned up.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from zkfs.domain.errors import Interrupted, ZkfsError
from zkfs.domain.node_models import EphemeralRegistration, RegistrationState
from zkfs.domain.paths import NodePath
from zkfs.infra.signals import SignalGuard
from zkfs.infra.zookeeper import NodeClient

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# RESULT MODEL
# -----------------------------------------------------------------------------

@dataclass
class CleanupReport:
    """
    Outcome of a cleanup pass.

    Attributes:
        deleted: Paths whose nodes were removed.
        abandoned: Registrations whose delete attempt failed.
    """
    deleted: List[NodePath] = field(default_factory=list)
    abandoned: List[EphemeralRegistration] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.abandoned

# -----------------------------------------------------------------------------
# MANAGER
# -----------------------------------------------------------------------------

class EphemeralManager:
    """
    Registry of ephemeral nodes owned by the current process.

    Args:
        client: Node client whose session created the nodes.
    """

    def __init__(self, client: NodeClient) -> None:
        self._client = client
        self._registrations: Dict[NodePath, EphemeralRegistration] = {}
        self._report: Optional[CleanupReport] = None

    def register(self, path: NodePath) -> EphemeralRegistration:
        """Track a freshly created ephemeral node. Registering twice keeps one entry."""
        existing = self._registrations.get(path)
        if existing is not None:
            return existing
        registration = EphemeralRegistration(path=path)
        self._registrations[path] = registration
        logger.debug(f"Registered ephemeral node {path}")
        return registration

    def deregister(self, path: NodePath) -> bool:
        """Forget a node that was deleted by other means."""
        registration = self._registrations.pop(path, None)
        if registration is None:
            return False
        registration.state = RegistrationState.DELETED
        logger.debug(f"Deregistered ephemeral node {path}")
        return True

    @property
    def pending(self) -> List[EphemeralRegistration]:
        """Live registrations, most recently created first."""
        return list(reversed(list(self._registrations.values())))

    @property
    def cleaned_up(self) -> bool:
        return self._report is not None

    def cleanup_all(self) -> CleanupReport:
        """
        Delete every registered node, most recently created first.

        Runs once; subsequent calls return the first report.

        Returns:
            CleanupReport: Deleted paths and abandoned registrations.
        """
        if self._report is not None:
            logger.debug("Ephemeral cleanup already performed")
            return self._report

        report = CleanupReport()
        for registration in self.pending:
            try:
                self._client.delete(registration.path)
            except Exception as e:
                kind = e.kind if isinstance(e, ZkfsError) else type(e).__name__
                registration.state = RegistrationState.ABANDONED
                registration.error = f"{kind}: {e}"
                report.abandoned.append(registration)
                logger.warning(f"Could not delete ephemeral node {registration.path}: {e}")
            else:
                registration.state = RegistrationState.DELETED
                report.deleted.append(registration.path)
                logger.info(f"Deleted ephemeral node {registration.path}")
            finally:
                self._registrations.pop(registration.path, None)

        self._report = report
        return report

# -----------------------------------------------------------------------------
# SCOPED ACQUISITION
# -----------------------------------------------------------------------------

@contextmanager
def lifecycle_scope(manager: EphemeralManager) -> Iterator[EphemeralManager]:
    """
    Guarantee cleanup_all() on every exit path of the enclosed block.

    A termination signal received inside the block raises Interrupted so
    the block unwinds like any error. Signals arriving once cleanup has
    started are deferred; if the block had completed normally, the first
    deferred signal is raised as Interrupted after cleanup.
    """
    guard = SignalGuard()
    with guard:
        try:
            yield manager
        finally:
            try:
                guard.defer()
            finally:
                manager.cleanup_all()

    if guard.received:
        raise Interrupted(guard.received[0])
