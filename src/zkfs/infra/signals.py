from __future__ import annotations

"""
Termination Signal Handling.

Turns asynchronous termination signals into a regular ``Interrupted``
exception raised in the main thread, so that ``finally`` blocks and context
managers run on signal-driven exits exactly as on error exits.

The guard raises at most once. After the first signal, or after defer() is
called, further signals are only recorded; this keeps a critical section
such as ephemeral cleanup from being cut short by a repeated Ctrl-C.
"""

import logging
import signal
import threading
from typing import Any, Dict, List, Optional, Tuple

from zkfs.domain.errors import Interrupted

logger = logging.getLogger(__name__)


def termination_signals() -> Tuple[int, ...]:
    """Signals treated as a request to terminate on this platform."""
    names = ("SIGINT", "SIGTERM", "SIGHUP")
    return tuple(getattr(signal, n) for n in names if hasattr(signal, n))


class SignalGuard:
    """
    Context manager installing the termination signal handlers.

    Previous handlers are restored on exit. Outside the main thread the
    guard installs nothing, since CPython only runs handlers there.

    Attributes:
        received: Signals recorded while deferring.
    """

    def __init__(self) -> None:
        self.received: List[int] = []
        self._deferring = False
        self._previous: Optional[Dict[int, Any]] = None

    def __enter__(self) -> SignalGuard:
        if threading.current_thread() is threading.main_thread():
            self._previous = {}
            for signum in termination_signals():
                self._previous[signum] = signal.signal(signum, self._handle)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._previous is None:
            return
        for signum, handler in self._previous.items():
            # None means the previous handler was not installed from Python
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
        self._previous = None

    @property
    def deferring(self) -> bool:
        return self._deferring

    def defer(self) -> None:
        """Record subsequent signals instead of raising."""
        self._deferring = True

    def _handle(self, signum: int, frame: Any) -> None:
        if self._deferring:
            logger.warning(f"Signal {signum} received, finishing cleanup first.")
            self.received.append(signum)
            return
        self._deferring = True
        raise Interrupted(signum)
