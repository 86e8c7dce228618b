"""Debounced rebuilds for the dev server."""

import threading
from collections.abc import Callable
from typing import Any

import structlog

from folio.common.constants import REBUILD_DEBOUNCE_SECONDS
from folio.utils.exceptions import FolioError

logger = structlog.get_logger(__name__)


class DebouncedRebuilder:
    """Coalesce bursts of file change events into a single rebuild.

    Each :meth:`trigger` restarts a short timer; the build runs once the
    timer expires without another event. After a successful rebuild the
    reload notifier is called with the name of the change, but only once
    :meth:`mark_serving` has been called, so the initial build never
    notifies.
    """

    def __init__(
        self,
        build: Callable[[], Any],
        notify: Callable[[str], None],
        delay: float = REBUILD_DEBOUNCE_SECONDS,
    ) -> None:
        """Initialize rebuilder.

        Args:
            build: Runs one site build
            notify: Called with the change name after a rebuild while serving
            delay: Quiet period in seconds before a rebuild starts
        """
        self.build = build
        self.notify = notify
        self.delay = delay
        self._lock = threading.Lock()
        # Held for the whole duration of a build
        self._build_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._serving = False
        self._stopped = False

    @property
    def serving(self) -> bool:
        with self._lock:
            return self._serving

    def mark_serving(self) -> None:
        """Allow reload notifications from now on."""
        with self._lock:
            self._serving = True

    def trigger(self, event_name: str) -> None:
        """Schedule a rebuild for a change, replacing any pending one."""
        with self._lock:
            if self._stopped:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.rebuild, args=(event_name,))
            self._timer.daemon = True
            self._timer.start()

    def rebuild(self, event_name: str = "") -> bool:
        """Build now and notify if serving.

        Build failures are logged and do not stop the dev server. Builds never
        overlap, and no build starts after :meth:`stop`.

        Args:
            event_name: Name of the change that caused the rebuild ("" for none)

        Returns:
            True if the build succeeded
        """
        with self._build_lock:
            with self._lock:
                if self._stopped:
                    return False

            logger.info("rebuild_started", trigger=event_name or None)
            try:
                self.build()
            except FolioError as e:
                logger.error("rebuild_failed", error=str(e), error_type=type(e).__name__)
                return False

        with self._lock:
            should_notify = self._serving and not self._stopped and bool(event_name)

        if should_notify:
            self.notify(event_name)
        return True

    def stop(self) -> None:
        """Cancel any pending rebuild and wait for a running one to finish.

        Once this returns, nothing writes to the output directory anymore.
        """
        with self._lock:
            self._stopped = True
            self._serving = False
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

        # A timer that already fired either holds the build lock or will see
        # the stopped flag once it gets it
        with self._build_lock:
            logger.debug("rebuilder_stopped")
