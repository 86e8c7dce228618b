"""Development server: build into a temporary directory, serve it, rebuild on change."""

import json
import os
import shutil
import tempfile
import threading
from collections.abc import Callable
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import structlog

from folio.common.constants import RELOAD_ENDPOINT, WATCH_POLL_INTERVAL_SECONDS
from folio.generator.site import SiteGenerator
from folio.server.rebuild import DebouncedRebuilder
from folio.utils.config import Config

logger = structlog.get_logger(__name__)


class BuildCounter:
    """Number of completed dev server rebuilds, read by reloading pages."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self, event_name: str = "") -> None:
        with self._lock:
            self._value += 1
        logger.info("reload_requested", trigger=event_name, build=self.value)


class PollingWatcher:
    """Watch a directory tree for changes by comparing modification times.

    Directories whose name is in the ignore list are skipped at any depth.
    The callback receives the path of one changed, added or removed file
    per scan.
    """

    def __init__(
        self,
        directory: Path,
        ignore: list[str],
        callback: Callable[[str], None],
        interval: float = WATCH_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.directory = directory
        self.ignore = set(ignore)
        self.callback = callback
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._snapshot: dict[str, float] = {}

    def scan(self) -> dict[str, float]:
        """Modification time of every watched file, keyed by path."""
        snapshot: dict[str, float] = {}
        for root, dirs, files in os.walk(self.directory):
            dirs[:] = [d for d in dirs if d not in self.ignore]
            for name in files:
                path = os.path.join(root, name)
                try:
                    snapshot[path] = os.stat(path).st_mtime
                except FileNotFoundError:
                    continue
        return snapshot

    def check(self) -> str | None:
        """Rescan and report one changed path, if any."""
        current = self.scan()
        previous = self._snapshot
        self._snapshot = current

        for path, mtime in current.items():
            if previous.get(path) != mtime:
                return path
        for path in previous:
            if path not in current:
                return path
        return None

    def start(self) -> None:
        self._snapshot = self.scan()
        self._thread = threading.Thread(target=self._run, name="folio-watcher", daemon=True)
        self._thread.start()
        logger.info("watcher_started", directory=str(self.directory), ignore=sorted(self.ignore))

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            changed = self.check()
            if changed is not None:
                logger.debug("change_detected", path=changed)
                self.callback(changed)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None


class DevRequestHandler(SimpleHTTPRequestHandler):
    """Static file handler that also answers the reload endpoint."""

    def __init__(self, *args: Any, counter: BuildCounter, **kwargs: Any) -> None:
        self.counter = counter
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:  # noqa: N802
        if self.path.split("?", 1)[0] == RELOAD_ENDPOINT:
            body = json.dumps({"build": self.counter.value}).encode("utf-8")
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Cache-Control", "no-store")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
            return
        super().do_GET()

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("http_request", client=self.address_string(), message=format % args)


class DevServer:
    """Serve a site from a temporary directory and rebuild it on change.

    Example:
        >>> server = DevServer(Config("my-site"), include_drafts=True)
        >>> server.start()
        >>> ...
        >>> server.stop()
    """

    def __init__(
        self,
        config: Config,
        include_drafts: bool = False,
        port: int | None = None,
    ) -> None:
        """Initialize dev server.

        Args:
            config: Site configuration; switched to dev mode here
            include_drafts: Render draft pages
            port: HTTP port override
        """
        self.serve_dir = Path(tempfile.mkdtemp(prefix="folio-"))
        self.config = config.for_dev_server(self.serve_dir, port)
        self.config.include_drafts = include_drafts

        self.generator = SiteGenerator(self.config)
        self.counter = BuildCounter()
        self.rebuilder = DebouncedRebuilder(self.generator.build, self.counter.increment)
        self.watcher = PollingWatcher(
            self.config.site_dir,
            self.config.server.ignore_list(self.config.output_dir),
            self.rebuilder.trigger,
        )
        self.httpd: ThreadingHTTPServer | None = None
        self._http_thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        return self.config.base_url

    def start(self) -> None:
        """Run the initial build, then start serving and watching."""
        self.rebuilder.rebuild()
        logger.info("initial_build_done", serve_dir=str(self.serve_dir))

        handler = partial(DevRequestHandler, directory=str(self.serve_dir), counter=self.counter)
        self.httpd = ThreadingHTTPServer(("", self.config.server.port), handler)
        self._http_thread = threading.Thread(
            target=self.httpd.serve_forever, name="folio-http", daemon=True
        )
        self._http_thread.start()
        self.rebuilder.mark_serving()
        self.watcher.start()

        logger.info("server_started", url=self.url, serve_dir=str(self.serve_dir))

    def serve_forever(self) -> None:
        """Start and block until interrupted."""
        self.start()
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            logger.info("server_interrupted")
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop watching and serving, then remove the temporary directory."""
        logger.info("server_stopping")
        self.watcher.stop()
        self.rebuilder.stop()
        if self.httpd is not None:
            self.httpd.shutdown()
            self.httpd.server_close()
            self.httpd = None
        if self._http_thread is not None:
            self._http_thread.join()
            self._http_thread = None
        shutil.rmtree(self.serve_dir, ignore_errors=True)
        logger.info("server_stopped")
