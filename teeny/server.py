from __future__ import annotations

import functools
import http.server
import sys
import threading
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlsplit

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import SiteError

NOT_FOUND_BODY = b"<h1>404: Page not found</h1>"
REBUILD_EVENTS = {"created", "modified", "deleted", "moved"}
DEBOUNCE_SECONDS = 0.3


def resolve_request_path(root: Path, url: str) -> Path | None:
    path = unquote(urlsplit(url).path) or "/"
    if path.endswith("/"):
        path += "index.html"
    elif "." not in path.rsplit("/", 1)[-1]:
        path += ".html"
    root = root.resolve()
    candidate = (root / path.lstrip("/")).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


class PageRequestHandler(http.server.SimpleHTTPRequestHandler):
    def do_GET(self) -> None:
        path = resolve_request_path(Path(self.directory), self.path)
        if path is None:
            self.send_response(404)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(NOT_FOUND_BODY)))
            self.end_headers()
            self.wfile.write(NOT_FOUND_BODY)
            return
        data = path.read_bytes()
        self.send_response(200)
        self.send_header("Content-Type", self.guess_type(str(path)))
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)


def make_server(output_dir: Path, port: int) -> http.server.ThreadingHTTPServer:
    handler = functools.partial(PageRequestHandler, directory=str(output_dir))
    return http.server.ThreadingHTTPServer(("localhost", port), handler)


class RebuildTrigger(FileSystemEventHandler):
    """Coalesce bursts of file-system events into one rebuild signal."""

    def __init__(self, changed: threading.Event, delay: float = DEBOUNCE_SECONDS):
        super().__init__()
        self.changed = changed
        self.delay = delay
        self.last_path = ""
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in REBUILD_EVENTS:
            return
        if event.is_directory and event.event_type == "modified":
            return
        with self._lock:
            self.last_path = str(event.src_path)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.changed.set)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


def develop(args: object, build: Callable[[object], int]) -> None:
    """Build, serve and rebuild on every change until interrupted.

    Builds run one at a time on this thread; a change during a build
    triggers one more build once it finishes.
    """
    port = int(args.port)
    output_dir = Path(args.output)
    changed = threading.Event()
    trigger = RebuildTrigger(changed)
    observer = Observer()
    for name in (args.pages, args.static, args.templates):
        directory = Path(name)
        if directory.is_dir():
            observer.schedule(trigger, str(directory), recursive=True)
    observer.start()
    try:
        while True:
            changed.clear()
            try:
                build(args)
            except SiteError as exc:
                print(f"Build failed: {exc}", file=sys.stderr)
            output_dir.mkdir(parents=True, exist_ok=True)
            server = make_server(output_dir, port)
            thread = threading.Thread(target=server.serve_forever, daemon=True)
            thread.start()
            print(f"Development server starting on http://localhost:{port}")
            try:
                while not changed.wait(0.5):
                    pass
            finally:
                server.shutdown()
                server.server_close()
                thread.join()
            print(f"Detected change in file {trigger.last_path}. Restarting development server.")
    except KeyboardInterrupt:
        print("Shutting down development server.")
    finally:
        trigger.cancel()
        observer.stop()
        observer.join()
