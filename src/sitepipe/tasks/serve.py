"""Preview server and file watching.

`browser_sync` starts the live-reload server in the background and returns;
`watch_files` then blocks, re-running the matching compile task on every
change until the process is interrupted. `serve` is the production preview:
the finished tree, no watcher and no reload script.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional

from ..builders.livereload import CHANNEL, LiveReloadServer
from ..orchestrator import task
from ..orchestrator.core import TaskSpec, resolve_paths
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import _get, dist_dir, serve_host, serve_port
from ..orchestrator.watch import WatchRule, Watcher
from .assets import copy_images
from .pages import compile_html
from .scripts import compile_js
from .styles import compile_scss

log = get_logger("tasks.serve")

# One rebuild task per watched source group
WATCHED = [compile_html, compile_scss, compile_js, copy_images]

_server: Optional[LiveReloadServer] = None
STOP = threading.Event()


def watch_rules(params: Dict) -> List[WatchRule]:
    """A rule per rebuild task, watching that task's own inputs."""
    rules: List[WatchRule] = []
    for fn in WATCHED:
        spec: TaskSpec = fn._task_spec
        rules.append(
            WatchRule(
                name=spec.name,
                patterns=resolve_paths(spec.inputs, params),
                callback=lambda fn=fn: fn(params=params),
            )
        )
    return rules


def stop_server() -> None:
    global _server
    STOP.set()
    if _server is not None:
        _server.shutdown()
        _server = None


@task(name="browser_sync", inputs=[], outputs=[])
def browser_sync(params: Dict):
    """Serve dist with live reload in the background."""
    global _server
    banner(log, "browser sync")
    if _server is not None:
        return
    STOP.clear()
    _server = LiveReloadServer(
        Path(dist_dir(params)), serve_host(params), serve_port(params), channel=CHANNEL
    )
    _server.start()


@task(name="watch_files", inputs=[], outputs=[])
def watch_files(params: Dict):
    """Rebuild on source changes until interrupted."""
    interval = float(_get(params, "serve", "poll_interval", default=0.5))
    Watcher(watch_rules(params), interval=interval).run(STOP)


@task(name="serve", inputs=[], outputs=[])
def serve(params: Dict):
    """Serve the production build for a local preview (blocking)."""
    global _server
    banner(log, "browser sync")
    _server = LiveReloadServer(
        Path(dist_dir(params)), serve_host(params), serve_port(params), channel=None
    )
    _server.serve_forever()
