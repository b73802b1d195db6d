from __future__ import annotations

"""Development server for the output tree with browser live reload.

Compile tasks call ``CHANNEL.notify(paths)`` after writing files. Browsers
long-poll ``/__livereload?since=<version>``; a change made only of
stylesheets swaps the ``<link>`` hrefs in place, anything else reloads the
page. Notifying with nobody listening is a no-op.
"""

import re
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from flask import Flask, Response, abort, jsonify, request, send_from_directory
from werkzeug.security import safe_join
from werkzeug.serving import make_server

from ..orchestrator.logging import get_logger

log = get_logger("livereload")

ENDPOINT = "/__livereload"
HISTORY = 64

CLIENT_SCRIPT = """<script>
(function () {
  var since = -1;
  function swapStyles() {
    var links = document.querySelectorAll('link[rel="stylesheet"]');
    for (var i = 0; i < links.length; i++) {
      var href = links[i].getAttribute('href').replace(/[?&]livereload=\\d+/, '');
      links[i].setAttribute('href', href + (href.indexOf('?') < 0 ? '?' : '&') + 'livereload=' + Date.now());
    }
  }
  function poll() {
    fetch('%(endpoint)s?since=' + since, {cache: 'no-store'})
      .then(function (r) { return r.json(); })
      .then(function (msg) {
        if (since >= 0 && msg.version !== since) {
          if (msg.css_only) { swapStyles(); } else { window.location.reload(); return; }
        }
        since = msg.version;
        poll();
      })
      .catch(function () { setTimeout(poll, 1000); });
  }
  poll();
})();
</script>
""" % {"endpoint": ENDPOINT}

_BODY_END_RE = re.compile(r"</body\s*>", re.IGNORECASE)


class ReloadChannel:
    """Monotonic change counter that HTTP handlers can block on."""

    def __init__(self):
        self.version = 0
        self._history: List[Tuple[int, List[str]]] = []
        self._cond = threading.Condition()

    def notify(self, paths: Iterable[str | Path]) -> int:
        changed = [Path(p).as_posix() for p in paths]
        with self._cond:
            self.version += 1
            self._history.append((self.version, changed))
            del self._history[:-HISTORY]
            self._cond.notify_all()
            return self.version

    def changes_since(self, since: int) -> List[str]:
        with self._cond:
            out: List[str] = []
            for version, paths in self._history:
                if version > since:
                    out.extend(paths)
            return out

    def wait(self, since: int, timeout: float = 25.0) -> Tuple[int, List[str]]:
        """Block until the version moves past `since` or `timeout` elapses."""
        with self._cond:
            self._cond.wait_for(lambda: self.version != since, timeout=timeout)
            version = self.version
        return version, self.changes_since(since) if version != since else []


CHANNEL = ReloadChannel()


def inject_client(html: str) -> str:
    matches = list(_BODY_END_RE.finditer(html))
    if not matches:
        return html + CLIENT_SCRIPT
    pos = matches[-1].start()
    return html[:pos] + CLIENT_SCRIPT + html[pos:]


def create_app(
    root: str | Path,
    channel: Optional[ReloadChannel] = CHANNEL,
    poll_timeout: float = 25.0,
) -> Flask:
    """Flask app serving `root`; live reload is off when `channel` is None."""
    root = Path(root).resolve()
    app = Flask(__name__, static_folder=None)

    if channel is not None:

        @app.route(ENDPOINT)
        def livereload():
            since = request.args.get("since", -1, type=int)
            if since < 0:
                return jsonify({"version": channel.version, "paths": [], "css_only": False})
            version, paths = channel.wait(since, poll_timeout)
            css_only = bool(paths) and all(p.endswith((".css", ".css.map")) for p in paths)
            return jsonify({"version": version, "paths": paths, "css_only": css_only})

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def site(path):
        target = safe_join(str(root), path) if path else str(root)
        if target is None:
            abort(404)
        target = Path(target)
        if target.is_dir():
            target = target / "index.html"
            path = f"{path.rstrip('/')}/index.html" if path else "index.html"
        if not target.is_file():
            abort(404)
        if channel is not None and target.suffix == ".html":
            html = target.read_text(encoding="utf-8")
            return Response(inject_client(html), mimetype="text/html")
        return send_from_directory(str(root), path, max_age=0)

    return app


class LiveReloadServer:
    def __init__(
        self,
        root: str | Path,
        host: str = "127.0.0.1",
        port: int = 3000,
        channel: Optional[ReloadChannel] = CHANNEL,
    ):
        self.app = create_app(root, channel)
        self.server = make_server(host, port, self.app, threaded=True)
        self.thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.server.host}:{self.server.port}/"

    def start(self) -> None:
        """Serve in a daemon thread and return immediately."""
        self.thread = threading.Thread(
            target=self.server.serve_forever, name="livereload", daemon=True
        )
        self.thread.start()
        log.info("Serving %s", self.url)

    def serve_forever(self) -> None:
        log.info("Serving %s (Ctrl-C to stop)", self.url)
        self.server.serve_forever()

    def shutdown(self) -> None:
        self.server.shutdown()
        self.server.server_close()
        if self.thread is not None:
            self.thread.join(timeout=5)
            self.thread = None
