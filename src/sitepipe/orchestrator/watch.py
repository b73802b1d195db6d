from __future__ import annotations

"""Polling file watcher used by the dev pipeline."""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .cache import safe_mtime
from .core import expand_globs
from .logging import get_logger


Snapshot = Dict[Path, Optional[float]]


@dataclass
class WatchRule:
    name: str
    patterns: List[str]
    callback: Callable[[], object]
    snapshot: Snapshot = field(default_factory=dict)

    def scan(self) -> Snapshot:
        return {p: safe_mtime(p) for p in expand_globs(self.patterns)}


class Watcher:
    """Re-runs a callback whenever a file matched by its rule changes.

    Each poll dispatches at most one callback per rule. Rapid edits are not
    debounced; a failing callback is logged and watching continues.
    """

    def __init__(self, rules: List[WatchRule], interval: float = 0.5):
        self.rules = rules
        self.interval = interval
        self.logger = get_logger("orchestrator.watch")
        for rule in self.rules:
            rule.snapshot = rule.scan()

    def poll_once(self) -> List[str]:
        fired: List[str] = []
        for rule in self.rules:
            current = rule.scan()
            if current == rule.snapshot:
                continue
            changed = sorted(
                str(p)
                for p in set(current) | set(rule.snapshot)
                if current.get(p) != rule.snapshot.get(p)
            )
            rule.snapshot = current
            self.logger.info("Changed (%s): %s", rule.name, ", ".join(changed))
            fired.append(rule.name)
            try:
                rule.callback()
            except Exception:  # noqa: BLE001
                self.logger.exception("Rebuild failed for %s", rule.name)
        return fired

    def run(self, stop: threading.Event | None = None) -> None:
        stop = stop or threading.Event()
        self.logger.info(
            "Watching %d rule(s): %s", len(self.rules), ", ".join(r.name for r in self.rules)
        )
        while not stop.wait(self.interval):
            self.poll_once()
