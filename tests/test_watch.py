import os
import time
from pathlib import Path

from sitepipe.orchestrator.watch import WatchRule, Watcher
from sitepipe.tasks.serve import watch_rules

from conftest import write


def _bump(path: Path) -> None:
    stamp = time.time() + 10
    os.utime(path, (stamp, stamp))


def test_scss_partial_change_fires_only_stylesheet_rule(site: Path, params: dict):
    rules = watch_rules(params)
    assert [r.name for r in rules] == ["compile_html", "compile_scss", "compile_js", "copy_images"]
    fired = []
    for rule in rules:
        rule.callback = lambda name=rule.name: fired.append(name)
    watcher = Watcher(rules, interval=0.01)
    assert watcher.poll_once() == []
    _bump(site / "src" / "assets" / "scss" / "_navbar.scss")
    assert watcher.poll_once() == ["compile_scss"]
    assert fired == ["compile_scss"]
    assert watcher.poll_once() == []


def test_new_and_deleted_files_fire(tmp_path: Path):
    calls = []
    rule = WatchRule("pages", [f"{tmp_path}/**/*.html"], lambda: calls.append(1))
    watcher = Watcher([rule])
    page = write(tmp_path / "a.html", "<p>a</p>")
    assert watcher.poll_once() == ["pages"]
    page.unlink()
    assert watcher.poll_once() == ["pages"]
    assert len(calls) == 2


def test_failing_callback_keeps_watching(tmp_path: Path):
    def boom():
        raise RuntimeError("compile failed")

    target = write(tmp_path / "x.js", "1")
    watcher = Watcher([WatchRule("js", [str(tmp_path / "*.js")], boom)])
    _bump(target)
    assert watcher.poll_once() == ["js"]
    assert watcher.poll_once() == []
