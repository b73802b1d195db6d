"""Lint tasks.

Findings are logged and turned into a non-zero return status; nothing is
raised, so all three linters report in one `linters` run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

from ..builders.findings import Finding
from ..builders.htmllint import HtmlLinter
from ..builders.jslint import JsLinter
from ..builders.scsslint import ScssLinter
from ..orchestrator import task
from ..orchestrator.core import expand_glob
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import dist_dir, js_dir, lint_config, scss_dir

log = get_logger("tasks.lint")


def _report(kind: str, findings: Iterable[Finding], jshint_style: bool = False) -> int:
    findings = list(findings)
    for f in findings:
        if jshint_style:
            log.warning("%s: line %d, col %d, %s (%s)", f.path, f.line, f.column, f.message, f.code)
        else:
            log.warning("%s [%d]: (%s) %s", f.path, f.line, f.code, f.message)
    if not findings:
        banner(log, f"no {kind} lint error")
        return 0
    log.warning("%d %s lint problem(s)", len(findings), kind)
    return 1


def _lint_all(linter, files: List[Path]) -> List[Finding]:
    found: List[Finding] = []
    for path in files:
        found.extend(linter.lint_file(path))
    return found


@task(
    name="lint_html",
    inputs=lambda p: [f"{dist_dir(p)}/**/*.html", lint_config(p, "html")],
    outputs=[],
)
def lint_html(params: Dict) -> int:
    """Check generated pages against the HTML rules."""
    banner(log, "html linting")
    files = expand_glob(f"{dist_dir(params)}/**/*.html")
    if not files:
        log.warning("No HTML in %s; build the site first", dist_dir(params))
    linter = HtmlLinter.from_file(Path(lint_config(params, "html")))
    return _report("html", _lint_all(linter, files))


@task(
    name="lint_scss",
    inputs=lambda p: [f"{scss_dir(p)}/**/*.scss", lint_config(p, "scss")],
    outputs=[],
)
def lint_scss(params: Dict) -> int:
    """Check stylesheet sources against the Sass rules."""
    banner(log, "sass linting")
    linter = ScssLinter.from_file(Path(lint_config(params, "scss")))
    files = expand_glob(f"{scss_dir(params)}/**/*.scss")
    return _report("scss", _lint_all(linter, files))


@task(
    name="lint_js",
    inputs=lambda p: [f"{js_dir(p)}/*.js", lint_config(p, "js")],
    outputs=[],
)
def lint_js(params: Dict) -> int:
    """Check application scripts against the jshint options."""
    banner(log, "js linting")
    linter = JsLinter.from_file(Path(lint_config(params, "js")))
    files = expand_glob(f"{js_dir(params)}/*.js")
    return _report("js", _lint_all(linter, files), jshint_style=True)
