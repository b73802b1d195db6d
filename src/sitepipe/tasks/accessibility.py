"""Accessibility scan of the generated pages, one text report per page."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from ..builders.a11y import ERROR, check_document, format_report, report_name
from ..orchestrator import task
from ..orchestrator.core import expand_glob
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import dist_dir, reports_dir

log = get_logger("tasks.accessibility")


@task(
    name="accessibility",
    inputs=lambda p: [f"{dist_dir(p)}/**/*.html"],
    outputs=lambda p: [f"{reports_dir(p)}/**/*.txt"],
)
def accessibility(params: Dict):
    """Write a WCAG2A report for every generated page."""
    banner(log, "accessibility check")
    dist = Path(dist_dir(params))
    reports = Path(reports_dir(params))
    pages = expand_glob(f"{dist}/**/*.html")
    if not pages:
        log.warning("No HTML in %s; build the site first", dist)
    written = 0
    for page in pages:
        relative = page.relative_to(dist)
        try:
            issues = check_document(page.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            log.error("Could not scan %s: %s", page, exc)
            continue
        errors = [i for i in issues if i.type == ERROR]
        for issue in errors:
            log.error("%s [%d]: (%s) %s", relative, issue.line, issue.code, issue.message)
        target = reports / report_name(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(format_report(relative.as_posix(), issues), encoding="utf-8")
        written += 1
    log.info("Wrote %d report(s) to %s", written, reports)
