"""HTML tasks: page composition, template cache reset and the production
rewrites (bundle references, prettifying).

The composer holding parsed layouts and partials belongs to this module and is
only invalidated by `compile_html` (before each pass) and `reset_pages`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Tuple

from ..builders.livereload import CHANNEL
from ..builders.navigation import DEFAULT_NAV_LINKS, mark_active_links
from ..builders.prettify import prettify_html as prettify_markup
from ..builders.replace import replace_blocks
from ..builders.templates import PageComposer
from ..orchestrator import task
from ..orchestrator.core import expand_glob
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import (
    DEFAULT_UNFORMATTED,
    _get,
    bundle_replacements,
    dist_dir,
    src_dir,
)

log = get_logger("tasks.pages")

_composers: Dict[Tuple[str, ...], PageComposer] = {}
_composers_lock = threading.Lock()


def get_composer(params: Dict) -> PageComposer:
    """The composer for the configured source tree, created on first use."""
    src = Path(src_dir(params))
    layout = _get(params, "html", "default_layout", default="default")
    key = (str(src.resolve()), layout)
    with _composers_lock:
        composer = _composers.get(key)
        if composer is None:
            composer = PageComposer(
                pages_dir=src / "pages",
                layouts_dir=src / "layouts",
                partials_dir=src / "partials",
                data_dir=src / "data",
                default_layout=layout,
            )
            _composers[key] = composer
        return composer


def _dist_pages(params: Dict) -> List[Path]:
    return expand_glob(f"{dist_dir(params)}/**/*.html")


@task(
    name="compile_html",
    inputs=lambda p: [
        f"{src_dir(p)}/pages/**/*.html",
        f"{src_dir(p)}/layouts/**/*.html",
        f"{src_dir(p)}/partials/**/*.html",
        f"{src_dir(p)}/data/*",
    ],
    outputs=lambda p: [f"{dist_dir(p)}/**/*.html"],
)
def compile_html(params: Dict):
    """Compose every page with its layout and partials into the output tree."""
    banner(log, "compiling html")
    composer = get_composer(params)
    composer.refresh()
    selector = _get(params, "html", "nav_links", default=DEFAULT_NAV_LINKS)
    active_class = _get(params, "html", "active_class", default="active")
    dist = Path(dist_dir(params))
    written: List[Path] = []
    for source in expand_glob(f"{composer.pages_dir}/**/*.html"):
        relative = source.relative_to(composer.pages_dir)
        html = composer.compose(source)
        html = mark_active_links(html, relative.as_posix(), selector, active_class)
        target = dist / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        log.debug("Wrote %s", target)
        written.append(target)
    if written:
        CHANNEL.notify(written)
    log.info("Composed %d page(s)", len(written))


@task(name="reset_pages", inputs=[], outputs=[])
def reset_pages(params: Dict):
    """Drop cached layouts and partials."""
    banner(log, "clearing template cache")
    get_composer(params).refresh()


@task(
    name="rewrite_refs",
    inputs=lambda p: [f"{dist_dir(p)}/**/*.html"],
    outputs=lambda p: [f"{dist_dir(p)}/**/*.html"],
)
def rewrite_refs(params: Dict):
    """Point build blocks at the minified bundles."""
    banner(log, "renaming sources")
    dist = Path(dist_dir(params))
    replacements = bundle_replacements(params)
    keep = bool(_get(params, "html", "keep_unassigned", default=False))
    changed = 0
    for page in _dist_pages(params):
        prefix = "../" * (len(page.relative_to(dist).parts) - 1)
        html = page.read_text(encoding="utf-8")
        rewritten = replace_blocks(html, replacements, prefix=prefix, keep_unassigned=keep)
        if rewritten != html:
            page.write_text(rewritten, encoding="utf-8")
            changed += 1
    log.info("Rewrote bundle references in %d page(s)", changed)


@task(
    name="prettify_html",
    inputs=lambda p: [f"{dist_dir(p)}/**/*.html"],
    outputs=lambda p: [f"{dist_dir(p)}/**/*.html"],
)
def prettify_html(params: Dict):
    """Re-indent every generated page."""
    banner(log, "html prettify")
    indent_size = int(_get(params, "html", "prettify", "indent_size", default=4))
    indent_char = _get(params, "html", "prettify", "indent_char", default=" ")
    unformatted = _get(params, "html", "prettify", "unformatted", default=DEFAULT_UNFORMATTED)
    pages = _dist_pages(params)
    for page in pages:
        html = page.read_text(encoding="utf-8")
        page.write_text(
            prettify_markup(
                html,
                indent_size=indent_size,
                indent_char=indent_char,
                unformatted=unformatted,
            ),
            encoding="utf-8",
        )
    log.info("Prettified %d page(s)", len(pages))
