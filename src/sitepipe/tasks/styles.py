"""Stylesheet tasks: Sass compilation for dev and prod, CSS bundle for prod.

`compile_scss` compiles each configured entry (``main.scss`` and optionally an
RTL variant) with libsass, vendor-prefixes the result and writes
``<name>.css`` plus ``<name>.css.map`` to ``dist/assets/css``. A Sass error is
logged and leaves that entry unwritten; the watcher keeps running.

`minify_css` concatenates vendor stylesheets with the compiled bundle entry and
compresses them into ``main.min.css``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import csscompressor
import sass

from ..builders.livereload import CHANNEL
from ..builders.prefixer import Autoprefixer
from ..orchestrator import task
from ..orchestrator.core import expand_glob
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import (
    CSS_BUNDLE,
    _get,
    css_out_dir,
    include_paths,
    scss_dir,
    style_entries,
    vendor_dir,
)

log = get_logger("tasks.styles")


def _css_name(entry: str) -> str:
    return Path(entry).with_suffix(".css").name


@task(
    name="compile_scss",
    inputs=lambda p: [f"{scss_dir(p)}/**/*.scss"],
    outputs=lambda p: [f"{css_out_dir(p)}/{_css_name(e)}" for e in style_entries(p)]
    + [f"{css_out_dir(p)}/{_css_name(e)}.map" for e in style_entries(p)],
)
def compile_scss(params: Dict):
    """Compile Sass entries to expanded, prefixed CSS with source maps."""
    banner(log, "compiling scss")
    out_dir = Path(css_out_dir(params))
    out_dir.mkdir(parents=True, exist_ok=True)
    prefixer = Autoprefixer(_get(params, "styles", "prefixes", default=None))
    written: List[Path] = []
    for entry in style_entries(params):
        source = Path(scss_dir(params)) / entry
        if not source.is_file():
            log.warning("Stylesheet entry not found: %s", source)
            continue
        css_path = out_dir / _css_name(entry)
        map_path = css_path.with_name(css_path.name + ".map")
        try:
            css, source_map = sass.compile(
                filename=str(source),
                output_style=_get(params, "styles", "output_style", default="expanded"),
                source_comments=bool(_get(params, "styles", "source_comments", default=False)),
                include_paths=include_paths(params),
                source_map_filename=str(map_path),
                output_filename_hint=str(css_path),
                source_map_contents=True,
            )
        except sass.CompileError as exc:
            log.error("Sass compile failed for %s:\n%s", source, exc)
            continue
        css_path.write_text(prefixer.process(css), encoding="utf-8")
        map_path.write_text(source_map, encoding="utf-8")
        log.debug("Wrote %s", css_path)
        written.extend([css_path, map_path])
    if written:
        CHANNEL.notify(written)
    log.info("Compiled %d stylesheet(s)", len(written) // 2)


@task(
    name="minify_css",
    inputs=lambda p: [
        f"{vendor_dir(p, 'css')}/**/*.css",
        f"{css_out_dir(p)}/{_get(p, 'styles', 'bundle_entry', default='main.css')}",
    ],
    outputs=lambda p: [f"{css_out_dir(p)}/{CSS_BUNDLE}"],
)
def minify_css(params: Dict):
    """Bundle vendor CSS and the compiled stylesheet into main.min.css."""
    banner(log, "minify css")
    out_dir = Path(css_out_dir(params))
    sources = expand_glob(f"{vendor_dir(params, 'css')}/**/*.css")
    entry = out_dir / _get(params, "styles", "bundle_entry", default="main.css")
    if entry.is_file():
        sources.append(entry)
    else:
        log.warning("Compiled stylesheet missing, bundling vendor CSS only: %s", entry)
    bundle = "\n".join(p.read_text(encoding="utf-8") for p in sources)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / CSS_BUNDLE
    target.write_text(csscompressor.compress(bundle), encoding="utf-8")
    log.info("Wrote %s from %d file(s)", target, len(sources))
