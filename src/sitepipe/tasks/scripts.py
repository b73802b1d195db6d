"""Script tasks.

Development: `compile_js` transpiles the application entry with Babel.
Production: `concat_scripts` joins vendor scripts (fixed order, library core
before plugins) and application scripts into ``main.js`` with a source map,
then `minify_js` strips development-only code and console calls and
compresses the result into ``main.min.js``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

import dukpy
import rjsmin

from ..builders.babel import transpile
from ..builders.livereload import CHANNEL
from ..builders.sourcemap import ConcatSourceMap
from ..builders.strip import drop_console, remove_code
from ..orchestrator import task
from ..orchestrator.core import expand_glob
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import (
    JS_BUNDLE,
    _get,
    js_dir,
    js_entry,
    js_out_dir,
    vendor_dir,
    vendor_order,
)

log = get_logger("tasks.scripts")

CONCAT_NAME = "main.js"


@task(
    name="compile_js",
    inputs=lambda p: [f"{js_dir(p)}/*.js"],
    outputs=lambda p: [f"{js_out_dir(p)}/{js_entry(p)}"],
)
def compile_js(params: Dict):
    """Transpile the application script for older browsers."""
    banner(log, f"compile {js_entry(params)}")
    source = Path(js_dir(params)) / js_entry(params)
    if not source.is_file():
        log.warning("Script entry not found: %s", source)
        return
    presets = _get(params, "scripts", "babel_presets", default=["es2015"])
    try:
        code = transpile(source.read_text(encoding="utf-8"), presets, filename=source.name)
    except dukpy.JSRuntimeError as exc:
        log.error("Babel failed for %s: %s", source, exc)
        return
    target = Path(js_out_dir(params)) / source.name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(code, encoding="utf-8")
    CHANNEL.notify([target])
    log.info("Wrote %s", target)


def script_sources(params: Dict) -> List[Path]:
    """Vendor scripts in declared order followed by the application scripts."""
    vendor = Path(vendor_dir(params, "js"))
    sources: List[Path] = []
    for name in vendor_order(params):
        path = vendor / name
        if path.is_file():
            sources.append(path)
        else:
            log.warning("Vendor script missing, skipped: %s", path)
    for path in expand_glob(f"{js_dir(params)}/*.js"):
        if path not in sources:
            sources.append(path)
    return sources


@task(
    name="concat_scripts",
    inputs=lambda p: [f"{vendor_dir(p, 'js')}/*.js", f"{js_dir(p)}/*.js"],
    outputs=lambda p: [
        f"{js_out_dir(p)}/{CONCAT_NAME}",
        f"{js_out_dir(p)}/{CONCAT_NAME}.map",
    ],
)
def concat_scripts(params: Dict):
    """Concatenate vendor and application scripts into main.js."""
    banner(log, "concatenate scripts")
    out_dir = Path(js_out_dir(params))
    out_dir.mkdir(parents=True, exist_ok=True)
    smap = ConcatSourceMap(file=CONCAT_NAME)
    sources = script_sources(params)
    for path in sources:
        relative = Path(os.path.relpath(path, out_dir)).as_posix()
        smap.add(relative, path.read_text(encoding="utf-8"))
    code = smap.code
    if code and not code.endswith("\n"):
        code += "\n"
    target = out_dir / CONCAT_NAME
    target.write_text(code + f"//# sourceMappingURL={CONCAT_NAME}.map\n", encoding="utf-8")
    (out_dir / f"{CONCAT_NAME}.map").write_text(smap.to_json(), encoding="utf-8")
    log.info("Concatenated %d script(s) into %s", len(sources), target)


@task(
    name="minify_js",
    inputs=lambda p: [f"{js_out_dir(p)}/{CONCAT_NAME}"],
    outputs=lambda p: [f"{js_out_dir(p)}/{JS_BUNDLE}"],
)
def minify_js(params: Dict):
    """Strip development code and console calls, then minify main.js."""
    banner(log, "minify scripts")
    source = Path(js_out_dir(params)) / CONCAT_NAME
    if not source.is_file():
        log.error("Nothing to minify, %s does not exist", source)
        return
    conditions = _get(params, "scripts", "remove_code", default={"production": True})
    try:
        text = remove_code(source.read_text(encoding="utf-8"), conditions)
        if _get(params, "scripts", "drop_console", default=True):
            text = drop_console(text)
        minified = rjsmin.jsmin(text)
    except (ValueError, UnicodeDecodeError) as exc:
        log.error("Minification failed for %s: %s", source, exc)
        return
    target = source.with_name(JS_BUNDLE)
    target.write_text(minified + "\n", encoding="utf-8")
    log.info("Wrote %s (%d -> %d bytes)", target, source.stat().st_size, len(minified))
