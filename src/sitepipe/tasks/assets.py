"""Copy tasks: fonts, vendor files, optimised images, and the docs copy."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List

from ..builders.images import IMAGE_SUFFIXES, copy_image
from ..builders.livereload import CHANNEL
from ..orchestrator import task
from ..orchestrator.cache import is_newer
from ..orchestrator.core import expand_glob
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import (
    _get,
    dist_dir,
    dist_path,
    docs_dir,
    fonts_dir,
    images_dir,
    vendor_dir,
)

log = get_logger("tasks.assets")


def copy_tree(pattern: str, base: Path, dest: Path) -> List[Path]:
    """Copy files matching `pattern` under `base` to the same relative path in `dest`."""
    written: List[Path] = []
    for path in expand_glob(pattern):
        target = dest / path.relative_to(base)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        log.debug("Copied %s -> %s", path, target)
        written.append(target)
    return written


@task(
    name="copy_fonts",
    inputs=lambda p: [f"{fonts_dir(p)}/*"],
    outputs=lambda p: [f"{dist_dir(p)}/assets/fonts/*"],
)
def copy_fonts(params: Dict):
    """Copy font files into dist."""
    banner(log, "copying fonts into dist folder")
    written = copy_tree(
        f"{fonts_dir(params)}/*", Path(fonts_dir(params)), dist_path(params, "assets", "fonts")
    )
    log.info("Copied %d font file(s)", len(written))


@task(
    name="copy_vendor_js",
    inputs=lambda p: [f"{vendor_dir(p, 'js')}/*"],
    outputs=lambda p: [f"{dist_dir(p)}/assets/vendor/js/*"],
)
def copy_vendor_js(params: Dict):
    """Copy vendor scripts into dist."""
    banner(log, "copy javascript vendor files into dist")
    written = copy_tree(
        f"{vendor_dir(params, 'js')}/*",
        Path(vendor_dir(params, "js")),
        dist_path(params, "assets", "vendor", "js"),
    )
    log.info("Copied %d vendor script(s)", len(written))


@task(
    name="copy_vendor_css",
    inputs=lambda p: [f"{vendor_dir(p, 'css')}/*"],
    outputs=lambda p: [f"{dist_dir(p)}/assets/vendor/css/*"],
)
def copy_vendor_css(params: Dict):
    """Copy vendor stylesheets into dist."""
    banner(log, "copy css vendor files into dist")
    written = copy_tree(
        f"{vendor_dir(params, 'css')}/*",
        Path(vendor_dir(params, "css")),
        dist_path(params, "assets", "vendor", "css"),
    )
    log.info("Copied %d vendor stylesheet(s)", len(written))


@task(
    name="copy_images",
    inputs=lambda p: [f"{images_dir(p)}/**/*"],
    outputs=lambda p: [f"{dist_dir(p)}/assets/images/**/*"],
)
def copy_images(params: Dict):
    """Optimise new or changed images into dist."""
    banner(log, "optimizing images")
    base = Path(images_dir(params))
    dest = dist_path(params, "assets", "images")
    optimize = bool(_get(params, "images", "optimize", default=True))
    quality = int(_get(params, "images", "jpeg_quality", default=85))
    written: List[Path] = []
    skipped = 0
    for path in expand_glob(f"{base}/**/*"):
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        target = dest / path.relative_to(base)
        if not is_newer(path, target):
            skipped += 1
            continue
        error = copy_image(path, target, optimize=optimize, jpeg_quality=quality)
        if error:
            log.warning("Copied %s unoptimised (%s)", path, error)
        written.append(target)
    if written:
        CHANNEL.notify(written)
    log.info("Wrote %d image(s), %d up to date", len(written), skipped)


@task(
    name="generate_docs",
    inputs=lambda p: [f"{dist_dir(p)}/**/*"],
    outputs=lambda p: [f"{docs_dir(p)}/**/*"],
)
def generate_docs(params: Dict):
    """Copy the finished output tree into the docs folder for publishing."""
    banner(log, "creating docs")
    dist = Path(dist_dir(params))
    if not dist.is_dir():
        log.warning("Nothing to publish, %s does not exist", dist)
        return
    shutil.copytree(dist, docs_dir(params), dirs_exist_ok=True)
    log.info("Copied %s into %s", dist, docs_dir(params))
