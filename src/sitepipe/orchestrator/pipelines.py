from __future__ import annotations

"""The top-level pipelines as stage lists.

A stage is a task name or a list of names that may run concurrently; every
task of a stage waits for the whole previous stage.
"""

from typing import Dict, List, Optional, Sequence

from .core import Pipeline, Stage, TaskSpec
from .utils import _get

LINTERS: List[Stage] = ["lint_html", "lint_scss", "lint_js"]

ACCESSIBILITY: List[Stage] = ["accessibility"]

DEV: List[Stage] = [
    "clean_dist",
    ["copy_fonts", "copy_vendor_js", "copy_vendor_css", "copy_images"],
    "compile_html",
    "compile_js",
    "reset_pages",
    "prettify_html",
    "compile_scss",
    "browser_sync",
    "watch_files",
]

PROD: List[Stage] = [
    "clean_dist",
    "compile_scss",
    ["copy_fonts", "copy_images"],
    "compile_html",
    "concat_scripts",
    "minify_js",
    "minify_css",
    "rewrite_refs",
    "prettify_html",
    "generate_docs",
    "serve",
]

PIPELINES: Dict[str, List[Stage]] = {
    "linters": LINTERS,
    "accessibility": ACCESSIBILITY,
    "dev": DEV,
    "prod": PROD,
}

# Steps that block until interrupted
SERVE_STEPS = {"browser_sync", "watch_files", "serve"}
DOCS_STEPS = {"generate_docs"}


def _without(stages: Sequence[Stage], names: set) -> List[Stage]:
    out: List[Stage] = []
    for stage in stages:
        if isinstance(stage, str):
            if stage not in names:
                out.append(stage)
            continue
        group = [n for n in stage if n not in names]
        if group:
            out.append(group)
    return out


def stages_for(name: str, serve: bool = True, docs: bool = False) -> List[Stage]:
    if name not in PIPELINES:
        raise KeyError(f"Unknown pipeline: {name}")
    drop = set()
    if not serve:
        drop |= SERVE_STEPS
    if not docs:
        drop |= DOCS_STEPS
    return _without(PIPELINES[name], drop)


def build_pipeline(
    name: str,
    specs: Dict[str, TaskSpec],
    params: dict,
    serve: Optional[bool] = None,
    docs: Optional[bool] = None,
) -> Pipeline:
    """Pipeline `name` over the discovered task specs.

    `serve` and `docs` default to ``serve.enabled`` and ``publish.docs``.
    """
    if serve is None:
        serve = bool(_get(params, "serve", "enabled", default=True))
    if docs is None:
        docs = bool(_get(params, "publish", "docs", default=False))
    return Pipeline.from_stages(specs, stages_for(name, serve=serve, docs=docs), name=name)
