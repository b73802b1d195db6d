from __future__ import annotations

"""Small helpers for building source/output paths from config params."""

import os
from pathlib import Path
from typing import Dict, List


# Production bundle names are fixed; HTML referencing other names is not rewritten.
JS_BUNDLE = "main.min.js"
CSS_BUNDLE = "main.min.css"

DEFAULT_VENDOR_ORDER = ["jquery.js", "popper.js", "bootstrap.js", "slick.js"]
DEFAULT_UNFORMATTED = ["code", "pre", "em", "strong", "span", "i", "b", "br"]


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def src_dir(p: Dict) -> str:
    return _get(p, "paths", "src", default="src")


def dist_dir(p: Dict) -> str:
    return _get(p, "paths", "dist", default="dist")


def docs_dir(p: Dict) -> str:
    return _get(p, "paths", "docs", default="docs")


def reports_dir(p: Dict) -> str:
    return _get(p, "paths", "reports", default="accessibility-reports")


def dist_path(p: Dict, *parts: str) -> Path:
    return Path(dist_dir(p), *parts)


def scss_dir(p: Dict) -> str:
    return f"{src_dir(p)}/assets/scss"


def js_dir(p: Dict) -> str:
    return f"{src_dir(p)}/assets/js"


def vendor_dir(p: Dict, kind: str) -> str:
    return f"{src_dir(p)}/assets/vendor/{kind}"


def images_dir(p: Dict) -> str:
    return f"{src_dir(p)}/assets/images"


def fonts_dir(p: Dict) -> str:
    return f"{src_dir(p)}/assets/fonts"


def css_out_dir(p: Dict) -> str:
    return f"{dist_dir(p)}/assets/css"


def js_out_dir(p: Dict) -> str:
    return f"{dist_dir(p)}/assets/js"


def style_entries(p: Dict) -> List[str]:
    return list(_get(p, "styles", "entries", default=["main.scss"]))


def include_paths(p: Dict) -> List[str]:
    paths = [scss_dir(p)]
    for extra in _get(p, "styles", "include_paths", default=[]) or []:
        paths.append(str(extra))
    return paths


def js_entry(p: Dict) -> str:
    return _get(p, "scripts", "entry", default="custom.js")


def vendor_order(p: Dict) -> List[str]:
    return list(_get(p, "scripts", "vendor_order", default=DEFAULT_VENDOR_ORDER))


def bundle_replacements(p: Dict) -> Dict[str, str]:
    replacements = {
        "js": f"assets/js/{JS_BUNDLE}",
        "css": f"assets/css/{CSS_BUNDLE}",
    }
    replacements.update(_get(p, "html", "replace", default={}) or {})
    return replacements


def max_workers(p: Dict) -> int:
    return int(_get(p, "project", "max_workers", default=1))


def serve_host(p: Dict) -> str:
    return os.getenv("SITEPIPE_SERVE_HOST") or _get(
        p, "serve", "host", default="127.0.0.1"
    )


def serve_port(p: Dict) -> int:
    return int(os.getenv("SITEPIPE_SERVE_PORT") or _get(p, "serve", "port", default=3000))


def lint_config(p: Dict, kind: str) -> str:
    defaults = {"scss": ".scss-lint.yml", "html": ".htmllintrc", "js": ".jshintrc"}
    return _get(p, "lint", f"{kind}_config", default=defaults[kind])
