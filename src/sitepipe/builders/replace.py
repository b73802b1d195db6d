from __future__ import annotations

"""Rewrite ``<!-- build:NAME -->`` blocks to point at production bundles.

    <!-- build:css -->
    <link rel="stylesheet" href="assets/css/main.css">
    <!-- endbuild -->

becomes ``<link rel="stylesheet" href="assets/css/main.min.css">`` with the
indentation of the opening marker kept.
"""

import re
from typing import Dict

BLOCK_RE = re.compile(
    r"(?P<indent>[ \t]*)<!--\s*build:(?P<name>[\w-]+)\s*-->.*?<!--\s*endbuild\s*-->",
    re.DOTALL,
)


def bundle_tag(name: str, url: str) -> str:
    if url.endswith(".css"):
        return f'<link rel="stylesheet" href="{url}">'
    if url.endswith(".js"):
        return f'<script src="{url}"></script>'
    return url


def replace_blocks(
    html: str,
    replacements: Dict[str, str],
    prefix: str = "",
    keep_unassigned: bool = False,
) -> str:
    """Replace every build block; blocks without a replacement are removed
    unless `keep_unassigned` (in which case their content stays and only the
    markers go)."""

    def _sub(m: re.Match) -> str:
        name = m.group("name")
        indent = m.group("indent")
        if name in replacements:
            return indent + bundle_tag(name, prefix + replacements[name])
        if keep_unassigned:
            inner = re.sub(r"^[ \t]*<!--\s*build:[\w-]+\s*-->[ \t]*\n?", "", m.group(0))
            return re.sub(r"\n?[ \t]*<!--\s*endbuild\s*-->$", "", inner)
        return ""

    return BLOCK_RE.sub(_sub, html)
