from __future__ import annotations

"""Page composition from pages, layouts and partials.

A page is an HTML file with optional YAML front matter::

    ---
    layout: default
    title: About us
    ---
    <h1>{{ title }}</h1>
    {% include "cta.html" %}

The page body is rendered first (partials, data files and front matter are in
scope), then substituted into its layout as ``{{ body }}``. Pages without a
``layout`` key use the default layout. ``page`` (file stem) and ``root``
(relative prefix back to the site root) are always defined.

Parsed layouts and partials are cached by the composer's jinja2 environment
and only dropped by an explicit ``refresh()``; nothing is re-read behind the
caller's back.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PrefixLoader,
    TemplateNotFound,
)

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


class LayoutNotFound(TemplateNotFound):
    pass


@dataclass
class Page:
    source: Path
    relative: Path
    meta: Dict[str, Any] = field(default_factory=dict)
    body: str = ""

    @property
    def layout(self) -> Optional[str]:
        return self.meta.get("layout")

    @property
    def root(self) -> str:
        return "../" * (len(self.relative.parts) - 1)


def split_front_matter(text: str) -> tuple[Dict[str, Any], str]:
    m = FRONT_MATTER_RE.match(text)
    if not m:
        return {}, text
    meta = yaml.safe_load(m.group(1)) or {}
    if not isinstance(meta, dict):
        raise ValueError("Front matter must be a mapping")
    return meta, text[m.end() :]


def load_data_files(data_dir: Optional[Path]) -> Dict[str, Any]:
    """Load `*.yml`, `*.yaml` and `*.json` files keyed by file stem."""
    data: Dict[str, Any] = {}
    if data_dir is None or not data_dir.is_dir():
        return data
    for path in sorted(data_dir.iterdir()):
        if path.suffix in (".yml", ".yaml"):
            data[path.stem] = yaml.safe_load(path.read_text(encoding="utf-8"))
        elif path.suffix == ".json":
            data[path.stem] = json.loads(path.read_text(encoding="utf-8"))
    return data


class PageComposer:
    def __init__(
        self,
        pages_dir: Path,
        layouts_dir: Path,
        partials_dir: Path,
        data_dir: Optional[Path] = None,
        default_layout: str = "default",
    ):
        self.pages_dir = Path(pages_dir)
        self.layouts_dir = Path(layouts_dir)
        self.partials_dir = Path(partials_dir)
        self.data_dir = Path(data_dir) if data_dir else None
        self.default_layout = default_layout
        self.generation = 0
        self.env: Environment
        self.data: Dict[str, Any] = {}
        self.refresh()

    def refresh(self) -> None:
        """Forget every parsed layout and partial and reload data files."""
        loader = ChoiceLoader(
            [
                PrefixLoader({"layouts": FileSystemLoader(str(self.layouts_dir))}),
                FileSystemLoader(str(self.partials_dir)),
            ]
        )
        self.env = Environment(
            loader=loader,
            auto_reload=False,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.data = load_data_files(self.data_dir)
        self.generation += 1

    def load_page(self, source: Path) -> Page:
        source = Path(source)
        meta, body = split_front_matter(source.read_text(encoding="utf-8"))
        return Page(
            source=source,
            relative=source.relative_to(self.pages_dir),
            meta=meta,
            body=body,
        )

    def layout_name(self, page: Page) -> str:
        name = str(page.layout or self.default_layout)
        return name if name.endswith(".html") else f"{name}.html"

    def compose(self, source: Path) -> str:
        page = self.load_page(source)
        context: Dict[str, Any] = dict(self.data)
        context.update(page.meta)
        context["page"] = page.relative.with_suffix("").as_posix()
        context["root"] = page.root
        context["body"] = self.env.from_string(page.body).render(context)
        layout = self.layout_name(page)
        try:
            template = self.env.get_template(f"layouts/{layout}")
        except TemplateNotFound as exc:
            raise LayoutNotFound(
                f"layouts/{layout}",
                message=f"Layout {layout!r} for page {page.relative} not found in {self.layouts_dir}",
            ) from exc
        return template.render(context)
