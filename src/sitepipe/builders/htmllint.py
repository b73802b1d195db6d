from __future__ import annotations

"""HTML structure checks configured by an htmllint style rules object.

    {"attr-bans": ["align", "style"], "img-req-alt": true, "line-max-len": 120}

A rule set to ``false`` is off. Without a config file the defaults apply.
"""

import re
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Doctype, Tag
from bs4.element import Comment, NavigableString

from .findings import Finding, load_rule_file

DEFAULT_RULES: Dict[str, Any] = {
    "doctype-first": True,
    "html-req-lang": True,
    "head-req-title": True,
    "img-req-alt": True,
    "id-no-dup": True,
    "attr-bans": [
        "align", "background", "bgcolor", "border", "frameborder", "longdesc",
        "marginwidth", "marginheight", "scrolling", "style", "width",
    ],
    "tag-bans": ["style", "b", "i"],
    "attr-name-style": "dash",
    "link-req-noopener": True,
    "line-max-len": False,
}

DASH_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")


def _line(tag: Tag) -> int:
    return getattr(tag, "sourceline", None) or 1


class HtmlLinter:
    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        self.rules = dict(DEFAULT_RULES if rules is None else rules)

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "HtmlLinter":
        return cls(load_rule_file(path))

    def enabled(self, name: str) -> Any:
        value = self.rules.get(name, False)
        return value if value not in (None, False, 0, []) else False

    def lint_text(self, text: str, path: str = "<string>") -> List[Finding]:
        soup = BeautifulSoup(text, "html.parser")
        found: List[Tuple[int, str, str]] = []
        checks = [
            ("doctype-first", self._doctype_first),
            ("html-req-lang", self._html_req_lang),
            ("head-req-title", self._head_req_title),
            ("img-req-alt", self._img_req_alt),
            ("id-no-dup", self._id_no_dup),
            ("attr-bans", self._attr_bans),
            ("tag-bans", self._tag_bans),
            ("attr-name-style", self._attr_name_style),
            ("link-req-noopener", self._link_req_noopener),
        ]
        for name, check in checks:
            option = self.enabled(name)
            if option is False:
                continue
            for line, message in check(soup, option):
                found.append((line, name, message))
        max_len = self.enabled("line-max-len")
        if max_len is not False:
            for i, raw in enumerate(text.splitlines(), start=1):
                if len(raw) > int(max_len):
                    found.append((i, "line-max-len", f"line length should not exceed {max_len} characters (current: {len(raw)})"))
        return [
            Finding(path=path, line=line, code=code, message=message)
            for line, code, message in sorted(found)
        ]

    def lint_file(self, path: Path) -> List[Finding]:
        return self.lint_text(Path(path).read_text(encoding="utf-8"), str(path))

    # rules: each yields (line number, message)

    def _doctype_first(self, soup: BeautifulSoup, option) -> Iterator[Tuple[int, str]]:
        for node in soup.contents:
            if isinstance(node, Doctype):
                return
            if isinstance(node, NavigableString) and not isinstance(node, Comment):
                if not node.strip():
                    continue
            if isinstance(node, Comment) and option == "smart":
                continue
            line = _line(node) if isinstance(node, Tag) else 1
            yield line, "<!DOCTYPE> should be the first element seen"
            return
        yield 1, "<!DOCTYPE> should be the first element seen"

    def _html_req_lang(self, soup, option):
        html = soup.find("html")
        if html is not None and not html.get("lang"):
            yield _line(html), "each `html` tag must have a `lang` attribute"

    def _head_req_title(self, soup, option):
        head = soup.find("head")
        if head is None:
            return
        title = head.find("title")
        if title is None or not title.get_text(strip=True):
            yield _line(head), "`<title>` required in `<head>`"

    def _img_req_alt(self, soup, option):
        for img in soup.find_all("img"):
            alt = img.get("alt")
            if alt is None:
                yield _line(img), "the `alt` attribute must be set for each `img` element"
            elif not alt.strip() and option != "allownull":
                yield _line(img), "the `alt` attribute must not be empty"

    def _id_no_dup(self, soup, option):
        seen: Dict[str, int] = defaultdict(int)
        for tag in soup.find_all(id=True):
            value = tag.get("id")
            seen[value] += 1
            if seen[value] == 2:
                yield _line(tag), f"the id `{value}` is already in use"

    def _attr_bans(self, soup, option):
        banned = set(option if isinstance(option, (list, tuple)) else DEFAULT_RULES["attr-bans"])
        for tag in soup.find_all(True):
            for attr in tag.attrs:
                if attr in banned:
                    yield _line(tag), f"the `{attr}` attribute is banned"

    def _tag_bans(self, soup, option):
        banned = set(option if isinstance(option, (list, tuple)) else DEFAULT_RULES["tag-bans"])
        for tag in soup.find_all(list(banned)):
            yield _line(tag), f"the `{tag.name}` tag is banned"

    def _attr_name_style(self, soup, option):
        if option != "dash":
            return
        for tag in soup.find_all(True):
            for attr in tag.attrs:
                if not DASH_NAME_RE.match(attr):
                    yield _line(tag), f"attribute name `{attr}` must be lowercase and dash-separated"

    def _link_req_noopener(self, soup, option):
        for a in soup.find_all("a", target="_blank"):
            rel = a.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if "noopener" not in rel and "noreferrer" not in rel:
                yield _line(a), "links with `target=_blank` must have `rel=noopener`"
