from __future__ import annotations

"""Mark the navigation link pointing at the current page as active."""

import posixpath
from typing import Iterable, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

DEFAULT_NAV_LINKS = ".navbar-nav .nav-link, .navbar-nav .dropdown-item"


def normalize_path(path: str) -> str:
    """Site-relative key for a page path: `index.html` and `/` collapse to ``""``."""
    path = posixpath.normpath(path.lstrip("/")) if path else ""
    if path in (".", ""):
        return ""
    if path == "index.html" or path.endswith("/index.html"):
        path = path[: -len("index.html")]
    return path.rstrip("/")


def resolve_href(href: Optional[str], page: str) -> Optional[str]:
    """Resolve a link href against the page's own path; None for external/fragment links."""
    if href is None:
        return None
    parts = urlsplit(href.strip())
    if parts.scheme or parts.netloc or not parts.path:
        return None
    if parts.path.startswith("/"):
        return normalize_path(parts.path)
    joined = posixpath.join(posixpath.dirname(page), parts.path)
    return normalize_path(joined)


def _has_class(tag: Tag, name: str) -> bool:
    return name in (tag.get("class") or [])


def _set_class(tag: Tag, name: str, on: bool) -> bool:
    classes = list(tag.get("class") or [])
    if on and name not in classes:
        classes.append(name)
    elif not on and name in classes:
        classes.remove(name)
    else:
        return False
    if classes:
        tag["class"] = classes
    else:
        del tag["class"]
    return True


def _dropdown_toggles(link: Tag) -> Iterable[Tag]:
    for parent in link.parents:
        if isinstance(parent, Tag) and _has_class(parent, "dropdown"):
            toggle = parent.find(class_="dropdown-toggle")
            if toggle is not None and toggle is not link:
                yield toggle


def mark_active_links(
    html: str,
    page: str,
    selector: str = DEFAULT_NAV_LINKS,
    active_class: str = "active",
) -> str:
    """Return `html` with `active_class` on exactly the links targeting `page`.

    `page` is the page path relative to the site root (``blog/index.html``).
    Enclosing dropdown toggles of an active link are marked too; every other
    selected link loses the class. The markup is returned untouched when no
    class changes.
    """
    soup = BeautifulSoup(html, "html.parser")
    links = soup.select(selector)
    if not links:
        return html
    current = normalize_path(page)
    active: list[Tag] = []
    for link in links:
        if resolve_href(link.get("href"), page) == current:
            active.append(link)
            active.extend(_dropdown_toggles(link))
    active_ids = {id(t) for t in active}
    changed = False
    for link in links:
        changed |= _set_class(link, active_class, id(link) in active_ids)
    for toggle in active:
        changed |= _set_class(toggle, active_class, True)
    if not changed:
        return html
    return soup.decode(formatter="html5")
