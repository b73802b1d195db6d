from __future__ import annotations

"""WCAG 2.0 level A checks over generated pages, with plain-text reports."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

from bs4 import BeautifulSoup, Tag

ERROR = "Error"
WARNING = "Warning"
NOTICE = "Notice"

LABELLED_INPUT_EXEMPT = {"hidden", "submit", "button", "image", "reset"}


@dataclass(frozen=True)
class Issue:
    type: str
    code: str
    message: str
    line: int
    context: str


def _context(tag: Tag, limit: int = 120) -> str:
    text = str(tag).replace("\n", " ")
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _line(tag: Tag) -> int:
    return getattr(tag, "sourceline", None) or 1


def _accessible_text(tag: Tag) -> str:
    parts = [tag.get_text(" ", strip=True), tag.get("aria-label", ""), tag.get("title", "")]
    for img in tag.find_all("img"):
        parts.append(img.get("alt", ""))
    return " ".join(p for p in parts if p).strip()


def check_document(html: str) -> List[Issue]:
    soup = BeautifulSoup(html, "html.parser")
    issues: List[Issue] = []

    def add(kind: str, code: str, message: str, tag: Tag) -> None:
        issues.append(Issue(kind, code, message, _line(tag), _context(tag)))

    root = soup.find("html")
    if root is not None and not (root.get("lang") or root.get("xml:lang")):
        add(
            ERROR,
            "WCAG2A.Principle3.Guideline3_1.3_1_1.H57.2",
            "The html element should have a lang or xml:lang attribute which "
            "describes the language of the document.",
            root,
        )

    head = soup.find("head")
    title = soup.find("title")
    if head is not None and (title is None or not title.get_text(strip=True)):
        add(
            ERROR,
            "WCAG2A.Principle2.Guideline2_4.2_4_2.H25.1.NoTitleEl",
            "A title should be provided for the document, using a non-empty "
            "title element in the head section.",
            head,
        )

    for img in soup.find_all("img"):
        if img.get("alt") is None:
            add(
                ERROR,
                "WCAG2A.Principle1.Guideline1_1.1_1_1.H37",
                "Img element missing an alt attribute. Use the alt attribute to "
                "specify a short text alternative.",
                img,
            )

    label_for = {label.get("for") for label in soup.find_all("label") if label.get("for")}
    for field in soup.find_all(["input", "select", "textarea"]):
        if field.name == "input" and (field.get("type") or "text").lower() in LABELLED_INPUT_EXEMPT:
            continue
        labelled = (
            (field.get("id") and field.get("id") in label_for)
            or field.find_parent("label") is not None
            or field.get("aria-label")
            or field.get("aria-labelledby")
            or field.get("title")
        )
        if not labelled:
            add(
                ERROR,
                "WCAG2A.Principle1.Guideline1_3.1_3_1.F68",
                "This form field should be labelled in some way. Use the label "
                "element (either with a \"for\" attribute or wrapped around the "
                "form field), or \"title\", \"aria-label\" or \"aria-labelledby\" attributes as appropriate.",
                field,
            )

    for a in soup.find_all("a", href=True):
        if not _accessible_text(a):
            add(
                ERROR,
                "WCAG2A.Principle4.Guideline4_1.4_1_2.H91.A.NoContent",
                "Anchor element found with a valid href attribute, but no link "
                "content has been supplied.",
                a,
            )

    for button in soup.find_all("button"):
        if not _accessible_text(button):
            add(
                ERROR,
                "WCAG2A.Principle4.Guideline4_1.4_1_2.H91.Button.Name",
                "This button element does not have a name available to an "
                "accessibility API.",
                button,
            )

    seen_ids: Dict[str, int] = {}
    for tag in soup.find_all(id=True):
        value = tag["id"]
        seen_ids[value] = seen_ids.get(value, 0) + 1
        if seen_ids[value] == 2:
            add(
                ERROR,
                "WCAG2A.Principle4.Guideline4_1.4_1_1.F77",
                f'Duplicate id attribute value "{value}" found on the web page.',
                tag,
            )

    for frame in soup.find_all(["iframe", "frame"]):
        if not (frame.get("title") or "").strip():
            add(
                ERROR,
                "WCAG2A.Principle4.Guideline4_1.4_1_2.H64.1",
                "Iframe element requires a non-empty title attribute that "
                "identifies the frame.",
                frame,
            )

    previous = 0
    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        level = int(heading.name[1])
        if previous and level > previous + 1:
            add(
                WARNING,
                "WCAG2A.Principle1.Guideline1_3.1_3_1_A.G141",
                f"The heading structure is not logically nested. This h{level} "
                f"element should be an h{previous + 1} or higher.",
                heading,
            )
        previous = level

    for tag in soup.find_all(tabindex=True):
        try:
            index = int(tag["tabindex"])
        except ValueError:
            continue
        if index > 0:
            add(
                NOTICE,
                "WCAG2A.Principle2.Guideline2_4.2_4_3.H4.2",
                "A positive tabindex changes the natural tab order; check that "
                "the resulting order preserves meaning and operability.",
                tag,
            )

    return sorted(issues, key=lambda i: (i.line, i.code))


def format_report(page: str, issues: Iterable[Issue]) -> str:
    issues = list(issues)
    counts = {kind: sum(1 for i in issues if i.type == kind) for kind in (ERROR, WARNING, NOTICE)}
    lines = [
        f"Accessibility report for {page}",
        f"{len(issues)} issue(s): {counts[ERROR]} error(s), "
        f"{counts[WARNING]} warning(s), {counts[NOTICE]} notice(s)",
        "",
    ]
    for n, issue in enumerate(issues, start=1):
        lines.extend(
            [
                f"{n}. {issue.type}: {issue.message}",
                f"   Code: {issue.code}",
                f"   Line: {issue.line}",
                f"   Context: {issue.context}",
                "",
            ]
        )
    return "\n".join(lines)


def report_name(page: Path) -> Path:
    return page.with_suffix(".txt")
