from __future__ import annotations

"""Vendor prefixing for compiled CSS.

A table maps unprefixed properties to the prefixes still required by the
targeted browsers ("last 2 versions" by default). Prefixed declarations are
inserted before the standard one, keeping the standard declaration last so it
wins where supported. Declarations already prefixed in the source are left
alone.
"""

import re
from typing import Dict, List, Optional

DEFAULT_PREFIXES: Dict[str, List[str]] = {
    "appearance": ["-webkit-", "-moz-"],
    "user-select": ["-webkit-", "-moz-", "-ms-"],
    "backdrop-filter": ["-webkit-"],
    "text-size-adjust": ["-webkit-", "-moz-", "-ms-"],
    "hyphens": ["-webkit-", "-ms-"],
    "mask-image": ["-webkit-"],
    "mask": ["-webkit-"],
    "clip-path": ["-webkit-"],
    "text-decoration-skip-ink": ["-webkit-"],
    "box-decoration-break": ["-webkit-"],
    "tab-size": ["-moz-"],
    "font-feature-settings": ["-webkit-"],
    "print-color-adjust": ["-webkit-"],
    # "property:value" keys prefix the value instead of the property
    "position:sticky": ["-webkit-"],
    "@keyframes": ["-webkit-"],
}

# property: value
DECL_RE = re.compile(
    r"(?P<indent>^[ \t]*)(?P<prop>[a-zA-Z-]+)(?P<colon>\s*:\s*)(?P<value>[^;{}]+?)(?P<end>\s*;)",
    re.MULTILINE,
)
KEYFRAMES_RE = re.compile(r"^([ \t]*)@keyframes\s+([\w-]+)\s*\{", re.MULTILINE)


class Autoprefixer:
    def __init__(self, prefixes: Optional[Dict[str, List[str]]] = None):
        table = dict(DEFAULT_PREFIXES)
        if prefixes:
            table.update(prefixes)
        self.prefixes = table

    def process(self, css: str) -> str:
        css = DECL_RE.sub(self._prefix_declaration, css)
        if self.prefixes.get("@keyframes"):
            css = self._prefix_keyframes(css)
        return css

    def _already_prefixed(self, block: str, prop: str, prefix: str) -> bool:
        return re.search(rf"(^|[;{{\s]){re.escape(prefix + prop)}\s*:", block) is not None

    def _prefix_declaration(self, m: re.Match) -> str:
        prop = m.group("prop").lower()
        value = m.group("value")
        original = m.group(0)
        if prop.startswith("-"):
            return original
        block = _enclosing_block(m.string, m.start())
        lines: List[str] = []
        for prefix in self.prefixes.get(prop, []):
            if self._already_prefixed(block, prop, prefix):
                continue
            lines.append(
                f"{m.group('indent')}{prefix}{prop}{m.group('colon')}{value}{m.group('end')}"
            )
        value_key = f"{prop}:{value.strip().lower()}"
        for prefix in self.prefixes.get(value_key, []):
            prefixed_value = f"{prefix}{value.strip()}"
            if prefixed_value in block:
                continue
            lines.append(
                f"{m.group('indent')}{prop}{m.group('colon')}{prefixed_value}{m.group('end')}"
            )
        if not lines:
            return original
        return "\n".join(lines + [original])

    def _prefix_keyframes(self, css: str) -> str:
        out: List[str] = []
        cursor = 0
        for m in KEYFRAMES_RE.finditer(css):
            end = _matching_brace(css, m.end() - 1)
            if end is None:
                break
            body = css[m.start() : end + 1]
            out.append(css[cursor : m.start()])
            for prefix in self.prefixes["@keyframes"]:
                marker = f"@{prefix}keyframes {m.group(2)}"
                if marker in css:
                    continue
                out.append(body.replace("@keyframes", f"@{prefix}keyframes", 1))
                out.append("\n\n")
            out.append(body)
            cursor = end + 1
        out.append(css[cursor:])
        return "".join(out)


def _enclosing_block(css: str, pos: int) -> str:
    start = css.rfind("{", 0, pos)
    end = css.find("}", pos)
    return css[start + 1 if start != -1 else 0 : end if end != -1 else len(css)]


def _matching_brace(css: str, open_pos: int) -> Optional[int]:
    depth = 0
    for i in range(open_pos, len(css)):
        if css[i] == "{":
            depth += 1
        elif css[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return None
