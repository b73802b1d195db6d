from __future__ import annotations

"""Strip development-only code from scripts before minification.

Two transforms:

- ``remove_code`` drops blocks fenced by ``removeIf(<condition>)`` and
  ``endRemoveIf(<condition>)`` markers written as ``//``, ``/* */`` or
  ``<!-- -->`` comments. A block is removed when its condition is enabled, or
  when it is written ``removeIf(!<condition>)`` and the condition is disabled.
- ``drop_console`` removes ``console.<method>(...)`` calls. A call used as a
  statement is deleted with its semicolon; a call inside an expression becomes
  ``void 0``.
"""

import re
from typing import Dict, List, Optional, Tuple

START_RE = re.compile(r"(?://|/\*|<!--)\s*removeIf\((!?)(\w+)\)")
END_RE = re.compile(r"(?://|/\*|<!--)\s*endRemoveIf\((!?)(\w+)\)")
CONSOLE_RE = re.compile(r"(?<![.\w$])console\s*\.\s*[A-Za-z_$][\w$]*\s*\(")

# characters after which a "/" starts a regex literal rather than a division
_REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%<>~^")


def _enabled(negate: str, name: str, conditions: Dict[str, bool]) -> bool:
    value = bool(conditions.get(name, False))
    return not value if negate else value


def remove_code(text: str, conditions: Dict[str, bool]) -> str:
    out: List[str] = []
    removing: Optional[tuple] = None
    depth = 0
    for line in text.splitlines(keepends=True):
        if removing is None:
            m = START_RE.search(line)
            if m and _enabled(m.group(1), m.group(2), conditions):
                removing = (m.group(1), m.group(2))
                depth = 1
                continue
            out.append(line)
            continue
        start = START_RE.search(line)
        if start and (start.group(1), start.group(2)) == removing:
            depth += 1
            continue
        end = END_RE.search(line)
        if end and (end.group(1), end.group(2)) == removing:
            depth -= 1
            if depth == 0:
                removing = None
    if removing is not None:
        raise ValueError(f"Unterminated removeIf({removing[0]}{removing[1]}) block")
    return "".join(out)


def scan_js(text: str) -> Tuple[str, List[Tuple[int, str]]]:
    """Blank string, template, regex and comment bodies in `text`.

    Returns the masked text (newlines kept, so offsets and line numbers stay
    aligned with the input) and the (offset, quote) of every string literal.
    """
    chars = list(text)
    strings: List[Tuple[int, str]] = []
    n = len(text)
    i = 0
    last_sig = ""

    def blank(a: int, b: int) -> None:
        for k in range(a, min(b, n)):
            if chars[k] != "\n":
                chars[k] = " "

    while i < n:
        c = text[i]
        nxt = text[i + 1] if i + 1 < n else ""
        if c == "/" and nxt == "/":
            end = text.find("\n", i)
            end = n if end == -1 else end
            blank(i, end)
            i = end
            continue
        if c == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            blank(i, end)
            i = end
            continue
        if c in "'\"`":
            strings.append((i, c))
            j = i + 1
            while j < n and text[j] != c:
                if text[j] == "\\":
                    j += 1
                elif text[j] == "\n" and c != "`":
                    break
                j += 1
            blank(i + 1, j)
            i = j + 1
            last_sig = c
            continue
        if c == "/" and (last_sig == "" or last_sig in _REGEX_PRECEDERS):
            j = i + 1
            in_class = False
            while j < n and text[j] != "\n":
                if text[j] == "\\":
                    j += 2
                    continue
                if text[j] == "[":
                    in_class = True
                elif text[j] == "]":
                    in_class = False
                elif text[j] == "/" and not in_class:
                    break
                j += 1
            blank(i + 1, j)
            i = j + 1
            last_sig = "/"
            continue
        if not c.isspace():
            last_sig = c
        i += 1
    return "".join(chars), strings


def mask_js(text: str) -> str:
    return scan_js(text)[0]


def _statement_start(masked: str, pos: int) -> bool:
    k = pos - 1
    while k >= 0 and masked[k] in " \t\r\n":
        k -= 1
    return k < 0 or masked[k] in ";{}"


def drop_console(text: str) -> str:
    masked = mask_js(text)
    pieces: List[str] = []
    cursor = 0
    for m in CONSOLE_RE.finditer(masked):
        if m.start() < cursor:
            continue
        depth = 1
        j = m.end()
        while j < len(masked) and depth:
            if masked[j] == "(":
                depth += 1
            elif masked[j] == ")":
                depth -= 1
            j += 1
        if depth:
            break
        pieces.append(text[cursor : m.start()])
        if _statement_start(masked, m.start()):
            k = j
            while k < len(masked) and masked[k] in " \t":
                k += 1
            if k < len(masked) and masked[k] == ";":
                j = k + 1
        else:
            pieces.append("void 0")
        cursor = j
    pieces.append(text[cursor:])
    return "".join(pieces)
