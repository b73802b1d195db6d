from __future__ import annotations

"""Re-indent HTML.

Block elements go on their own lines, indented by nesting depth; a block whose
content is only text and inline elements stays on one line. Inline elements
flow with the surrounding text (whitespace collapsed). Elements listed as
`unformatted` keep their markup and content byte for byte, as do ``pre`` and
``textarea``. ``script``/``style`` bodies are re-indented as a unit. Formatting
already-formatted output returns it unchanged.
"""

import re
import textwrap
from html.parser import HTMLParser
from typing import Iterable, List, Optional, Tuple

VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link",
    "meta", "param", "source", "track", "wbr",
}
INLINE_TAGS = {
    "a", "abbr", "acronym", "b", "bdi", "bdo", "big", "br", "button", "cite",
    "code", "data", "dfn", "em", "font", "i", "img", "input", "kbd", "label",
    "mark", "q", "s", "samp", "select", "small", "span", "strike", "strong",
    "sub", "sup", "time", "tt", "u", "var", "wbr",
}
PRESERVE_TAGS = {"pre", "textarea"}
RAW_TAGS = {"script", "style"}
# children of these are not indented (js-beautify's indent_inner_html=false)
FLAT_TAGS = {"html"}
# a new opening tag implicitly closes an open sibling of the same name
IMPLIED_END_TAGS = {"li", "p", "option", "td", "th", "tr", "dt", "dd"}

_WS_RE = re.compile(r"\s+")


class HtmlPrettifier(HTMLParser):
    def __init__(
        self,
        indent_size: int = 4,
        indent_char: str = " ",
        unformatted: Iterable[str] = (),
    ):
        super().__init__(convert_charrefs=False)
        self.indent_unit = indent_char * indent_size
        self.unformatted = set(unformatted) | PRESERVE_TAGS
        self.lines: List[str] = []
        self.depth = 0
        self._stack: List[Tuple[str, bool]] = []
        self._buffer: List[str] = []
        self._verbatim: Optional[Tuple[str, int]] = None
        self._raw: Optional[str] = None
        self._raw_buf: List[str] = []
        self._open_pending = False

    # output helpers

    def _emit(self, text: str, depth: Optional[int] = None) -> None:
        depth = self.depth if depth is None else depth
        self.lines.append(self.indent_unit * depth + text)
        self._open_pending = False

    def _flush(self) -> None:
        text = "".join(self._buffer).strip()
        self._buffer.clear()
        if text:
            self._emit(text)

    def _append(self, text: str) -> None:
        if self._raw is not None:
            self._raw_buf.append(text)
        else:
            self._buffer.append(text)

    # parser callbacks

    def handle_decl(self, decl: str) -> None:
        self._flush()
        self._emit(f"<!{decl}>")

    def handle_pi(self, data: str) -> None:
        self._append(f"<?{data}>")

    def handle_comment(self, data: str) -> None:
        text = f"<!--{data}-->"
        if self._verbatim or self._raw is not None:
            self._append(text)
            return
        self._flush()
        self._emit(text)

    def handle_entityref(self, name: str) -> None:
        self._append(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._append(f"&#{name};")

    def handle_data(self, data: str) -> None:
        if self._raw is not None or self._verbatim:
            self._append(data)
            return
        self._buffer.append(_WS_RE.sub(" ", data))

    def handle_startendtag(self, tag: str, attrs) -> None:
        self._start(tag, self.get_starttag_text() or f"<{tag}/>", void=True)

    def handle_starttag(self, tag: str, attrs) -> None:
        self._start(tag, self.get_starttag_text() or f"<{tag}>", void=tag in VOID_TAGS)

    def handle_endtag(self, tag: str) -> None:
        text = f"</{tag}>"
        if self._verbatim:
            self._buffer.append(text)
            root, level = self._verbatim
            if tag == root:
                level -= 1
                self._verbatim = (root, level) if level else None
            return
        if self._raw is not None:
            if tag != self._raw:
                self._raw_buf.append(text)
                return
            self._end_raw(text)
            return
        if tag in INLINE_TAGS:
            self._buffer.append(text)
            return
        if tag in VOID_TAGS:
            return
        self._close_block(tag, text)

    # structure

    def _start(self, tag: str, text: str, void: bool) -> None:
        if self._verbatim:
            self._buffer.append(text)
            root, level = self._verbatim
            if tag == root and not void:
                self._verbatim = (root, level + 1)
            return
        if tag in self.unformatted:
            self._buffer.append(text)
            if not void:
                self._verbatim = (tag, 1)
            return
        if tag in INLINE_TAGS:
            self._buffer.append(text)
            return
        if tag in IMPLIED_END_TAGS and self._stack and self._stack[-1][0] == tag:
            self._close_block(tag, None)
        self._flush()
        self._emit(text)
        if void:
            return
        if tag in RAW_TAGS:
            self._raw = tag
            self._raw_buf = []
            self._open_pending = True
            return
        indents = tag not in FLAT_TAGS
        self._stack.append((tag, indents))
        if indents:
            self.depth += 1
        self._open_pending = True

    def _close_block(self, tag: str, text: Optional[str]) -> None:
        names = [name for name, _ in self._stack]
        if tag not in names:
            # stray end tag: keep it where it is
            if text:
                self._flush()
                self._emit(text)
            return
        if self._open_pending:
            inner = "".join(self._buffer).strip()
            self._buffer.clear()
            self.lines[-1] += inner + (text or "")
            self._open_pending = False
            self._pop_until(tag)
            return
        self._flush()
        self._pop_until(tag)
        if text:
            self._emit(text)

    def _pop_until(self, tag: str) -> None:
        while self._stack:
            name, indents = self._stack.pop()
            if indents:
                self.depth -= 1
            if name == tag:
                break

    def _end_raw(self, text: str) -> None:
        content = "".join(self._raw_buf).strip("\n")
        self._raw = None
        self._raw_buf = []
        if not content.strip():
            self.lines[-1] += text
            self._open_pending = False
            return
        body = textwrap.dedent(content)
        for line in body.splitlines():
            line = line.rstrip()
            if line:
                self.lines.append(self.indent_unit * (self.depth + 1) + line)
            else:
                self.lines.append("")
        self._emit(text)

    def result(self) -> str:
        self.close()
        if self._raw is not None:
            self._buffer.extend(self._raw_buf)
            self._raw = None
        self._flush()
        return "\n".join(self.lines) + "\n"


def prettify_html(
    html: str,
    indent_size: int = 4,
    indent_char: str = " ",
    unformatted: Iterable[str] = (),
) -> str:
    parser = HtmlPrettifier(
        indent_size=indent_size, indent_char=indent_char, unformatted=unformatted
    )
    parser.feed(html)
    return parser.result()
