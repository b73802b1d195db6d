from __future__ import annotations

"""Source map (v3) for files concatenated with a newline between them.

Every generated line maps to column 0 of the same line in its source file,
which is what concatenation without transformation preserves.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


def vlq_encode(value: int) -> str:
    """Base64 VLQ encoding of a signed integer."""
    v = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = v & 0b11111
        v >>= 5
        if v:
            digit |= 0b100000
        out.append(_B64[digit])
        if not v:
            return "".join(out)


@dataclass
class ConcatSourceMap:
    file: str
    sources: List[str] = field(default_factory=list)
    contents: List[str] = field(default_factory=list)
    _chunks: List[str] = field(default_factory=list)
    _line_map: Dict[int, Tuple[int, int]] = field(default_factory=dict)
    _newlines: int = 0

    def add(self, source: str, text: str) -> None:
        if self._chunks:
            self._chunks.append("\n")
            self._newlines += 1
        index = len(self.sources)
        self.sources.append(source)
        self.contents.append(text)
        self._chunks.append(text)
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        for i in range(len(lines)):
            self._line_map[self._newlines + i] = (index, i)
        self._newlines += text.count("\n")

    @property
    def code(self) -> str:
        return "".join(self._chunks)

    def mappings(self) -> str:
        segments = []
        prev_src = 0
        prev_line = 0
        for generated in range(self._newlines + 1):
            entry = self._line_map.get(generated)
            if entry is None:
                segments.append("")
                continue
            src, line = entry
            segments.append(
                vlq_encode(0)
                + vlq_encode(src - prev_src)
                + vlq_encode(line - prev_line)
                + vlq_encode(0)
            )
            prev_src, prev_line = src, line
        return ";".join(segments)

    def to_json(self) -> str:
        payload = {
            "version": 3,
            "file": self.file,
            "sources": self.sources,
            "sourcesContent": self.contents,
            "names": [],
            "mappings": self.mappings(),
        }
        return json.dumps(payload, separators=(",", ":"))
