from __future__ import annotations

"""Script checks configured with jshint style options (``.jshintrc``).

Supported options: ``eqeqeq``, ``curly``, ``maxlen``, ``strict``,
``quotmark`` ("single"/"double"), ``trailing``, ``debug`` (allow
``debugger``), ``evil`` (allow ``eval``), ``devel`` (allow ``console`` and
``alert``). Codes and messages follow jshint's.
"""

import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .findings import Finding, load_rule_file
from .strip import scan_js

DEFAULT_OPTIONS: Dict[str, Any] = {
    "eqeqeq": True,
    "curly": True,
    "strict": True,
    "quotmark": "single",
    "trailing": True,
    "debug": False,
    "evil": False,
    "devel": True,
}

EQ_RE = re.compile(r"(?<![=!<>])([=!]=)(?!=)")
CONTROL_RE = re.compile(r"\b(if|for|while)\s*\(")
ELSE_RE = re.compile(r"\belse\b(?!\s*(?:\{|if\b))")
DEBUGGER_RE = re.compile(r"\bdebugger\b")
EVAL_RE = re.compile(r"\beval\s*\(")
DEVEL_RE = re.compile(r"\b(console|alert)\b")
STRICT_RE = re.compile(r"""^\s*(['"])use strict\1""", re.MULTILINE)


def _position(text: str, offset: int) -> Tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    col = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, col


def _close_paren(masked: str, open_pos: int) -> Optional[int]:
    depth = 0
    for i in range(open_pos, len(masked)):
        if masked[i] == "(":
            depth += 1
        elif masked[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return None


class JsLinter:
    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = dict(DEFAULT_OPTIONS if options is None else options)

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "JsLinter":
        return cls(load_rule_file(path))

    def lint_text(self, text: str, path: str = "<string>") -> List[Finding]:
        masked, strings = scan_js(text)
        found: List[Tuple[int, int, str, str]] = []
        for offset, code, message in self._offset_checks(text, masked, strings):
            line, col = _position(text, offset)
            found.append((line, col, code, message))
        for line, col, code, message in self._line_checks(text):
            found.append((line, col, code, message))
        return [
            Finding(path=path, line=line, column=col, code=code, message=message)
            for line, col, code, message in sorted(found)
        ]

    def lint_file(self, path: Path) -> List[Finding]:
        return self.lint_text(Path(path).read_text(encoding="utf-8"), str(path))

    def _offset_checks(self, text, masked, strings) -> Iterator[Tuple[int, str, str]]:
        opts = self.options
        if opts.get("eqeqeq"):
            for m in EQ_RE.finditer(masked):
                op = m.group(1)
                yield m.start(1), "W116", f"Expected '{op}=' and instead saw '{op}'."
        if opts.get("curly"):
            for m in CONTROL_RE.finditer(masked):
                close = _close_paren(masked, m.end() - 1)
                if close is None:
                    continue
                rest = masked[close + 1 :].lstrip()
                if rest and rest[0] not in "{;":
                    token = rest.split(None, 1)[0][:20]
                    yield m.start(), "W116", f"Expected '{{' and instead saw '{token}'."
            for m in ELSE_RE.finditer(masked):
                token = masked[m.end() :].split(None, 1)
                yield m.start(), "W116", f"Expected '{{' and instead saw '{token[0][:20] if token else ''}'."
        if not opts.get("debug"):
            for m in DEBUGGER_RE.finditer(masked):
                yield m.start(), "W087", "Forgotten 'debugger' statement?"
        if not opts.get("evil"):
            for m in EVAL_RE.finditer(masked):
                yield m.start(), "W061", "eval can be harmful."
        if not opts.get("devel"):
            for m in DEVEL_RE.finditer(masked):
                yield m.start(), "W117", f"'{m.group(1)}' is not defined."
        quotmark = opts.get("quotmark")
        if quotmark in ("single", "double"):
            wanted = "'" if quotmark == "single" else '"'
            for offset, quote in strings:
                if quote in "'\"" and quote != wanted:
                    yield offset, "W109", f"Strings must use {quotmark}quote."
        if opts.get("strict") and text.strip() and not STRICT_RE.search(text):
            yield 0, "E007", "Missing \"use strict\" statement."

    def _line_checks(self, text) -> Iterator[Tuple[int, int, str, str]]:
        maxlen = self.options.get("maxlen")
        trailing = self.options.get("trailing")
        for i, line in enumerate(text.split("\n"), start=1):
            line = line.rstrip("\r")
            if maxlen and len(line) > int(maxlen):
                yield i, int(maxlen) + 1, "W101", "Line is too long."
            if trailing and line != line.rstrip():
                yield i, len(line.rstrip()) + 1, "W102", "Trailing whitespace."
