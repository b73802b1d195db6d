from __future__ import annotations

"""SCSS style checks driven by a sass-lint style rule file.

    rules:
      indentation: [2, {size: 4}]
      no-ids: 2
      hex-length: [1, {style: short}]

Severity 0 disables a rule. Only rules named in the file run; without a rule
file the defaults below apply.
"""

import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from .findings import Finding, load_rule_file, rule_setting
from .strip import mask_js

DEFAULT_RULES: Dict[str, Any] = {
    "indentation": [1, {"size": 2}],
    "no-trailing-whitespace": 1,
    "final-newline": 1,
    "no-ids": 1,
    "no-important": 1,
    "hex-length": [1, {"style": "short"}],
    "hex-notation": [1, {"style": "lowercase"}],
    "zero-unit": 1,
    "no-debug": 1,
    "no-warn": 1,
    "no-color-keywords": 1,
    "space-after-colon": 1,
}

COLOR_KEYWORDS = {
    "aqua", "black", "blue", "fuchsia", "gray", "green", "grey", "lime",
    "maroon", "navy", "olive", "orange", "purple", "red", "silver", "teal",
    "white", "yellow",
}
UNITS = "px|em|rem|%|pt|pc|cm|mm|in|ex|ch|vw|vh|vmin|vmax"

HEX_RE = re.compile(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")
ZERO_UNIT_RE = re.compile(rf"(?<![\w.\-#$])0(?:{UNITS})(?![\w%])")
ID_RE = re.compile(r"(?<![\w&-])#(?!\{)[A-Za-z_-][\w-]*")
DECL_RE = re.compile(r"^\s*(?P<prop>\$?[\w-]+)\s*:(?P<space>\s*)(?P<value>.*?);\s*$")
WORD_RE = re.compile(r"(?<![\w$#.-])([a-z]+)(?![\w-])")


class ScssLinter:
    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        configured = DEFAULT_RULES if rules is None else rules
        self.rules = {
            name: rule_setting(value) for name, value in configured.items()
        }

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "ScssLinter":
        config = load_rule_file(path)
        return cls(None if config is None else config.get("rules", {}))

    def _checks(self) -> Dict[str, Callable[..., Iterator[tuple]]]:
        return {
            "indentation": self._indentation,
            "no-trailing-whitespace": self._trailing_whitespace,
            "final-newline": self._final_newline,
            "no-ids": self._no_ids,
            "no-important": self._no_important,
            "hex-length": self._hex_length,
            "hex-notation": self._hex_notation,
            "zero-unit": self._zero_unit,
            "no-debug": self._no_debug,
            "no-warn": self._no_warn,
            "no-color-keywords": self._no_color_keywords,
            "max-line-length": self._max_line_length,
            "space-after-colon": self._space_after_colon,
        }

    def lint_text(self, text: str, path: str = "<string>") -> List[Finding]:
        raw_lines = text.split("\n")
        code_lines = mask_js(text).split("\n")
        findings: List[Finding] = []
        checks = self._checks()
        for name, (severity, options) in self.rules.items():
            if severity <= 0 or name not in checks:
                continue
            level = "error" if severity >= 2 else "warning"
            for line_no, message in checks[name](text, raw_lines, code_lines, options):
                findings.append(
                    Finding(
                        path=path,
                        line=line_no,
                        code=name,
                        message=message,
                        severity=level,
                    )
                )
        return sorted(findings, key=lambda f: (f.line, f.code))

    def lint_file(self, path: Path) -> List[Finding]:
        return self.lint_text(Path(path).read_text(encoding="utf-8"), str(path))

    # rules: each yields (line number, message)

    def _indentation(self, text, raw_lines, code_lines, options):
        size = options.get("size", 2)
        unit = "\t" if size == "tab" else " " * int(size)
        depth = 0
        statement_start = True
        for i, line in enumerate(code_lines, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            expected = depth - (1 if stripped.startswith("}") else 0)
            leading = line[: len(line) - len(line.lstrip())]
            if statement_start and leading != unit * max(expected, 0):
                yield i, f"Expected indentation of {len(unit) * max(expected, 0)} but found {len(leading)}"
            depth += stripped.count("{") - stripped.count("}")
            depth = max(depth, 0)
            statement_start = stripped[-1] in "{};"

    def _trailing_whitespace(self, text, raw_lines, code_lines, options):
        for i, line in enumerate(raw_lines, start=1):
            if line.rstrip("\r") != line.rstrip():
                yield i, "Trailing whitespace"

    def _final_newline(self, text, raw_lines, code_lines, options):
        include = options.get("include", True)
        if include and text and not text.endswith("\n"):
            yield len(raw_lines), "Files must end with a new line"
        if not include and text.endswith("\n"):
            yield len(raw_lines), "Files must not end with a new line"

    def _no_ids(self, text, raw_lines, code_lines, options):
        for i, line in enumerate(code_lines, start=1):
            if "{" not in line or line.lstrip().startswith("@"):
                continue
            selector = line.split("{", 1)[0]
            if ID_RE.search(selector):
                yield i, "ID selectors not allowed"

    def _no_important(self, text, raw_lines, code_lines, options):
        for i, line in enumerate(code_lines, start=1):
            if "!important" in line:
                yield i, "!important not allowed"

    def _declarations(self, code_lines):
        for i, line in enumerate(code_lines, start=1):
            if "{" in line:
                continue
            m = DECL_RE.match(line)
            if m:
                yield i, m

    def _hex_length(self, text, raw_lines, code_lines, options):
        style = options.get("style", "short")
        for i, m in self._declarations(code_lines):
            for hexm in HEX_RE.finditer(m.group("value")):
                value = hexm.group(1)
                shortable = len(value) == 6 and all(
                    value[k].lower() == value[k + 1].lower() for k in (0, 2, 4)
                )
                if style == "short" and shortable:
                    yield i, f"Color '#{value}' should be written in its short form"
                elif style == "long" and len(value) == 3:
                    yield i, f"Color '#{value}' should be written in its long form"

    def _hex_notation(self, text, raw_lines, code_lines, options):
        style = options.get("style", "lowercase")
        for i, m in self._declarations(code_lines):
            for hexm in HEX_RE.finditer(m.group("value")):
                value = hexm.group(1)
                expected = value.lower() if style == "lowercase" else value.upper()
                if value != expected:
                    yield i, f"Color '#{value}' should be written in {style}"

    def _zero_unit(self, text, raw_lines, code_lines, options):
        include = options.get("include", False)
        for i, m in self._declarations(code_lines):
            if not include and ZERO_UNIT_RE.search(m.group("value")):
                yield i, "No unit allowed for values of 0"

    def _no_debug(self, text, raw_lines, code_lines, options):
        for i, line in enumerate(code_lines, start=1):
            if line.lstrip().startswith("@debug"):
                yield i, "@debug not allowed"

    def _no_warn(self, text, raw_lines, code_lines, options):
        for i, line in enumerate(code_lines, start=1):
            if line.lstrip().startswith("@warn"):
                yield i, "@warn not allowed"

    def _no_color_keywords(self, text, raw_lines, code_lines, options):
        for i, m in self._declarations(code_lines):
            for word in WORD_RE.findall(m.group("value").lower()):
                if word in COLOR_KEYWORDS:
                    yield i, f"Color '{word}' should be written in its hexadecimal form"
                    break

    def _max_line_length(self, text, raw_lines, code_lines, options):
        length = int(options.get("length", 80))
        for i, line in enumerate(raw_lines, start=1):
            if len(line.rstrip("\r")) > length:
                yield i, f"Line should not exceed {length} characters"

    def _space_after_colon(self, text, raw_lines, code_lines, options):
        include = options.get("include", True)
        for i, m in self._declarations(code_lines):
            has_space = bool(m.group("space"))
            if include and not has_space:
                yield i, "Expected a space after the colon"
            elif not include and has_space:
                yield i, "Unexpected space after the colon"
