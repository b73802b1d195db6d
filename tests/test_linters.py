import json
from pathlib import Path

from sitepipe.builders.htmllint import HtmlLinter
from sitepipe.builders.jslint import JsLinter
from sitepipe.builders.scsslint import ScssLinter

GOOD_HTML = """<!DOCTYPE html>
<html lang="en">
<head><title>Ok</title></head>
<body><img src="a.png" alt="A"><a href="x.html" target="_blank" rel="noopener">x</a></body>
</html>
"""


def _codes(findings):
    return [f.code for f in findings]


def test_scss_clean_file():
    text = "$brand: #2a6f97;\n\n.a {\n  color: $brand;\n  margin: 0;\n}\n"
    assert ScssLinter().lint_text(text) == []


def test_scss_rules():
    text = "#main {\n    color: red !important;\n  margin: 0px;\n  background:#FFFFFF;\n}"
    codes = _codes(ScssLinter().lint_text(text))
    for code in (
        "no-ids",
        "indentation",
        "no-important",
        "no-color-keywords",
        "zero-unit",
        "hex-length",
        "hex-notation",
        "space-after-colon",
        "final-newline",
    ):
        assert code in codes, code


def test_scss_rule_file_selects_rules(tmp_path: Path):
    config = tmp_path / ".scss-lint.yml"
    config.write_text("rules:\n  no-ids: 2\n  no-important: 0\n")
    linter = ScssLinter.from_file(config)
    findings = linter.lint_text("#a {\n  color: red !important;\n}\n")
    assert _codes(findings) == ["no-ids"]
    assert findings[0].severity == "error"
    assert findings[0].line == 1


def test_html_clean_page():
    assert HtmlLinter().lint_text(GOOD_HTML) == []


def test_html_findings_with_lines():
    html = (
        "<html>\n<head></head>\n<body>\n<img src=\"a.png\">\n"
        "<div id=\"x\" style=\"color: red\"></div>\n<p id=\"x\">dup</p>\n"
        "<b>bold</b>\n<a href=\"y\" target=\"_blank\">y</a>\n</body>\n</html>\n"
    )
    findings = HtmlLinter().lint_text(html, "page.html")
    found = {(f.code, f.line) for f in findings}
    assert ("doctype-first", 1) in found
    assert ("html-req-lang", 1) in found
    assert ("head-req-title", 2) in found
    assert ("img-req-alt", 4) in found
    assert ("attr-bans", 5) in found
    assert ("id-no-dup", 6) in found
    assert ("tag-bans", 7) in found
    assert ("link-req-noopener", 8) in found
    assert all(f.path == "page.html" for f in findings)


def test_html_rules_object(tmp_path: Path):
    config = tmp_path / ".htmllintrc"
    config.write_text(json.dumps({"img-req-alt": "allownull", "line-max-len": 20}))
    linter = HtmlLinter.from_file(config)
    findings = linter.lint_text('<img src="a" alt="">\n<p>this line is rather long</p>\n')
    assert _codes(findings) == ["line-max-len"]
    assert findings[0].line == 2


def test_js_defaults():
    text = (
        "var a = \"x\";\n"
        "if (a == 1) a = 2;\n"
        "debugger;\n"
        "eval('1');  \n"
    )
    findings = JsLinter().lint_text(text, "app.js")
    codes = _codes(findings)
    assert "E007" in codes
    assert "W109" in codes
    assert codes.count("W116") == 2
    assert "W087" in codes and "W061" in codes and "W102" in codes


def test_js_clean_and_options(tmp_path: Path):
    clean = "'use strict';\n\nvar s = 'ok';\nif (s === 'ok') {\n    console.log(s);\n}\n"
    assert JsLinter().lint_text(clean) == []
    config = tmp_path / ".jshintrc"
    config.write_text(json.dumps({"devel": False, "maxlen": 15}))
    codes = _codes(JsLinter.from_file(config).lint_text(clean))
    assert "W117" in codes
    assert "W101" in codes


def test_js_ignores_code_in_strings_and_comments():
    text = "'use strict';\nvar s = 'a == b; debugger';\n// eval(x) == y\n"
    assert JsLinter().lint_text(text) == []
