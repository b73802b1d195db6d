from pathlib import Path

from sitepipe.builders.a11y import ERROR, NOTICE, WARNING, check_document, format_report, report_name

PAGE = """<!DOCTYPE html>
<html>
<head></head>
<body>
<img src="a.png">
<form><input type="text" id="q"><input type="submit" value="Go"></form>
<a href="x.html"></a>
<button></button>
<h1>Title</h1>
<h3>Skipped</h3>
<iframe src="map.html"></iframe>
<div id="d"></div><span id="d"></span>
<a href="y.html" tabindex="3">ok</a>
</body>
</html>
"""


def test_finds_wcag_issues():
    issues = check_document(PAGE)
    for code in (
        "H57.2",
        "H25.1.NoTitleEl",
        "H37",
        "F68",
        "H91.A.NoContent",
        "H91.Button.Name",
        "G141",
        "H64.1",
        "F77",
        "H4.2",
    ):
        assert any(code in i.code for i in issues), code
    kinds = {i.code.split(".")[-1]: i.type for i in issues}
    assert kinds["G141"] == WARNING
    assert any(i.type == NOTICE for i in issues)
    img = next(i for i in issues if i.code.endswith("H37"))
    assert img.type == ERROR and img.line == 5


def test_clean_page_has_no_issues():
    page = """<!DOCTYPE html><html lang="en"><head><title>T</title></head>
<body><img src="a.png" alt="Logo"><label for="q">Search</label><input id="q">
<a href="x.html">X</a><button>Go</button><h1>A</h1><h2>B</h2></body></html>"""
    assert check_document(page) == []


def test_report_text():
    issues = check_document(PAGE)
    text = format_report("index.html", issues)
    assert text.startswith("Accessibility report for index.html\n")
    assert "Code: WCAG2A.Principle1.Guideline1_1.1_1_1.H37" in text
    assert report_name(Path("blog/post.html")) == Path("blog/post.txt")
