from pathlib import Path

from sitepipe.orchestrator.cache import tree_digest
from sitepipe.orchestrator.cli import app
from sitepipe.tasks.scripts import concat_scripts, minify_js

from conftest import write

CONFIG = ["--config", "configs/base.yaml"]


def _vendor(site: Path) -> None:
    vendor = site / "src" / "assets" / "vendor" / "js"
    write(vendor / "jquery.js", "window.jQuery = window.$ = function () {};\n")
    write(vendor / "bootstrap.js", "window.bootstrapLoaded = true;\n")
    write(vendor / "slick.js", "$.fn = { slick: function () {} };\n")


def test_concat_puts_vendor_scripts_first_in_order(site: Path, params: dict):
    _vendor(site)
    write(site / "src" / "assets" / "js" / "another.js", "var another = 1;\n")
    concat_scripts(params)
    out = (site / "dist" / "assets" / "js" / "main.js").read_text()
    positions = [
        out.index("window.jQuery"),
        out.index("bootstrapLoaded"),
        out.index("slick: function"),
        out.index("var another"),
        out.index("$(document).ready"),
    ]
    assert positions == sorted(positions)
    assert out.rstrip().endswith("//# sourceMappingURL=main.js.map")
    assert (site / "dist" / "assets" / "js" / "main.js.map").is_file()


def test_minified_script_has_no_console_or_dev_blocks(site: Path, params: dict):
    _vendor(site)
    write(site / "src" / "assets" / "js" / "extra.js", "console.log('x');\nvar keepMe = 1;\n")
    concat_scripts(params)
    minify_js(params)
    out = (site / "dist" / "assets" / "js" / "main.min.js").read_text()
    assert "console." not in out
    assert "removeIf" not in out
    assert "development build" not in out
    assert "keepMe" in out
    assert "slick" in out


def test_prod_build_is_reproducible(site: Path, runner):
    _vendor(site)
    first = runner.invoke(app, ["prod", "--no-serve", *CONFIG])
    assert first.exit_code == 0, first.output
    digest = tree_digest(site / "dist")
    second = runner.invoke(app, ["prod", "--no-serve", *CONFIG])
    assert second.exit_code == 0, second.output
    assert tree_digest(site / "dist") == digest

    dist = site / "dist"
    for name in ("main.css", "main-rtl.css", "main.min.css", "main.css.map"):
        assert (dist / "assets" / "css" / name).is_file(), name
    assert (dist / "assets" / "js" / "main.min.js").is_file()
    assert (dist / "assets" / "images" / "logo.svg").is_file()
    index = (dist / "index.html").read_text()
    assert 'href="assets/css/main.min.css"' in index
    assert 'src="assets/js/main.min.js"' in index
    assert "build:" not in index
    nested = (dist / "services" / "web.html").read_text()
    assert 'src="../assets/js/main.min.js"' in nested
    css = (dist / "assets" / "css" / "main.css").read_text()
    assert "-webkit-user-select" in css
    assert "position: -webkit-sticky" in css
    assert not (site / "docs").exists()


def test_prod_docs_copy(site: Path, runner):
    result = runner.invoke(app, ["prod", "--no-serve", "--docs", *CONFIG])
    assert result.exit_code == 0, result.output
    assert (site / "docs" / "index.html").is_file()


def test_dev_build_active_links(site: Path, runner):
    result = runner.invoke(app, ["dev", "--no-serve", *CONFIG])
    assert result.exit_code == 0, result.output
    dist = site / "dist"
    assert (dist / "assets" / "js" / "custom.js").is_file()
    assert (dist / "assets" / "css" / "main.css.map").is_file()
    about = (dist / "about.html").read_text()
    assert about.count('class="nav-link active"') == 1
    assert 'href="about.html">About' in about.split('class="nav-link active"')[1]
    web = (dist / "services" / "web.html").read_text()
    assert "nav-link dropdown-toggle active" in web
    assert 'class="dropdown-item active"' in web
    assert "<!-- build:js -->" in web


def test_linters_exit_code(site: Path, runner):
    assert runner.invoke(app, ["prod", "--no-serve", *CONFIG]).exit_code == 0
    clean = runner.invoke(app, ["linters", *CONFIG])
    assert clean.exit_code == 0, clean.output
    write(site / "dist" / "broken.html", "<html><body><img src=\"a.png\"></body></html>\n")
    dirty = runner.invoke(app, ["linters", *CONFIG])
    assert dirty.exit_code != 0


def test_accessibility_reports(site: Path, runner):
    assert runner.invoke(app, ["prod", "--no-serve", *CONFIG]).exit_code == 0
    write(site / "dist" / "broken.html", "<html><body><img src=\"a.png\"></body></html>\n")
    result = runner.invoke(app, ["accessibility", *CONFIG])
    assert result.exit_code == 0, result.output
    reports = site / "accessibility-reports"
    assert (reports / "index.txt").is_file()
    assert (reports / "services" / "web.txt").is_file()
    assert "H37" in (reports / "broken.txt").read_text()


def test_list_and_unknown_task(site: Path, runner):
    listed = runner.invoke(app, ["list", *CONFIG])
    assert listed.exit_code == 0
    for name in ("compile_scss", "compile_html", "minify_js", "lint_html", "watch_files"):
        assert f"- {name}:" in listed.output
    missing = runner.invoke(app, ["run-task", "nope", *CONFIG])
    assert missing.exit_code == 1


def test_run_single_task(site: Path, runner):
    result = runner.invoke(app, ["run-task", "compile_html", *CONFIG])
    assert result.exit_code == 0, result.output
    assert (site / "dist" / "services" / "web.html").is_file()


def test_init_writes_starter_site(tmp_path: Path, runner):
    target = tmp_path / "new-site"
    result = runner.invoke(app, ["init", str(target)])
    assert result.exit_code == 0, result.output
    for rel in (
        "configs/base.yaml",
        ".jshintrc",
        ".htmllintrc",
        ".scss-lint.yml",
        "src/layouts/default.html",
        "src/pages/index.html",
        "src/assets/scss/main.scss",
        "src/assets/js/custom.js",
    ):
        assert (target / rel).is_file(), rel
    again = runner.invoke(app, ["init", str(target)])
    assert "Wrote 0 file(s)" in again.output
