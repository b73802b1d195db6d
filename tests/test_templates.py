from pathlib import Path

import pytest
from jinja2 import TemplateNotFound

from sitepipe.builders.templates import PageComposer, split_front_matter

from conftest import write


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    write(tmp_path / "layouts" / "default.html", "<main>{{ body }}</main>{% include 'footer.html' %}\n")
    write(tmp_path / "layouts" / "wide.html", "<div class=\"wide\">{{ body }}</div>\n")
    write(tmp_path / "partials" / "footer.html", "<footer>{{ site.name }}</footer>")
    write(tmp_path / "data" / "site.yml", "name: Demo\n")
    write(tmp_path / "pages" / "index.html", "---\ntitle: Home\n---\n<h1>{{ title }}</h1>")
    write(tmp_path / "pages" / "blog" / "post.html", "---\nlayout: wide\n---\n<a href=\"{{ root }}index.html\">{{ page }}</a>")
    return tmp_path


def _composer(tree: Path) -> PageComposer:
    return PageComposer(tree / "pages", tree / "layouts", tree / "partials", tree / "data")


def test_split_front_matter():
    meta, body = split_front_matter("---\nlayout: x\ntitle: T\n---\n<p>hi</p>")
    assert meta == {"layout": "x", "title": "T"}
    assert body == "<p>hi</p>"
    assert split_front_matter("<p>none</p>") == ({}, "<p>none</p>")


def test_default_layout_partials_and_data(tree: Path):
    html = _composer(tree).compose(tree / "pages" / "index.html")
    assert html == "<main><h1>Home</h1></main><footer>Demo</footer>\n"


def test_named_layout_and_root_prefix(tree: Path):
    html = _composer(tree).compose(tree / "pages" / "blog" / "post.html")
    assert html == '<div class="wide"><a href="../index.html">blog/post</a></div>\n'


def test_unknown_layout_names_the_layout(tree: Path):
    write(tree / "pages" / "odd.html", "---\nlayout: missing\n---\nx")
    with pytest.raises(TemplateNotFound, match="missing"):
        _composer(tree).compose(tree / "pages" / "odd.html")


def test_partials_cached_until_refresh(tree: Path):
    composer = _composer(tree)
    page = tree / "pages" / "index.html"
    assert "<footer>Demo</footer>" in composer.compose(page)
    write(tree / "partials" / "footer.html", "<footer>Changed</footer>")
    assert "<footer>Demo</footer>" in composer.compose(page)
    generation = composer.generation
    composer.refresh()
    assert composer.generation == generation + 1
    assert "<footer>Changed</footer>" in composer.compose(page)
