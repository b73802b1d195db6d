from sitepipe.builders.prettify import prettify_html

UGLY = (
    "<!DOCTYPE html><html lang=\"en\"><head><title>T</title></head><body>"
    "<div class=\"a\"><p>Some <strong>bold   text</strong> here</p>"
    "<ul><li>One</li><li>Two</li></ul></div>"
    "<pre>  keep\n    this</pre>"
    "<script>\n        var x = 1;\n          var y = 2;\n</script>"
    "</body></html>"
)


def test_block_elements_indented():
    out = prettify_html(UGLY, unformatted=["strong"])
    lines = out.splitlines()
    assert lines[0] == "<!DOCTYPE html>"
    assert "<head>" in lines
    assert '    <div class="a">' in lines
    assert "        <p>Some <strong>bold   text</strong> here</p>" in lines
    assert "            <li>One</li>" in lines


def test_preformatted_content_untouched():
    out = prettify_html(UGLY)
    assert "<pre>  keep\n    this</pre>" in out


def test_script_body_reindented():
    out = prettify_html(UGLY)
    assert "\n        var x = 1;\n          var y = 2;\n    </script>" in out


def test_idempotent():
    once = prettify_html(UGLY, unformatted=["strong", "code"])
    assert prettify_html(once, unformatted=["strong", "code"]) == once


def test_indent_options():
    out = prettify_html("<div><p>x</p></div>", indent_size=1, indent_char="\t")
    assert out == "<div>\n\t<p>x</p>\n</div>\n"
