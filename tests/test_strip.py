import pytest

from sitepipe.builders.strip import drop_console, mask_js, remove_code

SOURCE = """'use strict';
var a = 1;
//removeIf(production)
var debugOnly = true;
//endRemoveIf(production)
/* removeIf(!production) */
var prodOnly = true;
/* endRemoveIf(!production) */
var b = 2;
"""


def test_remove_code_drops_enabled_blocks():
    out = remove_code(SOURCE, {"production": True})
    assert "debugOnly" not in out
    assert "removeIf(production)" not in out
    assert "prodOnly" in out
    assert "var a = 1;" in out and "var b = 2;" in out


def test_remove_code_negated_condition():
    out = remove_code(SOURCE, {"production": False})
    assert "debugOnly" in out
    assert "prodOnly" not in out


def test_remove_code_html_markers_and_nesting():
    html = (
        "<p>keep</p>\n<!-- removeIf(production) -->\n<p>dev</p>\n"
        "<!-- removeIf(production) -->\n<p>inner</p>\n<!-- endRemoveIf(production) -->\n"
        "<p>still dev</p>\n<!-- endRemoveIf(production) -->\n<p>end</p>\n"
    )
    out = remove_code(html, {"production": True})
    assert out == "<p>keep</p>\n<p>end</p>\n"


def test_remove_code_unterminated_block():
    with pytest.raises(ValueError):
        remove_code("//removeIf(production)\nvar x;\n", {"production": True})


def test_drop_console_statements_and_expressions():
    src = (
        "console.log('ready', fn(1, 2));\n"
        "var x = flag && console.warn('x');\n"
        "if (x) { console.error(\"a ) b\"); }\n"
    )
    out = drop_console(src)
    assert "console" not in out
    assert "var x = flag && void 0;" in out
    assert out.splitlines()[2].replace(" ", "") == "if(x){}"


def test_drop_console_ignores_strings_and_comments():
    src = "var s = 'console.log(1)'; // console.log(2)\n"
    assert drop_console(src) == src


def test_mask_js_keeps_offsets():
    src = "var r = /a\\/b/g; var s = \"x\"; // c\n"
    masked = mask_js(src)
    assert len(masked) == len(src)
    assert "a\\/b" not in masked
    assert masked.startswith("var r = ")


def test_drop_console_leaves_member_access_alone():
    src = (
        "if (window.console && window.console.warn) {\n"
        "    window.console.warn(\"jQuery.Deferred exception: \" + error.message);\n"
        "}\n"
        "console.info('gone');\n"
    )
    out = drop_console(src)
    assert "void 0" not in out
    assert "window.console.warn(\"jQuery.Deferred exception: \" + error.message);" in out
    assert "gone" not in out
