import json

from sitepipe.builders.sourcemap import ConcatSourceMap, vlq_encode


def test_vlq_encode():
    assert vlq_encode(0) == "A"
    assert vlq_encode(1) == "C"
    assert vlq_encode(-1) == "D"
    assert vlq_encode(16) == "gB"


def test_concat_map_lines():
    smap = ConcatSourceMap(file="main.js")
    smap.add("vendor.js", "a\nb\n")
    smap.add("app.js", "c")
    assert smap.code == "a\nb\n\nc"
    assert smap.mappings() == "AAAA;AACA;;ACDA"
    payload = json.loads(smap.to_json())
    assert payload["version"] == 3
    assert payload["sources"] == ["vendor.js", "app.js"]
    assert payload["sourcesContent"] == ["a\nb\n", "c"]
