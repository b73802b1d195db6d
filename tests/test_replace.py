from sitepipe.builders.replace import replace_blocks

PAGE = """<head>
    <!-- build:css -->
    <link rel="stylesheet" href="assets/css/main.css">
    <!-- endbuild -->
    <!-- build:extra -->
    <link rel="stylesheet" href="assets/css/extra.css">
    <!-- endbuild -->
</head>
<body>
    <!-- build:js -->
    <script src="assets/vendor/js/jquery.js"></script>
    <script src="assets/js/custom.js"></script>
    <!-- endbuild -->
</body>
"""

BUNDLES = {"js": "assets/js/main.min.js", "css": "assets/css/main.min.css"}


def test_blocks_point_at_bundles():
    out = replace_blocks(PAGE, BUNDLES)
    assert '    <link rel="stylesheet" href="assets/css/main.min.css">' in out
    assert '    <script src="assets/js/main.min.js"></script>' in out
    assert "custom.js" not in out and "build:" not in out
    assert "extra.css" not in out


def test_prefix_and_keep_unassigned():
    out = replace_blocks(PAGE, BUNDLES, prefix="../", keep_unassigned=True)
    assert 'src="../assets/js/main.min.js"' in out
    assert 'href="assets/css/extra.css"' in out
    assert "endbuild" not in out
