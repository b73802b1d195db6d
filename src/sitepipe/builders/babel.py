from __future__ import annotations

"""ES2015+ to ES5 through the Babel standalone build bundled with dukpy."""

from functools import lru_cache
from pathlib import Path
from typing import Sequence

import dukpy

TRANSFORM = (
    "var out = Babel.transform(dukpy.source, {presets: dukpy.presets, filename: dukpy.filename});"
    "out.code;"
)


@lru_cache(maxsize=1)
def compiler_source() -> str:
    """Text of the Babel build shipped in dukpy's ``jsmodules`` folder."""
    modules = Path(dukpy.__file__).parent / "jsmodules"
    candidates = sorted(modules.glob("babel*.js"))
    if not candidates:
        raise RuntimeError(f"No Babel compiler found in {modules}")
    return candidates[-1].read_text(encoding="utf-8")


def transpile(
    source: str, presets: Sequence[str] = ("es2015",), filename: str = "input.js"
) -> str:
    """Transpiled `source`; syntax errors raise ``dukpy.JSRuntimeError``."""
    return dukpy.evaljs(
        [compiler_source(), TRANSFORM],
        source=source,
        presets=list(presets),
        filename=filename,
    )
