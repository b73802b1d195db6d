from __future__ import annotations

"""Image optimisation before copying to the output tree.

Raster images are re-encoded with Pillow (PNG/GIF ``optimize``, JPEG
progressive at a fixed quality); SVG loses comments and inter-tag whitespace.
The smaller of the optimised and original bytes is written.
"""

import io
import re
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".svg")

_SVG_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_SVG_GAP_RE = re.compile(r">\s+<")


def optimize_svg(data: bytes) -> bytes:
    text = data.decode("utf-8")
    text = _SVG_COMMENT_RE.sub("", text)
    text = _SVG_GAP_RE.sub("><", text.strip())
    return text.encode("utf-8")


def optimize_raster(data: bytes, suffix: str, jpeg_quality: int = 85) -> bytes:
    with Image.open(io.BytesIO(data)) as img:
        out = io.BytesIO()
        if suffix in (".jpg", ".jpeg"):
            if img.mode not in ("RGB", "L", "CMYK"):
                img = img.convert("RGB")
            img.save(out, "JPEG", quality=jpeg_quality, optimize=True, progressive=True)
        elif suffix == ".png":
            img.save(out, "PNG", optimize=True)
        elif suffix == ".gif":
            frames = getattr(img, "n_frames", 1)
            img.save(out, "GIF", optimize=True, save_all=frames > 1)
        else:
            return data
        return out.getvalue()


def optimize_image(data: bytes, suffix: str, jpeg_quality: int = 85) -> bytes:
    """Return the optimised bytes, or `data` when optimisation doesn't help.

    Raises OSError (Pillow's UnidentifiedImageError included) or
    UnicodeDecodeError for files that are not what their suffix says.
    """
    suffix = suffix.lower()
    if suffix == ".svg":
        optimized = optimize_svg(data)
    else:
        optimized = optimize_raster(data, suffix, jpeg_quality)
    return optimized if len(optimized) < len(data) else data


def copy_image(
    src: Path, dest: Path, optimize: bool = True, jpeg_quality: int = 85
) -> Optional[str]:
    """Write `src` to `dest`, optimised when possible.

    Returns an error description when the image had to be copied verbatim.
    """
    data = Path(src).read_bytes()
    error = None
    if optimize:
        try:
            data = optimize_image(data, Path(src).suffix, jpeg_quality)
        except (OSError, UnidentifiedImageError, UnicodeDecodeError, ValueError) as exc:
            error = f"{type(exc).__name__}: {exc}"
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    return error
