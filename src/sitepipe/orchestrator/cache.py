from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable


def file_digest(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def safe_mtime(path: Path) -> float | None:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return None


def outputs_digest(paths: Iterable[Path], root: Path | None = None) -> str | None:
    """Combined digest of every existing file in `paths`.

    Paths are hashed relative to `root` when given so that two trees built in
    different directories compare equal. Returns None when nothing exists.
    """
    h = hashlib.sha256()
    seen = False
    for p in sorted({Path(p) for p in paths}, key=str):
        if not p.is_file():
            continue
        label = p
        if root is not None:
            try:
                label = p.relative_to(root)
            except ValueError:
                pass
        h.update(label.as_posix().encode("utf-8"))
        h.update(b"\0")
        h.update(file_digest(p).encode("ascii"))
        h.update(b"\n")
        seen = True
    return h.hexdigest() if seen else None


def tree_digest(root: Path) -> str | None:
    root = Path(root)
    if not root.is_dir():
        return None
    return outputs_digest((p for p in root.rglob("*") if p.is_file()), root=root)


def is_newer(src: Path, dest: Path) -> bool:
    """True when `dest` is missing or older than `src` (incremental copy)."""
    src_mtime = safe_mtime(src)
    dest_mtime = safe_mtime(dest)
    if dest_mtime is None:
        return True
    if src_mtime is None:
        return False
    return src_mtime > dest_mtime
