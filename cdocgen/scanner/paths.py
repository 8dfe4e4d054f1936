"""Include-path resolution relative to the including file."""

from __future__ import annotations

import posixpath
from pathlib import Path

from cdocgen.models import Source

# ``?query`` and ``#fragment`` never name part of a file.
_SUBORDINATE = "?#"


def strip_query_fragment(target: str) -> str:
    """``"a/b.h?x#y"`` -> ``"a/b.h"``."""
    for i, ch in enumerate(target):
        if ch in _SUBORDINATE:
            return target[:i]
    return target


def looks_like_relative_path(target: str) -> bool:
    """Not absolute, not a fragment, and no ``//`` before any ``?#``."""
    path = strip_query_fragment(target)
    if not path or target[:1] in _SUBORDINATE:
        return False
    if path.startswith("/") or "//" in path:
        return False
    return not Path(path).is_absolute()


def resolve_include(including: str | Path | None, target: str) -> Path | None:
    """Resolve *target* against the directory of *including*.

    Returns the lexically simplified path when it names an existing file,
    otherwise None.
    """
    if not looks_like_relative_path(target):
        return None
    base = Path(including).parent if including else Path(".")
    joined = posixpath.normpath(
        posixpath.join(base.as_posix(), strip_query_fragment(target))
    )
    path = Path(joined)
    return path if path.is_file() else None


def read_source(path: str | Path) -> Source:
    """Read *path* as UTF-8 text; the label is the file's base name.

    Undecodable bytes are replaced.  Raises :class:`OSError` when the file
    cannot be read.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    return Source(label=path.name, text=text, path=str(path))
