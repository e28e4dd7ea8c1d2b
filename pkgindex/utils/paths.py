"""Canonical path strings and short path helpers."""

import os
from typing import Optional, Tuple

from pkgindex.utils.encoding import to_canonical


def to_text(name: str) -> str:
    """Re-encode a native file name as canonical text.

    Names the OS handed back undecodable arrive surrogate-escaped; going
    through ``os.fsencode`` recovers the original bytes before decoding.
    """
    return to_canonical(os.fsencode(name), name)


def normalize(filename: str) -> str:
    """Absolute, canonical-text form of ``filename``. Idempotent."""
    return to_text(os.path.abspath(filename))


def split_shortpath(shortpath: str) -> Tuple[str, Optional[str]]:
    """
    Split ``package/rest/of/path`` on its first separator.

    'package/to/a.txt' -> ('package', 'to/a.txt')
    'package'          -> ('package', None)
    """
    if "/" in shortpath:
        package, restpath = shortpath.split("/", 1)
        return package, restpath
    return shortpath, None


def suffix_of(path: str) -> str:
    """Extension of the last path segment without the dot, or ''."""
    ext = os.path.splitext(path)[1]
    return ext[1:] if ext else ""
