"""Exceptions raised by the document table and its helpers.

Filesystem failures are not wrapped: they surface as the built-in
``OSError`` family so callers can tell a vanished file from a bad request.
"""

from typing import Optional


class PkgIndexError(Exception):
    """Base class for every pkgindex error."""


class DocumentNotFoundError(PkgIndexError, KeyError):
    """Raised when a removal or lookup targets a path absent from the table.

    Attributes:
        path: Canonical path that was requested
    """

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"Document not found: {self.path}"


class ContentEncodingError(PkgIndexError, UnicodeError):
    """Raised when a file name or file content cannot be turned into text."""

    def __init__(self, name: str, encoding: Optional[str] = None):
        message = f"Cannot decode {name!r}"
        if encoding:
            message += f" as {encoding}"
        super().__init__(message)
        self.name = name
        self.encoding = encoding


class InvalidShortpathError(PkgIndexError, ValueError):
    """Raised when a short path has no package component."""

    def __init__(self, shortpath: Optional[str]):
        super().__init__(f"Invalid short path: {shortpath!r}")
        self.shortpath = shortpath
