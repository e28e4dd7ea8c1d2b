"""pkgindex - incremental source file catalog with multi-facet search."""

__version__ = "0.1.0"
