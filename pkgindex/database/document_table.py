"""
Document table: the deduplicated catalog of files from package trees.

Each document is keyed by its canonical absolute path. Re-ingesting a path
updates the row in place, and only when the file on disk is strictly newer
than what was stored.
"""

import logging
import os
from typing import Callable, Iterator, List, Optional, Tuple

from .engine import IndexEngine, LEXICAL_ORDER
from pkgindex.exceptions import InvalidShortpathError
from pkgindex.models.document import AddResult, Document
from pkgindex.models.search import SearchOptions
from pkgindex.search.query import MATCH_ALL, Term, all_of, compile_query, equals
from pkgindex.utils.encoding import read_normalized
from pkgindex.utils.paths import normalize, split_shortpath, suffix_of, to_text

logger = logging.getLogger(__name__)

Callback = Optional[Callable[[Document], None]]


def _exists(path: str) -> bool:
    """Existence check that only treats "not found" as absent."""
    try:
        os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    return True


class DocumentTable:
    def __init__(self, engine: IndexEngine):
        self.engine = engine

    @classmethod
    def open(cls, db_path: str = ":memory:", timeout: float = 5.0) -> "DocumentTable":
        """Open a table; ``timeout`` is how long a write waits on another writer."""
        return cls(IndexEngine(db_path, timeout=timeout))

    def close(self):
        self.engine.close()

    def __enter__(self) -> "DocumentTable":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def size(self) -> int:
        return self.engine.count()

    __len__ = size

    def add(
        self, package_dir: str, restpath: str, package_name: Optional[str] = None
    ) -> AddResult:
        """
        Add one file to the table, or refresh it if it changed on disk.

        Args:
            package_dir: Package root, e.g. '/path/to/Package'
            restpath: Path below the root, e.g. 'src/Foo.hpp'
            package_name: Package name (default: basename of package_dir)

        Returns:
            AddResult.NEW_FILE, AddResult.UPDATED, or AddResult.UNCHANGED when
            the stored timestamp is not older than the file's

        Raises:
            OSError: the file cannot be stat'ed or read
            ContentEncodingError: the name or content cannot be decoded
        """
        filename = os.path.abspath(os.path.join(package_dir, restpath))
        path = normalize(filename)
        package = to_text(package_name or os.path.basename(os.path.normpath(package_dir)))
        restpath = to_text(restpath)
        suffix = suffix_of(path)
        # The OS is asked with the native name, not the re-encoded one
        timestamp = os.stat(filename).st_mtime

        with self.engine.transaction():
            record = self.engine.get(path)

            if record is None:
                self.engine.insert(
                    path,
                    {
                        "package": package,
                        "restpath": restpath,
                        "content": read_normalized(filename),
                        "timestamp": timestamp,
                        "suffix": suffix,
                    },
                )
                logger.debug("New file %s", path)
                return AddResult.NEW_FILE

            if record.timestamp < timestamp:
                self.engine.update(
                    path,
                    {
                        "package": package,
                        "restpath": restpath,
                        "content": read_normalized(filename),
                        "timestamp": timestamp,
                        "suffix": suffix,
                    },
                )
                logger.debug("Updated %s", path)
                return AddResult.UPDATED

        return AddResult.UNCHANGED

    # Removal
    def remove(self, path: str):
        """Delete the document keyed by ``path``.

        Raises:
            DocumentNotFoundError: nothing is stored under ``path``
        """
        self.engine.delete(path)
        logger.info("Removed %s", path)

    def remove_match_path(self, path: str, on_each: Callback = None) -> List[Document]:
        """Delete every document whose path contains ``path``.

        This is a substring match, like the ``paths`` search filter, so a
        fragment can remove more than one file.
        """
        matched = self.search(SearchOptions(paths=[path]))
        for doc in matched:
            if on_each:
                on_each(doc)
            self.remove(doc.path)
        return matched

    def remove_all(self) -> int:
        count = self.engine.delete_all()
        logger.info("Removed all %d documents", count)
        return count

    # Lookup
    def get_shortpath(self, shortpath: str) -> Optional[Document]:
        """Document whose package and restpath equal those of ``shortpath``."""
        package, restpath = self._divide_shortpath(shortpath)
        result = self.engine.select(
            all_of(equals("package", package), equals("restpath", restpath or "")),
            limit=1,
        )
        return result[0] if result else None

    def get_shortpath_below(self, shortpath: Optional[str] = None) -> List[Document]:
        """
        Documents at or below ``shortpath``.

        - empty: every document
        - 'package': every document of the package
        - 'package/dir': documents of the package whose restpath contains
          'dir' (a text match, so 'src/a' also finds 'src/ab.c')
        """
        if not shortpath:
            return self.engine.select(MATCH_ALL)

        package, restpath = self._divide_shortpath(shortpath)
        if not restpath:
            return self.engine.select(equals("package", package))
        return self.engine.select(
            all_of(equals("package", package), Term("restpath", restpath))
        )

    # Search
    def search(self, options: Optional[SearchOptions] = None, **filters) -> List[Document]:
        """
        Run a filtered search, ordered by package then restpath.

        Accepts either a ``SearchOptions`` or its fields as keyword arguments:
        ``table.search(patterns=["bar"], suffixes=["rb"], limit=10)``.
        """
        if options is None:
            options = SearchOptions(**filters)
        elif filters:
            options = SearchOptions(**{**options.model_dump(), **filters})

        return self.engine.select(
            compile_query(options),
            sort=LEXICAL_ORDER,
            offset=options.offset,
            limit=options.limit,
        )

    # Garbage collection
    def cleanup(self, on_each: Callback = None) -> int:
        """Delete documents whose file no longer exists. Returns the count."""
        return self._sweep(self.to_a(), on_each)

    def cleanup_package_name(self, package: str, on_each: Callback = None) -> int:
        """``cleanup`` restricted to documents of one package."""
        return self._sweep(self.engine.select(equals("package", package)), on_each)

    def _sweep(self, documents: List[Document], on_each: Callback) -> int:
        removed = 0
        for doc in documents:
            if _exists(doc.path):
                continue
            if on_each:
                on_each(doc)
            self.remove(doc.path)
            removed += 1
        return removed

    # Aggregates
    def each(self) -> Iterator[Document]:
        """Fresh scan over every document in storage order."""
        return self.engine.scan()

    __iter__ = each

    def to_a(self) -> List[Document]:
        return list(self.engine.scan())

    def package_counts(self):
        return self.engine.count_by("package")

    def dump(self) -> List[Tuple]:
        rows = []
        for doc in self.each():
            logger.debug("%r", doc.fields())
            rows.append(doc.fields())
        return rows

    def _divide_shortpath(self, shortpath: str) -> Tuple[str, Optional[str]]:
        if not shortpath:
            raise InvalidShortpathError(shortpath)
        package, restpath = split_shortpath(shortpath)
        if not package:
            raise InvalidShortpathError(shortpath)
        return package, restpath
