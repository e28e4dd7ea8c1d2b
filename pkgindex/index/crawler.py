import fnmatch
import logging
from collections import Counter
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from pkgindex.database.document_table import DocumentTable
from pkgindex.models.config import PackageConfig
from pkgindex.models.document import AddResult

logger = logging.getLogger(__name__)

IGNORED_DIRS = {".git", ".svn", ".hg", "CVS", "__pycache__", "node_modules"}

BINARY_SNIFF_BYTES = 8192


def is_binary(file_path: Path) -> bool:
    with open(file_path, "rb") as f:
        sample = f.read(BINARY_SNIFF_BYTES)
    return b"\x00" in sample


class Crawler:
    def __init__(
        self,
        root_path: str,
        glob_pattern: str = "**/*",
        ignore: Optional[List[str]] = None,
    ):
        self.root_path = Path(root_path)
        self.glob_pattern = glob_pattern
        self.ignore = ignore or []

    def scan(self) -> Iterator[str]:
        """
        Scans the package root for files matching the glob pattern.
        Returns an iterator of restpaths ('src/foo.c') in sorted order.
        """
        if not self.root_path.is_dir():
            return

        for file_path in sorted(self.root_path.glob(self.glob_pattern)):
            rel = file_path.relative_to(self.root_path)
            if any(part in IGNORED_DIRS for part in rel.parts):
                continue
            restpath = rel.as_posix()
            if self._is_ignored(restpath):
                continue
            if not file_path.is_file():
                continue
            if is_binary(file_path):
                logger.debug("Skipping binary file %s", restpath)
                continue
            yield restpath

    def _is_ignored(self, restpath: str) -> bool:
        name = restpath.rsplit("/", 1)[-1]
        return any(
            fnmatch.fnmatch(restpath, pattern) or fnmatch.fnmatch(name, pattern)
            for pattern in self.ignore
        )


def index_package(
    table: DocumentTable,
    package: PackageConfig,
    on_result: Optional[Callable[[str, AddResult], None]] = None,
) -> Counter:
    """Add every file of a package, then drop documents whose file is gone.

    Returns a Counter keyed by AddResult values plus "removed".
    """
    counts: Counter = Counter()
    crawler = Crawler(package.path, package.glob_pattern, package.ignore)
    for restpath in crawler.scan():
        result = table.add(package.path, restpath, package.name)
        counts[result.value] += 1
        if on_result:
            on_result(restpath, result)

    counts["removed"] = table.cleanup_package_name(package.name)
    logger.info("Indexed package %s: %s", package.name, dict(counts))
    return counts
