import os

import pytest

from pkgindex.database.document_table import DocumentTable


@pytest.fixture
def table():
    with DocumentTable.open(":memory:") as t:
        yield t


@pytest.fixture
def write_file(tmp_path):
    """Create ``tmp_path/relpath`` with ``content`` and an explicit mtime."""

    def _write(relpath, content="", mtime=1_600_000_000.0):
        file_path = tmp_path / relpath
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            file_path.write_bytes(content)
        else:
            file_path.write_text(content, encoding="utf-8")
        os.utime(file_path, (mtime, mtime))
        return file_path

    return _write


@pytest.fixture
def sample_table(table, tmp_path, write_file):
    """Two packages sharing a function name, as used by the search tests."""
    write_file("foo/a.rb", "def bar\nend\n")
    write_file("baz/b.py", "def bar():\n    pass\n")
    table.add(str(tmp_path / "foo"), "a.rb")
    table.add(str(tmp_path / "baz"), "b.py")
    return table
