import os
import sqlite3

import pytest

from pkgindex.database.document_table import DocumentTable
from pkgindex.exceptions import DocumentNotFoundError, InvalidShortpathError
from pkgindex.models.document import AddResult
from pkgindex.utils.paths import normalize


class TestAdd:
    def test_new_then_unchanged(self, table, tmp_path, write_file):
        write_file("pkg/src/a.rb", "def bar\nend\n")

        assert table.add(str(tmp_path / "pkg"), "src/a.rb") == AddResult.NEW_FILE
        first = table.to_a()

        assert table.add(str(tmp_path / "pkg"), "src/a.rb") == AddResult.UNCHANGED
        assert table.to_a() == first
        assert table.size() == 1

    def test_fields(self, table, tmp_path, write_file):
        write_file("pkg/src/a.rb", "def bar\n", mtime=1_650_000_000.25)
        table.add(str(tmp_path / "pkg"), "src/a.rb")

        doc = table.get_shortpath("pkg/src/a.rb")
        assert doc.path == normalize(str(tmp_path / "pkg" / "src" / "a.rb"))
        assert doc.package == "pkg"
        assert doc.restpath == "src/a.rb"
        assert doc.content == "def bar\n"
        assert doc.timestamp == 1_650_000_000.25
        assert doc.suffix == "rb"

    def test_package_name_override(self, table, tmp_path, write_file):
        write_file("checkout-1.2/a.c", "int x;")
        table.add(str(tmp_path / "checkout-1.2"), "a.c", "mylib")
        assert table.get_shortpath("mylib/a.c") is not None
        assert table.get_shortpath("checkout-1.2/a.c") is None

    def test_trailing_slash_package_dir(self, table, tmp_path, write_file):
        write_file("pkg/a.c", "int x;")
        table.add(str(tmp_path / "pkg") + os.sep, "a.c")
        assert table.get_shortpath("pkg/a.c") is not None

    def test_newer_file_updates_in_place(self, table, tmp_path, write_file):
        write_file("pkg/a.rb", "old body", mtime=1000.0)
        table.add(str(tmp_path / "pkg"), "a.rb")

        write_file("pkg/a.rb", "new body", mtime=2000.0)
        assert table.add(str(tmp_path / "pkg"), "a.rb", "renamed") == AddResult.UPDATED

        assert table.size() == 1
        (doc,) = table.to_a()
        assert doc.content == "new body"
        assert doc.timestamp == 2000.0
        assert doc.package == "renamed"
        assert table.search(patterns=["old"]) == []

    def test_older_file_never_regresses(self, table, tmp_path, write_file):
        write_file("pkg/a.rb", "current", mtime=2000.0)
        table.add(str(tmp_path / "pkg"), "a.rb")
        before = table.to_a()

        write_file("pkg/a.rb", "stale", mtime=1000.0)
        assert table.add(str(tmp_path / "pkg"), "a.rb") == AddResult.UNCHANGED
        assert table.to_a() == before

    def test_same_path_counted_once(self, table, tmp_path, write_file):
        write_file("pkg/a.rb", "x")
        pkg = str(tmp_path / "pkg")
        table.add(pkg, "a.rb")
        table.add(pkg, "a.rb", "other")
        table.add(str(tmp_path / "pkg" / ".." / "pkg"), "a.rb")
        assert table.size() == 1

    def test_missing_file_propagates(self, table, tmp_path):
        with pytest.raises(FileNotFoundError):
            table.add(str(tmp_path / "pkg"), "missing.rb")
        assert table.size() == 0

    def test_unchanged_does_not_read_content(self, table, tmp_path, write_file, monkeypatch):
        write_file("pkg/a.rb", "x")
        table.add(str(tmp_path / "pkg"), "a.rb")

        def fail(filename):
            raise AssertionError("content read on unchanged file")

        monkeypatch.setattr("pkgindex.database.document_table.read_normalized", fail)
        assert table.add(str(tmp_path / "pkg"), "a.rb") == AddResult.UNCHANGED

    def test_non_ascii_names(self, table, tmp_path, write_file):
        write_file("パッケージ/ソース/日本語.rb", "puts 'こんにちは'")
        table.add(str(tmp_path / "パッケージ"), "ソース/日本語.rb")

        doc = table.get_shortpath("パッケージ/ソース/日本語.rb")
        assert doc.path == normalize(str(tmp_path / "パッケージ" / "ソース" / "日本語.rb"))
        assert [d.restpath for d in table.search(keywords=["こんにちは"])] == ["ソース/日本語.rb"]

    def test_legacy_encoded_content(self, table, tmp_path, write_file):
        text = "日本語で書かれたソースコードのコメントです。" * 10
        write_file("pkg/a.txt", text.encode("euc_jp"))
        table.add(str(tmp_path / "pkg"), "a.txt")
        assert table.get_shortpath("pkg/a.txt").content == text


class TestConcurrentAdd:
    def test_lookup_and_insert_are_atomic(self, tmp_path, write_file):
        file_path = write_file("pkg/a.rb", "def bar\nend\n")
        db_path = str(tmp_path / "index.db")
        path = normalize(str(file_path))

        with DocumentTable.open(db_path) as first, DocumentTable.open(
            db_path, timeout=0.1
        ) as second:
            with first.engine.transaction():
                assert first.engine.get(path) is None
                # the other handle cannot slip in between lookup and insert
                with pytest.raises(sqlite3.OperationalError):
                    second.add(str(tmp_path / "pkg"), "a.rb")
                first.engine.insert(
                    path,
                    {
                        "package": "pkg",
                        "restpath": "a.rb",
                        "content": "def bar\nend\n",
                        "timestamp": os.stat(file_path).st_mtime,
                        "suffix": "rb",
                    },
                )

            assert second.add(str(tmp_path / "pkg"), "a.rb") == AddResult.UNCHANGED
            assert second.size() == 1
            assert first.size() == 1


class TestRemove:
    def test_remove(self, sample_table, tmp_path):
        sample_table.remove(normalize(str(tmp_path / "foo" / "a.rb")))
        assert sample_table.size() == 1

    def test_remove_missing_is_an_error(self, sample_table):
        with pytest.raises(DocumentNotFoundError):
            sample_table.remove("/definitely/not/indexed.rb")
        assert sample_table.size() == 2

    def test_remove_match_path_is_substring(self, table, tmp_path, write_file):
        for rel in ("pkg/lib/a.rb", "pkg/lib/b.rb", "pkg/library.rb", "pkg/other.rb"):
            write_file(rel, "x")
        pkg = str(tmp_path / "pkg")
        for rel in ("lib/a.rb", "lib/b.rb", "library.rb", "other.rb"):
            table.add(pkg, rel)

        seen = []
        removed = table.remove_match_path(os.path.join(pkg, "lib"), seen.append)

        assert sorted(d.restpath for d in removed) == ["lib/a.rb", "lib/b.rb", "library.rb"]
        assert seen == removed
        assert [d.restpath for d in table.to_a()] == ["other.rb"]

    def test_remove_all(self, sample_table):
        assert sample_table.remove_all() == 2
        assert sample_table.size() == 0
        assert sample_table.search() == []


class TestShortpath:
    def test_get_shortpath(self, sample_table):
        doc = sample_table.get_shortpath("foo/a.rb")
        assert (doc.package, doc.restpath) == ("foo", "a.rb")

    def test_get_shortpath_is_exact(self, sample_table):
        assert sample_table.get_shortpath("fo/a.rb") is None
        assert sample_table.get_shortpath("foo/a.r") is None

    def test_get_shortpath_package_only(self, sample_table):
        assert sample_table.get_shortpath("foo") is None

    def test_empty_shortpath_invalid(self, sample_table):
        with pytest.raises(InvalidShortpathError):
            sample_table.get_shortpath("")
        with pytest.raises(InvalidShortpathError):
            sample_table.get_shortpath("/a.rb")

    def test_below_everything(self, sample_table):
        assert len(sample_table.get_shortpath_below("")) == 2
        assert len(sample_table.get_shortpath_below(None)) == 2

    def test_below_package(self, sample_table):
        docs = sample_table.get_shortpath_below("foo")
        assert [(d.package, d.restpath) for d in docs] == [("foo", "a.rb")]

    def test_below_directory(self, table, tmp_path, write_file):
        for rel in ("src/a.c", "src/sub/b.c", "srcx/c.c", "doc/d.txt"):
            write_file(f"pkg/{rel}", "x")
            table.add(str(tmp_path / "pkg"), rel)
        write_file("other/src/e.c", "x")
        table.add(str(tmp_path / "other"), "src/e.c")

        docs = table.get_shortpath_below("pkg/src")
        # text match on restpath: 'srcx/c.c' contains 'src' too
        assert sorted(d.restpath for d in docs) == ["src/a.c", "src/sub/b.c", "srcx/c.c"]


class TestAggregates:
    def test_each_is_restartable(self, sample_table):
        assert len(list(sample_table.each())) == 2
        assert len(list(sample_table.each())) == 2
        assert len(sample_table) == 2

    def test_dump(self, sample_table):
        rows = sample_table.dump()
        assert len(rows) == 2
        assert {row[1] for row in rows} == {"foo", "baz"}
        assert all(len(row) == 6 for row in rows)

    def test_package_counts(self, sample_table):
        assert sample_table.package_counts() == {"baz": 1, "foo": 1}
