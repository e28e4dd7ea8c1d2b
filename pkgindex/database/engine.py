import sqlite3
import os
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .schema import SCHEMA, FTS_SCHEMA, TRIGGERS, DOCUMENT_FIELDS, TEXT_FIELDS
from pkgindex.exceptions import DocumentNotFoundError
from pkgindex.models.document import Document
from pkgindex.search.query import And, Or, Predicate, Term

logger = logging.getLogger(__name__)

# (field, "ascending" | "descending")
SortKey = Tuple[str, str]

LEXICAL_ORDER: Tuple[SortKey, ...] = (
    ("package", "ascending"),
    ("restpath", "ascending"),
)

_COLUMNS = "d.id, d.path, d.package, d.restpath, d.content, d.timestamp, d.suffix"
_LIKE_SPECIALS = ("%", "_", "\\")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _check_field(field: str, allowed: Sequence[str] = DOCUMENT_FIELDS) -> str:
    if field not in allowed:
        raise ValueError(f"Unknown document field '{field}'")
    return field


def to_sql(predicate: Predicate) -> Tuple[str, List[Any]]:
    """
    Render a predicate tree as a WHERE expression.

    Token terms read the FTS table (alias ``f``) with a substring LIKE,
    exact terms compare the base table (alias ``d``).

    Returns:
        (sql, params)
    """
    if isinstance(predicate, Term):
        if predicate.exact:
            return f"d.{_check_field(predicate.field)} = ?", [predicate.value]
        field = _check_field(predicate.field, TEXT_FIELDS)
        sql = f"f.{field} LIKE ?"
        if any(c in predicate.value for c in _LIKE_SPECIALS):
            # fts5 only indexes LIKE without an ESCAPE clause
            sql += " ESCAPE '\\'"
        return sql, [f"%{_escape_like(predicate.value)}%"]

    if isinstance(predicate, (And, Or)):
        if not predicate.children:
            # empty AND selects everything, empty OR nothing
            return ("1" if isinstance(predicate, And) else "0"), []
        joiner = " AND " if isinstance(predicate, And) else " OR "
        parts = []
        params: List[Any] = []
        for child in predicate.children:
            sql, child_params = to_sql(child)
            parts.append(f"({sql})")
            params.extend(child_params)
        return joiner.join(parts), params

    raise TypeError(f"Not a predicate: {predicate!r}")


def _needs_index(predicate: Predicate) -> bool:
    if isinstance(predicate, Term):
        return not predicate.exact
    return any(_needs_index(c) for c in predicate.children)


def _to_document(row: sqlite3.Row) -> Document:
    return Document(
        path=row["path"],
        package=row["package"],
        restpath=row["restpath"],
        content=row["content"],
        timestamp=row["timestamp"],
        suffix=row["suffix"],
        id=row["id"],
    )


class IndexEngine:
    """SQLite document store with an FTS5 trigram index over its text fields.

    One connection per engine; ``":memory:"`` gives an isolated table.
    """

    def __init__(self, db_path: str = ":memory:", timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout
        self._conn = self._connect()
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self.db_path != ":memory:":
            # Ensure directory exists
            db_dir = os.path.dirname(os.path.abspath(self.db_path))
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)

        # Autocommit; transaction() opens explicit write transactions
        conn = sqlite3.connect(
            self.db_path, timeout=self.timeout, isolation_level=None
        )
        conn.row_factory = sqlite3.Row

        # Enable WAL mode for better concurrency
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _init_db(self):
        self._conn.executescript(SCHEMA)
        self._conn.executescript(FTS_SCHEMA)
        self._conn.executescript(TRIGGERS)

    def close(self):
        self._conn.close()

    def __enter__(self) -> "IndexEngine":
        return self

    def __exit__(self, *exc_info):
        self.close()

    @contextmanager
    def transaction(self) -> Iterator["IndexEngine"]:
        """Write transaction; the database is locked for writers until it ends."""
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield self
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    # Record operations
    def insert(self, key: str, fields: Dict[str, Any]) -> None:
        values = dict(fields, path=key)
        columns = [_check_field(name) for name in values]
        self._conn.execute(
            f"INSERT INTO documents ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})",
            [values[c] for c in columns],
        )

    def get(self, key: str) -> Optional[Document]:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents d WHERE d.path = ?", (key,)
        ).fetchone()
        return _to_document(row) if row else None

    def update(self, key: str, fields: Dict[str, Any]) -> None:
        assignments = ", ".join(f"{_check_field(name)} = ?" for name in fields)
        cursor = self._conn.execute(
            f"UPDATE documents SET {assignments} WHERE path = ?",
            [*fields.values(), key],
        )
        if cursor.rowcount == 0:
            raise DocumentNotFoundError(key)

    def delete(self, key: str) -> None:
        cursor = self._conn.execute("DELETE FROM documents WHERE path = ?", (key,))
        if cursor.rowcount == 0:
            raise DocumentNotFoundError(key)

    def delete_all(self) -> int:
        return self._conn.execute("DELETE FROM documents").rowcount

    # Queries
    def select(
        self,
        predicate: Predicate,
        sort: Sequence[SortKey] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """
        Documents matching ``predicate``, sorted then windowed.

        Args:
            predicate: Predicate tree (``And()`` for everything)
            sort: (field, "ascending"|"descending") pairs, applied in order
            offset: Rows to skip after sorting
            limit: Maximum rows to return (None for all)
        """
        where, params = to_sql(predicate)
        source = "documents d"
        if _needs_index(predicate):
            source += " JOIN documents_fts f ON f.rowid = d.id"

        sql = f"SELECT {_COLUMNS} FROM {source} WHERE {where}"
        if sort:
            order = []
            for field, direction in sort:
                if direction not in ("ascending", "descending"):
                    raise ValueError(f"Unknown sort order '{direction}'")
                order.append(
                    f"d.{_check_field(field)} {'ASC' if direction == 'ascending' else 'DESC'}"
                )
            sql += " ORDER BY " + ", ".join(order)
        if limit is not None or offset:
            # LIMIT -1 is unbounded in SQLite
            sql += " LIMIT ? OFFSET ?"
            params.extend([-1 if limit is None else limit, offset])

        cursor = self._conn.execute(sql, params)
        return [_to_document(row) for row in cursor.fetchall()]

    def scan(self) -> Iterator[Document]:
        """Every document in storage order, read lazily."""
        cursor = self._conn.execute(f"SELECT {_COLUMNS} FROM documents d")
        for row in cursor:
            yield _to_document(row)

    def count(self) -> int:
        return self._conn.execute("SELECT count(*) FROM documents").fetchone()[0]

    def count_by(self, field: str) -> Dict[str, int]:
        column = _check_field(field)
        cursor = self._conn.execute(
            f"SELECT {column} AS value, count(*) AS n FROM documents "
            f"GROUP BY {column} ORDER BY {column}"
        )
        return {row["value"]: row["n"] for row in cursor.fetchall()}
