SCHEMA = """
-- One row per indexed file, keyed by canonical absolute path
CREATE TABLE IF NOT EXISTS documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT NOT NULL UNIQUE,
    package TEXT NOT NULL,
    restpath TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp REAL NOT NULL,
    suffix TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_documents_package ON documents(package, restpath);
"""

# FTS5 virtual table; trigram serves plain LIKE '%term%' from the index
FTS_SCHEMA = """
CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
    path,
    package,
    restpath,
    content,
    suffix,
    tokenize='trigram'
);
"""

# Triggers to keep FTS in sync
# Note: always DROP before CREATE to ensure the latest definition is applied
# (CREATE TRIGGER IF NOT EXISTS won't update an already-existing trigger)
TRIGGERS = """
DROP TRIGGER IF EXISTS documents_ai;
DROP TRIGGER IF EXISTS documents_ad;
DROP TRIGGER IF EXISTS documents_au;

CREATE TRIGGER documents_ai AFTER INSERT ON documents
BEGIN
  INSERT INTO documents_fts(rowid, path, package, restpath, content, suffix)
  VALUES (new.id, new.path, new.package, new.restpath, new.content, new.suffix);
END;

CREATE TRIGGER documents_ad AFTER DELETE ON documents BEGIN
  DELETE FROM documents_fts WHERE rowid = old.id;
END;

-- FTS5 does NOT reliably support INSERT OR REPLACE for existing rowids;
-- the DELETE + INSERT pattern is the safe alternative.
CREATE TRIGGER documents_au AFTER UPDATE ON documents
BEGIN
  DELETE FROM documents_fts WHERE rowid = old.id;

  INSERT INTO documents_fts(rowid, path, package, restpath, content, suffix)
  VALUES (new.id, new.path, new.package, new.restpath, new.content, new.suffix);
END;
"""

DOCUMENT_FIELDS = ("path", "package", "restpath", "content", "timestamp", "suffix")

# Fields carried by the inverted index
TEXT_FIELDS = ("path", "package", "restpath", "content", "suffix")
