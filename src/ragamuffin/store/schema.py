"""Database schema for the content store.

Contains schema version and SQL for creating the database schema.
"""

# Schema version for migrations
# v1: vaults and chunks tables, UNIQUE(hash, vault_id)
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

-- Named document roots under management
CREATE TABLE IF NOT EXISTS vaults (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT NOT NULL UNIQUE,
    root_path TEXT NOT NULL
);

-- Content-addressed chunks; vec is a JSON array of floats
CREATE TABLE IF NOT EXISTS chunks (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    vault_id  INTEGER NOT NULL,
    hash      TEXT NOT NULL,
    text      TEXT NOT NULL,
    vec       TEXT NOT NULL,
    UNIQUE(hash, vault_id),
    FOREIGN KEY (vault_id) REFERENCES vaults(id)
);

CREATE INDEX IF NOT EXISTS idx_chunks_vault ON chunks(vault_id);
"""
