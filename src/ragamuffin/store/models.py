"""Data models for the content store."""

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Vault:
    """A named root directory under management."""

    id: int
    name: str
    root_path: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Vault":
        """Create from database row."""
        return cls(id=row["id"], name=row["name"], root_path=row["root_path"])

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "root_path": self.root_path}


@dataclass(frozen=True)
class Chunk:
    """A content-addressed slice of text plus its embedding vector."""

    id: int
    vault_id: int
    hash: str
    text: str
    vector: list[float] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Chunk":
        """Create from database row, decoding the JSON vector."""
        return cls(
            id=row["id"],
            vault_id=row["vault_id"],
            hash=row["hash"],
            text=row["text"],
            vector=[float(x) for x in json.loads(row["vec"])],
        )

    @property
    def dimensions(self) -> int:
        return len(self.vector)


@dataclass
class VaultInfo:
    """A vault with its on-disk document listing, for display."""

    vault: Vault
    files: list[str] = field(default_factory=list)
    chunk_count: int = 0


def encode_vector(vector: list[float]) -> str:
    """Serialize a vector as an ordered JSON number array."""
    return json.dumps([float(x) for x in vector])
