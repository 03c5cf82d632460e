"""Content store package.

- schema.py: Database schema version and SQL
- models.py: Data models (Vault, Chunk, VaultInfo)
- core.py: Main ContentStore class with connection management
- vaults.py: Vault CRUD operations
- chunks.py: Content-addressed chunk operations
"""

from ragamuffin.store.core import ContentStore
from ragamuffin.store.models import Chunk, Vault, VaultInfo
from ragamuffin.store.schema import SCHEMA_SQL, SCHEMA_VERSION

__all__ = [
    "ContentStore",
    "Chunk",
    "Vault",
    "VaultInfo",
    "SCHEMA_SQL",
    "SCHEMA_VERSION",
]
