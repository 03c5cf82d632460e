"""Vault synchronization and staleness detection."""

from ragamuffin.sync.engine import SyncEngine, SyncResult
from ragamuffin.sync.staleness import StalenessDetector

__all__ = ["SyncEngine", "SyncResult", "StalenessDetector"]
