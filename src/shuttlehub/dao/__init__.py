"""Stores for sessions and the location registry."""

from shuttlehub.dao.base import SessionStore, StoreSnapshot, SyncStatus
from shuttlehub.dao.factory import create_store
from shuttlehub.dao.local_store import LocalFileStore
from shuttlehub.dao.memory_store import MemoryStore
from shuttlehub.dao.supabase_store import SupabaseStore

__all__ = [
    # Base
    "SessionStore",
    "StoreSnapshot",
    "SyncStatus",
    # Stores
    "LocalFileStore",
    "MemoryStore",
    "SupabaseStore",
    "create_store",
]
