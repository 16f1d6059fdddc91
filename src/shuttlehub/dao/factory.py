"""Build the configured store."""

from shuttlehub import get_logger
from shuttlehub.config import Settings, StorageBackend
from shuttlehub.dao.base import SessionStore
from shuttlehub.dao.local_store import LocalFileStore
from shuttlehub.dao.memory_store import MemoryStore
from shuttlehub.dao.supabase_store import SupabaseStore

logger = get_logger(__name__)


def create_store(settings: Settings) -> SessionStore:
    """Construct (but do not open) the store selected by ``storage_backend``."""
    logger.debug("store_selected", backend=settings.storage_backend.value)

    if settings.storage_backend == StorageBackend.MEMORY:
        return MemoryStore()

    if settings.storage_backend == StorageBackend.SUPABASE:
        return SupabaseStore(
            url=settings.supabase_url,
            key=settings.supabase_key.get_secret_value() if settings.supabase_key else None,
            sessions_table=settings.sessions_table,
            locations_table=settings.locations_table,
        )

    return LocalFileStore(settings.data_file)
