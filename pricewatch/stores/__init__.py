"""Record stores: where tasks come from and where prices go."""

from pricewatch.config import Settings
from pricewatch.db.session import create_session_factory
from pricewatch.stores.base import RecordStore
from pricewatch.stores.database import DatabaseRecordStore
from pricewatch.stores.supabase import SupabaseRecordStore


def create_record_store(settings: Settings) -> RecordStore:
    """Build the record store selected by ``settings.RECORD_STORE``."""
    if settings.RECORD_STORE == "database":
        engine, session_factory = create_session_factory(settings.DATABASE_URL)
        return DatabaseRecordStore(session_factory, engine=engine)
    return SupabaseRecordStore(settings.SUPABASE_URL, settings.SUPABASE_KEY)


__all__ = [
    "DatabaseRecordStore",
    "RecordStore",
    "SupabaseRecordStore",
    "create_record_store",
]
