"""
Record store backends and the factory that picks one per deployment.
"""
import logging

from survey_tracker.stores.base import RecordStore
from survey_tracker.stores.file_store import FileRecordStore
from survey_tracker.stores.sql_store import SqlRecordStore

logger = logging.getLogger('stores')

BACKENDS = ('file', 'sql')


def build_store(backend, database_url=None, data_file=None) -> RecordStore:
    """Instantiate the configured backend."""
    backend = (backend or '').lower()
    if backend == 'file':
        logger.info("Using file record store at %s", data_file)
        return FileRecordStore(data_file)
    if backend == 'sql':
        from survey_tracker.database import make_engine
        engine = make_engine(database_url)
        logger.info("Using SQL record store (%s)", engine.url.get_backend_name())
        return SqlRecordStore(engine)
    raise ValueError(f"Unknown STORE_BACKEND '{backend}', expected one of {', '.join(BACKENDS)}")
