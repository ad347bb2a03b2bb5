"""
Job store factory — maps the STORE_BACKEND setting to a store instance.

One place knows how to build each backend; the API lifespan just calls
create_store(settings).
"""

from config.settings import Settings
from models.base import create_session_factory
from models.enums import StoreBackend
from store.base import AbstractJobStore
from store.memory import InMemoryJobStore
from store.sql import SqlJobStore


def create_store(config: Settings) -> AbstractJobStore:
    """Build the job store selected by `config.STORE_BACKEND`. Raises ValueError if unknown."""
    try:
        backend = StoreBackend(config.STORE_BACKEND)
    except ValueError:
        raise ValueError(f"Unknown store backend: {config.STORE_BACKEND}") from None

    if backend == StoreBackend.SQL:
        return SqlJobStore(create_session_factory(config.database_url))
    return InMemoryJobStore()
