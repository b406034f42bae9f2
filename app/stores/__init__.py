"""Result store implementations"""

import logging

from app.core.config import settings
from app.stores.base import QuizResult, QuizResultInput, ResultFilter, ResultStore
from app.stores.memory import InMemoryResultStore
from app.stores.sql import SQLResultStore

logger = logging.getLogger(__name__)


def build_result_store() -> ResultStore:
    """Create the store selected by ``STORAGE_BACKEND``"""
    if settings.STORAGE_BACKEND == "memory":
        store = InMemoryResultStore()
        if settings.SEED_SAMPLE_DATA:
            store.seed_sample_data()
        logger.info("Using in-memory result store")
        return store

    logger.info("Using SQL result store")
    return SQLResultStore()


__all__ = [
    "InMemoryResultStore",
    "QuizResult",
    "QuizResultInput",
    "ResultFilter",
    "ResultStore",
    "SQLResultStore",
    "build_result_store",
]
