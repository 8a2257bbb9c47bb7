from __future__ import annotations

import structlog

from subrank.core.config import StoreConfig
from subrank.core.errors import ConfigurationError

from .base import ReviewStore
from .db_store import DBReviewStore
from .documents import parse_review, parse_reviews, review_to_document
from .firestore import FirestoreReviewStore, decode_fields, decode_value
from .memory import InMemoryReviewStore
from .report_store import ReportStore

logger = structlog.get_logger()


def create_store(config: StoreConfig) -> ReviewStore:
    """Create the review store selected by ``config.backend``.

    Raises:
        ConfigurationError: If the Firestore backend is missing a project ID or token.
    """
    if config.backend == "memory":
        logger.info("using_memory_store")
        return InMemoryReviewStore()

    if config.backend == "firestore":
        if not config.project_id:
            msg = "store.project_id is required for the firestore backend"
            raise ConfigurationError(msg, "Add store.project_id to config.yaml.")
        return FirestoreReviewStore(
            project_id=config.project_id,
            token=config.get_token(),
            collection=config.collection,
            database=config.database,
        )

    return DBReviewStore(config.path)


__all__ = [
    "DBReviewStore",
    "FirestoreReviewStore",
    "InMemoryReviewStore",
    "ReportStore",
    "ReviewStore",
    "create_store",
    "decode_fields",
    "decode_value",
    "parse_review",
    "parse_reviews",
    "review_to_document",
]
