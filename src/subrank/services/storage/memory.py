"""In-memory review store for the memory backend and tests."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from subrank.core.errors import ReviewStoreError
from subrank.models import Review

from .base import ReviewStore
from .documents import parse_review

logger = structlog.get_logger()


class InMemoryReviewStore(ReviewStore):
    """Serve reviews from a dict of school ID -> reviews.

    ``failing_school_ids`` raise ReviewStoreError and ``delays`` (seconds per
    school) simulate slow backends.
    """

    def __init__(
        self,
        reviews: dict[str, list[Review]] | None = None,
        failing_school_ids: set[str] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._reviews: dict[str, list[Review]] = {k: list(v) for k, v in (reviews or {}).items()}
        self.failing_school_ids = set(failing_school_ids or ())
        self.delays = dict(delays or {})
        self.calls: list[str] = []

    @classmethod
    def from_documents(cls, documents: dict[str, dict[str, Any]]) -> InMemoryReviewStore:
        """Build a store from {doc_id: document} pairs, grouped by schoolId."""
        store = cls()
        for doc_id, data in documents.items():
            review = parse_review(doc_id, data)
            if review is not None:
                store.add(review)
        return store

    def add(self, review: Review) -> None:
        self._reviews.setdefault(review.school_id, []).append(review)

    async def fetch_reviews(self, school_id: str) -> list[Review]:
        self.calls.append(school_id)
        delay = self.delays.get(school_id)
        if delay:
            await asyncio.sleep(delay)
        if school_id in self.failing_school_ids:
            raise ReviewStoreError(school_id, "simulated failure")
        reviews = list(self._reviews.get(school_id, []))
        logger.debug("memory_fetch", school_id=school_id, count=len(reviews))
        return reviews
