"""Concurrent per-school review fetching for a ranking scope."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog
from pydantic import BaseModel, Field

from subrank.core.errors import InvalidScopeError
from subrank.models import Review

from .storage import ReviewStore

logger = structlog.get_logger()


class ReviewScope(BaseModel):
    """School IDs to rank over: a single school or a whole district."""

    school_ids: list[str] = Field(default_factory=list)

    @classmethod
    def for_school(cls, school_id: str) -> ReviewScope:
        return cls(school_ids=[school_id])

    @classmethod
    def for_district(cls, school_ids: Iterable[str]) -> ReviewScope:
        return cls(school_ids=list(school_ids))

    def resolved_ids(self) -> list[str]:
        """Validated school IDs with duplicates removed, first occurrence kept.

        Raises:
            InvalidScopeError: If the scope is empty or contains a blank ID.
        """
        if not self.school_ids:
            raise InvalidScopeError("no school IDs given")
        if any(not sid or not sid.strip() for sid in self.school_ids):
            raise InvalidScopeError("school IDs cannot be empty")
        return list(dict.fromkeys(self.school_ids))


@dataclass
class FetchResult:
    """Merged reviews for a scope plus the schools that could not be read."""

    reviews: list[Review] = field(default_factory=list)
    failed_school_ids: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """True when at least one school's reviews are missing."""
        return bool(self.failed_school_ids)


def _merge_key(review: Review) -> tuple:
    return (review.created_at, review.id)


class ReviewFetcher:
    """Fan out one fetch per school and merge the results deterministically.

    A school whose fetch fails or times out contributes no reviews and is
    listed in ``FetchResult.failed_school_ids``; the batch always completes.
    Merge order is scope order, then ``(created_at, id)`` inside each school,
    so completion timing never changes the output.
    """

    def __init__(
        self,
        store: ReviewStore,
        timeout_seconds: float = 10.0,
        max_concurrency: int = 8,
    ) -> None:
        """Initialize fetcher.

        Args:
            store: Review store to read from.
            timeout_seconds: Per-school fetch timeout.
            max_concurrency: Maximum fetches in flight at once.
        """
        self.store = store
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency

    async def fetch(self, scope: ReviewScope) -> FetchResult:
        """Fetch and merge reviews for every school in ``scope``.

        Raises:
            InvalidScopeError: If the scope has no usable school IDs.
        """
        school_ids = scope.resolved_ids()
        semaphore = asyncio.Semaphore(self.max_concurrency)
        logger.info("fetch_start", schools=len(school_ids))

        results = await asyncio.gather(
            *[self._fetch_one(school_id, semaphore) for school_id in school_ids]
        )

        reviews: list[Review] = []
        failed: list[str] = []
        for school_id, school_reviews in zip(school_ids, results, strict=True):
            if school_reviews is None:
                failed.append(school_id)
                continue
            reviews.extend(sorted(school_reviews, key=_merge_key))

        logger.info(
            "fetch_complete",
            schools=len(school_ids),
            reviews=len(reviews),
            failed=len(failed),
        )
        return FetchResult(reviews=reviews, failed_school_ids=failed)

    async def _fetch_one(
        self, school_id: str, semaphore: asyncio.Semaphore
    ) -> Sequence[Review] | None:
        """Fetch one school; None marks a failed or timed-out fetch."""
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    self.store.fetch_reviews(school_id), timeout=self.timeout_seconds
                )
            except TimeoutError:
                logger.warning(
                    "school_fetch_timeout", school_id=school_id, timeout=self.timeout_seconds
                )
            except Exception as e:
                logger.warning("school_fetch_failed", school_id=school_id, error=str(e))
            return None
